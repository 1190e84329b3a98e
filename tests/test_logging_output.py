# Tests for verbosity handling in the logging front-end

from adlookup.utils.logging import debug, error, good, info, set_verbosity, status, warn


class TestVerbosity:
    """Messages are filtered by verbosity and always go to stderr."""

    def test_quiet_default(self, capsys):
        set_verbosity(False, False)
        info("Info message")
        good("Good message")
        debug("Debug message")

        captured = capsys.readouterr()
        assert "Info message" not in captured.err
        assert "Good message" not in captured.err
        assert "Debug message" not in captured.err
        assert captured.out == ""

    def test_always_visible(self, capsys):
        set_verbosity(False, False)
        status("Status message")
        warn("Warn message")
        error("Error message")

        err = capsys.readouterr().err
        assert "Status message" in err
        assert "[!] Warn message" in err
        assert "[-] Error message" in err

    def test_verbose(self, capsys):
        set_verbosity(True, False)
        info("Info message")
        good("Good message")
        debug("Debug message")

        err = capsys.readouterr().err
        assert "[*] Info message" in err
        assert "[+] Good message" in err
        assert "Debug message" not in err

    def test_debug(self, capsys):
        set_verbosity(False, True)
        debug("Debug message")
        assert "[DEBUG] Debug message" in capsys.readouterr().err

    def test_debug_with_traceback(self, capsys):
        set_verbosity(False, True)
        try:
            raise ValueError("boom")
        except ValueError:
            debug("Query failed", exc_info=True)
        err = capsys.readouterr().err
        assert "[DEBUG] Query failed" in err
        assert "ValueError" in err

    def test_debug_env_variable(self, capsys, monkeypatch):
        set_verbosity(False, False)
        monkeypatch.setenv("ADLOOKUP_DEBUG", "1")
        debug("From env")
        assert "From env" in capsys.readouterr().err

    def test_verbose_only_warning(self, capsys):
        set_verbosity(False, False)
        warn("Hidden", verbose_only=True)
        assert "Hidden" not in capsys.readouterr().err

    def test_markup_in_message_is_literal(self, capsys):
        set_verbosity(False, False)
        error("Failed on [bold]CN=x[/bold]")
        assert "[bold]CN=x[/bold]" in capsys.readouterr().err
