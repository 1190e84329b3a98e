"""
Test the command-line entry point: help, exit codes and result routing.
"""

import contextlib
from unittest.mock import MagicMock, patch

import pytest

from adlookup import __version__, cli
from adlookup.directory.exceptions import ADLookupError, DirectoryConnectionError, DirectorySearchError
from adlookup.models.request import IdentifierKind
from adlookup.models.result import DirectoryEntry, ResultSet


@pytest.fixture(autouse=True)
def no_config_file():
    with patch("adlookup.config.load_config", return_value={}):
        yield


@pytest.fixture
def mock_orchestrator():
    with patch("adlookup.cli.QueryOrchestrator") as orchestrator_class:
        yield orchestrator_class.return_value


def test_help_output_lists_switches(capsys):
    """Help output lists the lookup and connection switches."""
    with contextlib.suppress(SystemExit):
        cli.main(["--help"])

    output = capsys.readouterr().out
    for switch in ("--filter", "--distinguishedname", "--sid", "--email", "--server", "--properties"):
        assert switch in output, f"Missing {switch} switch"


def test_version(capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["-v"])
    assert exc_info.value.code == 0
    assert __version__ in capsys.readouterr().out


class TestExitCodes:
    """Tests for process exit codes."""

    @patch("adlookup.cli.render")
    def test_success(self, mock_render, mock_orchestrator):
        mock_orchestrator.execute.return_value = ResultSet.of([DirectoryEntry([("cn", "a")])])

        cli.main(["-s", "dc01", "jdoe", "cn"])

        request = mock_orchestrator.execute.call_args.args[0]
        assert request.target.kind == IdentifierKind.ACCOUNT_NAME
        entries, output_format, properties = mock_render.call_args.args
        assert len(entries) == 1
        assert output_format == "default"
        assert properties == ("cn",)

    def test_classification_error(self, mock_orchestrator):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["-s", "dc01", "john doe"])
        assert exc_info.value.code == 1
        mock_orchestrator.execute.assert_not_called()

    def test_connection_error(self, mock_orchestrator):
        mock_orchestrator.execute.side_effect = DirectoryConnectionError("down", server="dc01")
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["-s", "dc01", "jdoe"])
        assert exc_info.value.code == 2

    def test_search_error(self, mock_orchestrator):
        mock_orchestrator.execute.side_effect = DirectorySearchError("bad filter", server="dc01")
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["-s", "dc01", "-f", "(cn=a"])
        assert exc_info.value.code == 2

    def test_no_server(self, mock_orchestrator):
        mock_orchestrator.execute.side_effect = ADLookupError("no server")
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["jdoe"])
        assert exc_info.value.code == 1

    def test_undecodable_input_file(self, mock_orchestrator, tmp_path):
        path = tmp_path / "ids.txt"
        path.write_bytes(b"j\xfcrgen\nanna\n")
        with pytest.raises(SystemExit) as exc_info:
            cli.main([str(path), "-s", "dc01"])
        assert exc_info.value.code == 1
        mock_orchestrator.execute.assert_not_called()


class TestOutputRouting:
    """Results go to stdout, diagnostics to stderr."""

    def test_no_results(self, mock_orchestrator, capsys):
        mock_orchestrator.execute.return_value = ResultSet.of([])

        cli.main(["-s", "dc01", "jdoe"])

        assert capsys.readouterr().out.strip() == "No results."

    def test_batch_diagnostics_on_stderr(self, mock_orchestrator, capsys, tmp_path):
        path = tmp_path / "dns.txt"
        path.write_text("CN=a,DC=x\nCN=b,DC=x\n", encoding="utf-8")
        mock_orchestrator.execute.return_value = ResultSet.of(
            [DirectoryEntry([("cn", "a")])], ["No results for DN: CN=b,DC=x"]
        )

        cli.main(["-s", "dc01", "-o", "json", str(path)])

        captured = capsys.readouterr()
        assert "No results for DN: CN=b,DC=x" in captured.err
        assert "No results for DN" not in captured.out
        assert '"cn": "a"' in captured.out

    def test_orchestrator_built_without_injected_service(self):
        with patch("adlookup.cli.QueryOrchestrator") as orchestrator_class:
            orchestrator_class.return_value = MagicMock(execute=MagicMock(return_value=ResultSet.of([])))
            cli.main(["-s", "dc01", "jdoe"])
        orchestrator_class.assert_called_once_with()
