# Tests for result rendering

import csv
import json
from io import StringIO

import pytest
from rich.console import Console

from adlookup.models.result import DirectoryEntry
from adlookup.output.writer import (
    NO_RESULTS,
    _value_style,
    format_csv,
    render,
    render_csv,
    render_default,
    render_json,
    single_property,
)


@pytest.fixture
def buffer_console():
    buf = StringIO()
    return Console(file=buf, color_system=None, width=200, highlight=False), buf


def _entries():
    return [
        DirectoryEntry([("cn", "John Doe"), ("memberOf", ["CN=g1,DC=x", "CN=g2,DC=x"])], dn="CN=John Doe,DC=x"),
        DirectoryEntry([("sAMAccountName", "asmith"), ("pwdLastSet", "Never")], dn="CN=asmith,DC=x"),
    ]


class TestRenderDefault:
    """Tests for aligned default output."""

    def test_aligned_labels_and_continuation(self, buffer_console):
        con, buf = buffer_console
        render_default(_entries(), con)
        lines = buf.getvalue().splitlines()

        # widest name is sAMAccountName (14 chars)
        assert lines[0] == "cn            : John Doe"
        assert lines[1] == "memberOf      : CN=g1,DC=x"
        assert lines[2] == " " * 16 + "CN=g2,DC=x"
        assert lines[3] == ""
        assert lines[4] == "sAMAccountName: asmith"
        assert lines[5] == "pwdLastSet    : Never"

    def test_no_results(self, buffer_console):
        con, buf = buffer_console
        render_default([], con)
        assert buf.getvalue().strip() == NO_RESULTS


class TestSingleProperty:
    """Tests for single-property output."""

    def test_detection(self):
        assert single_property(("mail",)) == "mail"
        assert single_property(("*",)) is None
        assert single_property(("cn", "mail")) is None
        assert single_property(None) is None

    def test_values_only(self, buffer_console):
        con, buf = buffer_console
        render(_entries(), "default", ("memberof",), con)
        assert buf.getvalue().splitlines() == ["CN=g1,DC=x", "CN=g2,DC=x"]

    def test_ignored_for_json(self, buffer_console):
        con, buf = buffer_console
        render(_entries()[:1], "json", ("cn",), con)
        assert json.loads(buf.getvalue())[0]["cn"] == "John Doe"


class TestRenderJson:
    """Tests for JSON output."""

    def test_array_of_entries(self, buffer_console):
        con, buf = buffer_console
        render_json(_entries(), con)
        data = json.loads(buf.getvalue())
        assert data[0]["memberOf"] == ["CN=g1,DC=x", "CN=g2,DC=x"]
        assert data[1] == {"sAMAccountName": "asmith", "pwdLastSet": "Never"}

    def test_empty(self, buffer_console):
        con, buf = buffer_console
        render_json([], con)
        assert json.loads(buf.getvalue()) == []


class TestRenderCsv:
    """Tests for CSV output."""

    def test_union_header_and_join(self):
        rows = list(csv.reader(StringIO(format_csv(_entries()))))
        assert rows[0] == ["cn", "memberOf", "sAMAccountName", "pwdLastSet"]
        assert rows[1] == ["John Doe", "CN=g1,DC=x;CN=g2,DC=x", "", ""]
        assert rows[2] == ["", "", "asmith", "Never"]

    def test_quoting(self):
        text = format_csv([DirectoryEntry([("description", 'say "hi", ok')])])
        assert text.splitlines()[1] == '"say ""hi"", ok"'

    def test_no_results(self, buffer_console):
        con, buf = buffer_console
        render_csv([], con)
        assert buf.getvalue().strip() == NO_RESULTS


class TestValueStyle:
    """Tests for value color selection."""

    def test_styles(self):
        assert _value_style("2024-04-27T15:30:00+03:00") == "magenta"
        assert _value_style("512") == "yellow"
        assert _value_style("never") == "bright_black"
        assert _value_style("John") == "green"
