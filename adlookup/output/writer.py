import csv
import json
import re
from io import StringIO
from typing import List, Optional, Sequence

from rich.console import Console
from rich.text import Text

from ..directory.codec import NEVER
from ..models.result import AttributeValue, DirectoryEntry
from ..utils.console import console as stdout_console
from . import COLORS

NO_RESULTS = "No results."

_DATE = re.compile(r"\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}")
_INTEGER = re.compile(r"-?\d+")


def _values(value: AttributeValue) -> List[str]:
    return list(value) if isinstance(value, list) else [value]


def _value_style(value: str) -> str:
    """Pick the display color for a decoded value."""
    if _DATE.match(value):
        return COLORS["date"]
    if _INTEGER.fullmatch(value):
        return COLORS["integer"]
    if value.lower() == NEVER.lower():
        return COLORS["never"]
    return COLORS["value"]


def _styled(value: str) -> Text:
    return Text(value, style=_value_style(value))


def single_property(properties: Optional[Sequence[str]]) -> Optional[str]:
    """The property name when exactly one (non-wildcard) property was requested."""
    if properties and len(properties) == 1 and properties[0] != "*":
        return properties[0]
    return None


def render_default(entries: Sequence[DirectoryEntry], console: Console = stdout_console):
    """
    Print entries as aligned `name: value` lines.

    Names are padded to the widest name across all entries. Further values of
    a multi-valued attribute continue on their own lines under the value column.
    """
    if not entries:
        console.out(NO_RESULTS, highlight=False)
        return

    width = max((len(name) for entry in entries for name in entry), default=0)
    indent = " " * (width + 2)

    for index, entry in enumerate(entries):
        if index:
            console.out("", highlight=False)
        for name, value in entry.items():
            values = _values(value)
            first = Text(f"{name.ljust(width)}: ", style=COLORS["label"])
            first.append_text(_styled(values[0]))
            console.print(first, soft_wrap=True)
            for extra in values[1:]:
                line = Text(indent)
                line.append_text(_styled(extra))
                console.print(line, soft_wrap=True)


def render_property_values(entries: Sequence[DirectoryEntry], prop: str, console: Console = stdout_console):
    """Print only the value(s) of one property, one per line."""
    for entry in entries:
        value = entry.get_ci(prop)
        if value is None:
            continue
        for item in _values(value):
            console.print(_styled(item), soft_wrap=True)


def render_json(entries: Sequence[DirectoryEntry], console: Console = stdout_console):
    """Print entries as an indented JSON array."""
    console.out(json.dumps([dict(entry) for entry in entries], indent=2, ensure_ascii=False), highlight=False)


def format_csv(entries: Sequence[DirectoryEntry]) -> str:
    """
    Format entries as CSV.

    The header is the union of attribute names in first-seen order; missing
    attributes are empty and multi-valued attributes are joined with ';'.
    """
    headers: List[str] = []
    for entry in entries:
        for name in entry:
            if name not in headers:
                headers.append(name)

    buffer = StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)
    for entry in entries:
        row = []
        for name in headers:
            value = entry.get(name)
            if value is None:
                row.append("")
            else:
                row.append(";".join(_values(value)))
        writer.writerow(row)
    return buffer.getvalue()


def render_csv(entries: Sequence[DirectoryEntry], console: Console = stdout_console):
    """Print entries as CSV."""
    if not entries:
        console.out(NO_RESULTS, highlight=False)
        return
    console.out(format_csv(entries).rstrip("\n"), highlight=False)


def render(
    entries: Sequence[DirectoryEntry],
    output_format: str = "default",
    properties: Optional[Sequence[str]] = None,
    console: Console = stdout_console,
):
    """
    Render a result set in the requested format.

    A single requested property in default format prints only its values.
    """
    output_format = (output_format or "default").lower()
    prop = single_property(properties)

    if prop and output_format == "default":
        render_property_values(entries, prop, console)
    elif output_format == "json":
        render_json(entries, console)
    elif output_format == "csv":
        render_csv(entries, console)
    else:
        render_default(entries, console)
