"""Output module for adlookup results."""

# Value colors for default output (terminal only)
COLORS = {
    "label": "cyan",
    "date": "magenta",
    "integer": "yellow",
    "never": "bright_black",
    "value": "green",
}

OUTPUT_FORMATS = ("default", "json", "csv")
