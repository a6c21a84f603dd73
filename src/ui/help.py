"""Help popup contents."""

from __future__ import annotations

from rich.table import Table
from rich.text import Text

NAME = "dockwatch"
DESCRIPTION = "a simple tui to view & control docker containers"

# (keys, description) pairs, in display order
KEYMAP_HELP: list[tuple[tuple[str, ...], str]] = [
    (("tab", "shift+tab"), "change panels"),
    (("↑ ↓", "j k", "PgUp PgDown", "Home End"), "change selected line"),
    (("enter",), "send docker container command"),
    (("e",), "exec into a container"),
    (("h",), "toggle this help information"),
    (("m",), "toggle mouse capture - if disabled, text on screen can be selected & copied"),
    (("F1", "/"), "enter filter mode"),
    (("0",), "stop sort"),
    (("1 - 9",), "sort by header - or click header"),
    (("esc",), "close dialog"),
    (("q",), "quit at any time"),
]


def help_lines() -> list[Text]:
    """One Text per keymap entry, keys highlighted."""
    lines = []
    for keys, description in KEYMAP_HELP:
        line = Text(" ")
        for index, key in enumerate(keys):
            if index:
                line.append("or", style="dim")
            line.append(f" ( {key} ) ", style="bold")
        line.append(description)
        lines.append(line)
    return lines


def help_table() -> Table:
    grid = Table.grid(padding=(0, 1))
    grid.add_column()
    grid.add_row(Text(NAME, style="bold", justify="center"))
    grid.add_row(Text(DESCRIPTION, justify="center"))
    grid.add_row("")
    for line in help_lines():
        grid.add_row(line)
    return grid


def help_size() -> tuple[int, int]:
    """Width and height of the help popup, borders included."""
    width = max(
        len(NAME),
        len(DESCRIPTION),
        *(line.cell_len for line in help_lines()),
    )
    height = len(KEYMAP_HELP) + 3
    return width + 4, height + 2
