"""Screen layout: splits the terminal into panel rectangles.

The same rectangles drive drawing and mouse hit-testing, so a click always
lands on what was drawn there.
"""

from __future__ import annotations

from dataclasses import dataclass

from model.containers import Header
from model.gui_state import Rect

# Rows the containers panel adds around its list (borders and padding)
CONTAINER_CHROME = 5
CONTAINER_MAX_HEIGHT = 12

# Fixed widths of the containers table columns, in display order
COLUMN_WIDTHS: dict[Header, int] = {
    Header.STATE: 11,
    Header.STATUS: 16,
    Header.CPU: 8,
    Header.MEMORY: 19,
    Header.ID: 9,
    Header.NAME: 20,
    Header.IMAGE: 20,
    Header.RX: 9,
    Header.TX: 9,
}
COLUMN_GAP = 1

# Horizontal offset from a panel's left edge to its content (border + padding)
PANEL_INSET = 2

# Spaces between the ports panel columns
PORT_GAP = 2


@dataclass(frozen=True)
class ScreenLayout:
    heading: Rect
    containers: Rect
    logs: Rect
    commands: Rect | None = None
    chart: Rect | None = None
    ports: Rect | None = None
    filter_bar: Rect | None = None


def split_horizontal(rect: Rect, percent: int) -> tuple[Rect, Rect]:
    """Split into left/right parts, the left taking percent of the width."""
    left_width = rect.width * percent // 100
    left = Rect(rect.x, rect.y, left_width, rect.height)
    right = Rect(rect.x + left_width, rect.y, rect.width - left_width, rect.height)
    return left, right


def split_vertical(rect: Rect, top_height: int) -> tuple[Rect, Rect]:
    """Split into top/bottom parts, the top taking top_height rows."""
    top_height = max(0, min(top_height, rect.height))
    top = Rect(rect.x, rect.y, rect.width, top_height)
    bottom = Rect(rect.x, rect.y + top_height, rect.width, rect.height - top_height)
    return top, bottom


def centered(area: Rect, width: int, height: int) -> Rect:
    """A width x height rectangle centred in area, clipped to it."""
    width = min(width, area.width)
    height = min(height, area.height)
    return Rect(
        area.x + (area.width - width) // 2,
        area.y + (area.height - height) // 2,
        width,
        height,
    )


def ports_panel_width(column_widths: tuple[int, ...]) -> int:
    """Width fitting every ports column plus the panel border and padding."""
    return sum(column_widths) + PORT_GAP * (len(column_widths) - 1) + 2 * PANEL_INSET


def compute_layout(
    width: int, height: int, container_count: int, show_filter: bool, ports_width: int = 0
) -> ScreenLayout:
    """Lay out heading, containers/commands, logs/chart/ports and the optional filter bar.

    The ports panel sits right of the chart and never takes more than half its row.
    """
    screen = Rect(0, 0, width, height)
    heading, body = split_vertical(screen, 1)

    filter_bar = None
    if show_filter and body.height > 1:
        body, filter_bar = split_vertical(body, body.height - 1)

    top_height = min(container_count + CONTAINER_CHROME, CONTAINER_MAX_HEIGHT)
    # Leave at least three rows for the logs
    top_height = max(0, min(top_height, body.height - 3))
    top, lower = split_vertical(body, top_height)

    if container_count == 0:
        return ScreenLayout(heading=heading, containers=top, logs=lower, filter_bar=filter_bar)

    containers, commands = split_horizontal(top, 90)
    logs, chart = split_vertical(lower, lower.height * 70 // 100)
    ports = None
    if ports_width > 0:
        ports_width = min(ports_width, chart.width // 2)
        ports = Rect(chart.x + chart.width - ports_width, chart.y, ports_width, chart.height)
        chart = Rect(chart.x, chart.y, chart.width - ports_width, chart.height)
    return ScreenLayout(
        heading=heading,
        containers=containers,
        logs=logs,
        commands=commands,
        chart=chart,
        ports=ports,
        filter_bar=filter_bar,
    )


def column_positions(containers: Rect) -> dict[Header, Rect]:
    """Where each visible column sits, on the heading row.

    Columns that do not fit inside the containers panel are left out.
    """
    positions: dict[Header, Rect] = {}
    x = containers.x + PANEL_INSET
    right_edge = containers.x + containers.width - PANEL_INSET
    for header, column_width in COLUMN_WIDTHS.items():
        if x + column_width > right_edge:
            break
        positions[header] = Rect(x, 0, column_width, 1)
        x += column_width + COLUMN_GAP
    return positions
