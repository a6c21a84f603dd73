"""Drawing: a pure function from FrameData to a renderable plus hit regions."""

from __future__ import annotations

from dataclasses import dataclass, field

from rich import box
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.text import Text

from model.app_data import ContainerRow
from model.app_error import AppError
from model.containers import PORT_HEADINGS, DockerControls, Header, SortedOrder, State
from model.gui_state import Rect, SelectablePanel, Status
from ui.canvas import FrameView
from ui.frame import FrameData
from ui.help import help_size, help_table
from ui.layout import (
    COLUMN_GAP,
    COLUMN_WIDTHS,
    PORT_GAP,
    centered,
    column_positions,
    compute_layout,
    ports_panel_width,
    split_horizontal,
)

SPARK_BARS = " ▁▂▃▄▅▆▇█"

STATE_STYLES: dict[State, str] = {
    State.RUNNING: "green",
    State.PAUSED: "yellow",
    State.RESTARTING: "magenta",
    State.CREATED: "blue",
    State.EXITED: "red",
    State.DEAD: "red",
    State.REMOVING: "yellow",
    State.UNKNOWN: "dim",
}

CONTROL_STYLES: dict[DockerControls, str] = {
    DockerControls.PAUSE: "yellow",
    DockerControls.UNPAUSE: "blue",
    DockerControls.START: "green",
    DockerControls.STOP: "red",
    DockerControls.RESTART: "magenta",
    DockerControls.DELETE: "grey50",
}


@dataclass
class DrawnFrame:
    """What one draw produced: the renderable and where things landed."""

    renderable: FrameView
    headers: dict[Header, Rect] = field(default_factory=dict)
    panels: dict[SelectablePanel, Rect] = field(default_factory=dict)


def format_bytes(value: int) -> str:
    """Human readable binary size, e.g. 1536 -> "1.50 KiB"."""
    size = float(value)
    for unit in ("B", "KiB", "MiB", "GiB", "TiB"):
        if size < 1024 or unit == "TiB":
            if unit == "B":
                return f"{int(size)} B"
            return f"{size:.2f} {unit}"
        size /= 1024
    return f"{value} B"


def sparkline(values: tuple[float, ...] | tuple[int, ...], width: int) -> str:
    """Bar-character chart of the last width values, scaled to their maximum."""
    points = list(values)[-width:] if width > 0 else []
    top = max(points, default=0) or 1
    steps = len(SPARK_BARS) - 1
    return "".join(SPARK_BARS[min(steps, round(point / top * steps))] for point in points)


def _cell(value: str, width: int) -> str:
    if len(value) > width:
        return value[: max(0, width - 1)] + "…"
    return value.ljust(width)


def _row_text(row: ContainerRow, columns: list[Header]) -> Text:
    values = {
        Header.STATE: row.state.value,
        Header.STATUS: row.status,
        Header.CPU: f"{row.cpu:05.2f}%",
        Header.MEMORY: f"{format_bytes(row.memory)} / {format_bytes(row.memory_limit)}",
        Header.ID: row.id[:8],
        Header.NAME: row.name,
        Header.IMAGE: row.image,
        Header.RX: format_bytes(row.rx),
        Header.TX: format_bytes(row.tx),
    }
    text = Text(no_wrap=True, overflow="crop")
    for index, header in enumerate(columns):
        if index:
            text.append(" " * COLUMN_GAP)
        style = STATE_STYLES[row.state] if header == Header.STATE else ""
        text.append(_cell(values[header], COLUMN_WIDTHS[header]), style=style)
    return text


def _scroll_window(count: int, selected: int | None, visible: int) -> tuple[int, int]:
    """(start, stop) indexes of the items to show so selected stays in view."""
    if visible <= 0 or count == 0:
        return 0, 0
    if selected is None:
        selected = 0
    start = max(0, min(selected - visible + 1, count - visible))
    start = min(start, selected)
    return start, min(count, start + visible)


def _border_style(frame: FrameData, panel: SelectablePanel) -> str:
    return "bold cyan" if frame.selected_panel == panel else "grey50"


def _highlight(frame: FrameData, panel: SelectablePanel) -> str:
    return "reverse bold" if frame.selected_panel == panel else "bold"


def _draw_heading(frame: FrameData, headers: dict[Header, Rect], width: int) -> Text:
    """Loading spinner, header labels positioned over their columns, plus the help hint."""
    text = Text(no_wrap=True, overflow="crop", style="white on grey23")
    text.append(frame.gui.loading_icon or " ", style="bold yellow")
    sorted_by = frame.app.sorted_by
    cursor = 1
    for header, rect in headers.items():
        label = header.label
        style = "bold"
        if sorted_by is not None and sorted_by[0] == header:
            arrow = "▲" if sorted_by[1] == SortedOrder.ASC else "▼"
            label = f"{label} {arrow}"
            style = "bold yellow"
        text.append(" " * (rect.x - cursor))
        text.append(_cell(label, rect.width), style=style)
        cursor = rect.x + rect.width

    hint = " ( h ) show help "
    remaining = width - cursor
    if remaining > len(hint):
        text.append(" " * (remaining - len(hint)))
        text.append(hint)
    else:
        text.append(" " * max(0, remaining))
    return text


def _draw_containers(frame: FrameData, rect: Rect, columns: list[Header]) -> Panel:
    rows = frame.app.rows
    visible = max(0, rect.height - 2)
    start, stop = _scroll_window(len(rows), frame.app.selected_index, visible)
    lines = []
    for index in range(start, stop):
        line = _row_text(rows[index], columns)
        if index == frame.app.selected_index:
            line.stylize(_highlight(frame, SelectablePanel.CONTAINERS))
        lines.append(line)
    if not rows:
        lines.append(Text("no containers running", style="dim"))

    filter_by, term = frame.app.filter_by, frame.app.filter_term
    title = f" containers {frame.app.selected_index + 1 if frame.app.selected_index is not None else 0}/{len(rows)} "
    if term:
        title += f"- filtered by {filter_by.value}: {term} "
    return Panel(
        Group(*lines),
        title=Text(title),
        title_align="left",
        border_style=_border_style(frame, SelectablePanel.CONTAINERS),
        box=box.ROUNDED,
        padding=(0, 1),
    )


def _draw_commands(frame: FrameData) -> Panel:
    lines = []
    for index, control in enumerate(frame.app.controls):
        line = Text(control.value, style=CONTROL_STYLES[control])
        if index == frame.app.control_index:
            line.stylize(_highlight(frame, SelectablePanel.COMMANDS))
        lines.append(line)
    return Panel(
        Group(*lines),
        border_style=_border_style(frame, SelectablePanel.COMMANDS),
        box=box.ROUNDED,
        padding=(0, 1),
    )


def _draw_logs(frame: FrameData, rect: Rect) -> Panel:
    logs = frame.app.logs
    visible = max(0, rect.height - 2)
    start, stop = _scroll_window(len(logs), frame.app.log_index, visible)
    lines = []
    for index in range(start, stop):
        line = Text(logs[index], no_wrap=True, overflow="ellipsis")
        if index == frame.app.log_index:
            line.stylize(_highlight(frame, SelectablePanel.LOGS))
        lines.append(line)

    selected = frame.app.selected
    if selected is None:
        title = " logs "
    else:
        title = f" logs {frame.app.log_index + 1 if frame.app.log_index is not None else 0}/{len(logs)} - {selected.name} "
    if not logs:
        lines.append(Text("no logs found", style="dim"))
    return Panel(
        Group(*lines),
        title=Text(title),
        title_align="left",
        border_style=_border_style(frame, SelectablePanel.LOGS),
        box=box.ROUNDED,
        padding=(0, 1),
    )


def _draw_chart(frame: FrameData, rect: Rect) -> list[tuple[RenderableType, Rect]]:
    cpu_rect, mem_rect = split_horizontal(rect, 50)
    selected = frame.app.selected
    cpu_now = f"{selected.cpu:05.2f}%" if selected else ""
    mem_now = format_bytes(selected.memory) if selected else ""
    style = "green" if selected is not None and selected.state == State.RUNNING else "grey50"

    def chart(values, title: str, area: Rect) -> Panel:
        width = max(0, area.width - 4)
        rows = max(1, area.height - 2)
        line = Text(sparkline(values, width), style=style)
        body = Group(*([Text("")] * (rows - 1)), line)
        return Panel(body, title=title, title_align="center", border_style="grey50", box=box.ROUNDED, padding=(0, 1))

    return [
        (chart(frame.app.cpu_history, f" cpu {cpu_now} ", cpu_rect), cpu_rect),
        (chart(frame.app.mem_history, f" memory {mem_now} ", mem_rect), mem_rect),
    ]


def _draw_ports(frame: FrameData) -> Panel:
    widths = frame.app.port_widths
    selected = frame.app.selected
    style = "green" if selected is not None and selected.state == State.RUNNING else "grey50"

    def line(values: tuple[str, ...], line_style: str) -> Text:
        cells = (_cell(value, width) for value, width in zip(values, widths))
        return Text((" " * PORT_GAP).join(cells).rstrip(), style=line_style, no_wrap=True, overflow="crop")

    lines = [line(PORT_HEADINGS, "bold")]
    lines += [line(port.columns(), style) for port in frame.app.ports]
    if not frame.app.ports:
        lines.append(Text("no ports", style="dim"))
    return Panel(
        Group(*lines), title=" ports ", title_align="center", border_style="grey50", box=box.ROUNDED, padding=(0, 1)
    )


def _draw_filter_bar(frame: FrameData) -> Text:
    filter_by, term = frame.app.filter_by, frame.app.filter_term
    text = Text(" filter ", style="black on yellow")
    text.append(f" by {filter_by.value} (← →) ", style="bold")
    text.append(term or "", style="bold white")
    text.append("█", style="blink")
    text.append("  esc clear  enter keep", style="dim")
    return text


def _popup(body: RenderableType, title: str | None, style: str) -> Panel:
    return Panel(body, title=Text(title) if title else None, border_style=style, box=box.ROUNDED, padding=(0, 1))


def draw_error(error: AppError, countdown: int | None, width: int, height: int) -> FrameView:
    """Error popup, optionally with a countdown to exit."""
    view = FrameView(width, height)
    lines = [Text(str(error), justify="center"), Text("")]
    if countdown is not None:
        lines.append(Text(f"closing in {countdown} seconds", justify="center", style="bold"))
    else:
        lines.append(Text("( c ) to clear error   ( q ) to quit", justify="center"))
    body_width = max(line.cell_len for line in lines)
    rect = centered(Rect(0, 0, width, height), body_width + 6, len(lines) + 2)
    view.add(_popup(Group(*lines), f" {error.title} error ", "bold red"), rect)
    return view


def draw_frame(frame: FrameData) -> DrawnFrame:
    """Draw the whole dashboard for one frame."""
    width, height = frame.width, frame.height
    view = FrameView(width, height)
    drawn = DrawnFrame(renderable=view)
    screen = Rect(0, 0, width, height)

    layout = compute_layout(
        width,
        height,
        len(frame.app.rows),
        Status.FILTER in frame.status,
        ports_width=ports_panel_width(frame.app.port_widths),
    )
    headers = column_positions(layout.containers)
    drawn.headers = headers

    view.add(_draw_heading(frame, headers, width), layout.heading)
    view.add(_draw_containers(frame, layout.containers, list(headers)), layout.containers)
    drawn.panels[SelectablePanel.CONTAINERS] = layout.containers
    view.add(_draw_logs(frame, layout.logs), layout.logs)
    drawn.panels[SelectablePanel.LOGS] = layout.logs

    if layout.commands is not None:
        view.add(_draw_commands(frame), layout.commands)
        drawn.panels[SelectablePanel.COMMANDS] = layout.commands
    if layout.chart is not None:
        for renderable, rect in _draw_chart(frame, layout.chart):
            view.add(renderable, rect)
    if layout.ports is not None:
        view.add(_draw_ports(frame), layout.ports)
    if layout.filter_bar is not None:
        view.add(_draw_filter_bar(frame), layout.filter_bar)

    name = frame.delete_confirm_name
    if name is not None:
        body = Group(
            Text(f"are you sure you want to delete container: {name}", justify="center"),
            Text(""),
            Text("( y ) yes   ( n ) no", justify="center", style="bold"),
        )
        rect = centered(screen, max(46, len(name) + 48), 5)
        view.add(_popup(body, " confirm delete ", "bold red"), rect)

    info = frame.gui.info_box
    if info is not None:
        text, _created = info
        rect = Rect(max(0, width - len(text) - 6), max(0, height - 4), len(text) + 4, 3)
        view.add(_popup(Text(text, justify="center"), None, "bold blue"), rect)

    if Status.HELP in frame.status:
        help_width, help_height = help_size()
        view.add(_popup(help_table(), " help ", "bold magenta"), centered(screen, help_width, help_height))

    error = frame.app.error
    if error is not None:
        for renderable, rect in draw_error(error, None, width, height).layers:
            view.add(renderable, rect)

    return drawn

