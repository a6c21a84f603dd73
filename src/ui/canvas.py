"""Layered rich renderable: panels and popups blitted onto a fixed-size grid."""

from __future__ import annotations

from rich.console import Console, ConsoleOptions, RenderableType, RenderResult
from rich.segment import Segment

from model.gui_state import Rect


class Canvas:
    """A width x height grid of segments that renderables are painted onto."""

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.lines: list[list[Segment]] = [[Segment(" " * width)] for _ in range(height)]

    def blit(self, console: Console, options: ConsoleOptions, renderable: RenderableType, rect: Rect) -> None:
        """Render into rect, overwriting whatever is underneath."""
        x = max(0, rect.x)
        y = max(0, rect.y)
        width = min(rect.width, self.width - x)
        height = min(rect.height, self.height - y)
        if width <= 0 or height <= 0:
            return

        render_options = options.update(width=width, height=height)
        rendered = console.render_lines(renderable, render_options, pad=True)
        for offset, line in enumerate(rendered[:height]):
            row = y + offset
            left, _, right = Segment.divide(self.lines[row], [x, x + width, self.width])
            line = Segment.adjust_line_length(line, width)
            self.lines[row] = [*left, *line, *right]


class FrameView:
    """Renderable made of (renderable, rect) layers, painted bottom to top."""

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.layers: list[tuple[RenderableType, Rect]] = []

    def add(self, renderable: RenderableType, rect: Rect | None) -> None:
        if rect is not None and rect.width > 0 and rect.height > 0:
            self.layers.append((renderable, rect))

    def __rich_console__(self, console: Console, options: ConsoleOptions) -> RenderResult:
        canvas = Canvas(self.width, self.height)
        for renderable, rect in self.layers:
            canvas.blit(console, options, renderable, rect)
        newline = Segment.line()
        for line in canvas.lines:
            yield from line
            yield newline
