"""UI module: frame snapshots, layout, drawing and the render loop."""

from ui.draw import DrawnFrame, draw_error, draw_frame
from ui.frame import FrameData
from ui.renderer import Ui
from ui import ids

__all__ = [
    "DrawnFrame",
    "FrameData",
    "Ui",
    "draw_error",
    "draw_frame",
    "ids",
]
