"""Widget ID constants for the TUI."""


def css(widget_id: str) -> str:
    """Return a CSS selector for a widget ID.

    Usage:
        from ui.ids import css, CANVAS
        self.query_one(css(CANVAS), Static)
    """
    return f"#{widget_id}"


# The full screen widget every frame is drawn into
CANVAS = "canvas"
