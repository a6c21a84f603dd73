"""Immutable per-tick snapshot of everything the drawing function reads."""

from __future__ import annotations

from dataclasses import dataclass

from model import AppData, GuiState
from model.app_data import AppSnapshot
from model.gui_state import GuiSnapshot, SelectablePanel, Status


@dataclass(frozen=True)
class FrameData:
    """One frame description, built under lock and consumed lock-free.

    The two stores are copied one after the other, each under its own lock, so
    a frame may mix a command's effect on one store with the prior state of
    the other. The next tick converges.
    """

    app: AppSnapshot
    gui: GuiSnapshot
    width: int
    height: int

    @classmethod
    def from_stores(cls, app_data: AppData, gui_state: GuiState, width: int, height: int) -> FrameData:
        app = app_data.snapshot()
        gui = gui_state.snapshot()
        return cls(app=app, gui=gui, width=width, height=height)

    @property
    def status(self) -> frozenset[Status]:
        return self.gui.status

    @property
    def selected_panel(self) -> SelectablePanel:
        return self.gui.selected_panel

    @property
    def has_containers(self) -> bool:
        return bool(self.app.rows)

    @property
    def delete_confirm_name(self) -> str | None:
        """Name of the container pending deletion, None if it no longer exists."""
        container_id = self.gui.delete_container
        if container_id is None:
            return None
        return self.app.names.get(container_id)
