"""Tests for layout and drawing: what ends up on screen and where."""

import pytest

from conftest import make_summary, render_text
from model import ContainerPort, Header, SelectablePanel, SortedOrder, Status
from model.app_error import DockerCommandError, DockerConnectError
from model.gui_state import LOADING_FRAMES, Rect
from ui.draw import draw_error, draw_frame, format_bytes, sparkline
from ui.frame import FrameData
from ui.layout import CONTAINER_MAX_HEIGHT, column_positions, compute_layout, ports_panel_width


def frame_for(app_data, gui_state, width: int = 120, height: int = 40) -> FrameData:
    return FrameData.from_stores(app_data, gui_state, width, height)


class TestFormatting:
    @pytest.mark.parametrize(
        "value, expected",
        [(0, "0 B"), (512, "512 B"), (1536, "1.50 KiB"), (5 * 1024**2, "5.00 MiB"), (3 * 1024**3, "3.00 GiB")],
    )
    def test_format_bytes(self, value, expected):
        assert format_bytes(value) == expected

    def test_sparkline_scales_to_maximum(self):
        assert sparkline((0, 4, 8), 3) == " ▄█"

    def test_sparkline_keeps_latest_points(self):
        assert len(sparkline(tuple(range(100)), 10)) == 10
        assert sparkline(tuple(range(100)), 10)[-1] == "█"

    def test_sparkline_all_zero(self):
        assert sparkline((0, 0), 2) == "  "


class TestLayout:
    def test_containers_height_grows_with_count(self):
        small = compute_layout(120, 40, 2, False)
        large = compute_layout(120, 40, 50, False)
        assert small.containers.height == 7
        assert large.containers.height == CONTAINER_MAX_HEIGHT

    def test_filter_bar_takes_last_row(self):
        layout = compute_layout(120, 40, 3, True)
        assert layout.filter_bar == Rect(0, 39, 120, 1)

    def test_no_containers_has_no_commands_panel(self):
        layout = compute_layout(120, 40, 0, False)
        assert layout.commands is None
        assert layout.chart is None

    def test_short_terminal_keeps_rows_below_containers(self):
        layout = compute_layout(40, 10, 10, False)
        assert layout.containers.height == 6
        assert layout.logs.height + layout.chart.height == 3

    def test_ports_panel_right_of_chart(self):
        layout = compute_layout(120, 40, 3, False, ports_width=25)
        assert layout.ports.width == 25
        assert layout.ports.x + layout.ports.width == 120
        assert layout.chart.width == 95
        assert (layout.ports.y, layout.ports.height) == (layout.chart.y, layout.chart.height)

    def test_ports_panel_at_most_half_the_row(self):
        layout = compute_layout(120, 40, 3, False, ports_width=200)
        assert layout.ports.width == 60
        assert layout.chart.width == 60

    def test_no_ports_panel_without_containers(self):
        assert compute_layout(120, 40, 0, False, ports_width=25).ports is None

    def test_ports_panel_width(self):
        # ip, private, public headings; two gaps; borders and padding
        assert ports_panel_width((2, 7, 6)) == 23

    def test_columns_that_do_not_fit_are_dropped(self):
        wide = column_positions(Rect(0, 1, 200, 10))
        narrow = column_positions(Rect(0, 1, 60, 10))
        assert Header.TX in wide
        assert list(narrow) == [Header.STATE, Header.STATUS, Header.CPU]
        assert narrow[Header.STATE] == Rect(2, 0, 11, 1)


class TestDrawFrame:
    def test_main_panels_present(self, populated, gui_state):
        text = render_text(draw_frame(frame_for(populated, gui_state)).renderable)
        assert "containers 1/3" in text
        assert "web" in text and "worker" in text
        assert "( h ) show help" in text
        assert "pause" in text

    def test_hit_regions_returned(self, populated, gui_state):
        drawn = draw_frame(frame_for(populated, gui_state))
        assert drawn.headers[Header.STATE] == Rect(2, 0, 11, 1)
        assert set(drawn.panels) == {SelectablePanel.CONTAINERS, SelectablePanel.COMMANDS, SelectablePanel.LOGS}

    def test_sort_arrow_on_header(self, populated, gui_state):
        populated.set_sorted((Header.NAME, SortedOrder.DESC))
        text = render_text(draw_frame(frame_for(populated, gui_state)).renderable)
        assert "name ▼" in text

    def test_empty_state(self, app_data, gui_state):
        drawn = draw_frame(frame_for(app_data, gui_state))
        text = render_text(drawn.renderable)
        assert "no containers running" in text
        assert SelectablePanel.COMMANDS not in drawn.panels

    def test_logs_shown_for_selected(self, populated, gui_state):
        populated.update_logs("aaa111", ["listening on :80"])
        text = render_text(draw_frame(frame_for(populated, gui_state)).renderable)
        assert "listening on :80" in text
        assert "logs 1/1 - web" in text

    def test_help_popup(self, populated, gui_state):
        gui_state.show_help = True
        text = render_text(draw_frame(frame_for(populated, gui_state)).renderable)
        assert "toggle this help information" in text

    def test_filter_bar(self, populated, gui_state):
        gui_state.status_push(Status.FILTER)
        populated.set_filter_term("we")
        text = render_text(draw_frame(frame_for(populated, gui_state)).renderable)
        assert "by name" in text
        assert "filtered by name: we" in text

    def test_delete_confirmation(self, populated, gui_state):
        gui_state.set_delete_container("bbb222")
        text = render_text(draw_frame(frame_for(populated, gui_state)).renderable)
        assert "are you sure you want to delete container: db" in text
        assert "( y ) yes" in text

    def test_vanished_delete_target_not_drawn(self, populated, gui_state):
        gui_state.set_delete_container("gone000")
        frame = frame_for(populated, gui_state)
        assert frame.delete_confirm_name is None
        assert "are you sure" not in render_text(draw_frame(frame).renderable)

    def test_info_box(self, populated, gui_state):
        gui_state.set_info_box("✖ mouse capture disabled")
        text = render_text(draw_frame(frame_for(populated, gui_state)).renderable)
        assert "✖ mouse capture disabled" in text

    def test_error_popup(self, populated, gui_state):
        populated.set_error(DockerCommandError("restart", "container is dead"))
        text = render_text(draw_frame(frame_for(populated, gui_state)).renderable)
        assert "unable to restart container" in text
        assert "( c ) to clear error" in text

    def test_ports_panel(self, app_data, gui_state):
        ports = (ContainerPort("0.0.0.0", "80/tcp", "8080"), ContainerPort("", "443/tcp"))
        app_data.update_containers([make_summary("aaa111", "web", ports=ports)])
        text = render_text(draw_frame(frame_for(app_data, gui_state)).renderable)
        assert "ip       private  public" in text
        assert "0.0.0.0  80/tcp   8080" in text
        assert "443/tcp" in text

    def test_ports_panel_without_ports(self, populated, gui_state):
        text = render_text(draw_frame(frame_for(populated, gui_state)).renderable)
        assert "no ports" in text

    def test_loading_spinner_in_heading(self, populated, gui_state):
        def heading() -> str:
            return render_text(draw_frame(frame_for(populated, gui_state)).renderable).split("\n")[0]

        assert heading()[0] == " "
        handle = gui_state.start_loading()
        assert heading()[0] == LOADING_FRAMES[0]
        gui_state.next_loading()
        assert heading()[0] == LOADING_FRAMES[1]
        gui_state.stop_loading(handle)
        assert heading()[0] == " "

    def test_frame_fills_screen(self, populated, gui_state):
        text = render_text(draw_frame(frame_for(populated, gui_state, 100, 30)).renderable, 100, 30)
        lines = text.rstrip("\n").split("\n")
        assert len(lines) == 30
        assert all(len(line) <= 100 for line in lines)

    def test_small_terminal_does_not_fail(self, populated, gui_state):
        gui_state.show_help = True
        render_text(draw_frame(frame_for(populated, gui_state, 20, 5)).renderable, 20, 5)


class TestDrawError:
    def test_countdown(self):
        text = render_text(draw_error(DockerConnectError(), 3, 80, 20), 80, 20)
        assert "unable to access docker daemon" in text
        assert "closing in 3 seconds" in text
        assert "( c ) to clear error" not in text
