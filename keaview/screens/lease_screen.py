"""Lease browser screen for keaview.

Subnet list on the left, lease / reservation / subnet-information table
on the right and a status line that doubles as the search prompt.  All
decisions are delegated to the ``Navigator``; this module only renders
and routes keys.
"""

from __future__ import annotations

import logging
from typing import Optional

from textual import events, on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.message import Message
from textual.screen import Screen
from textual.widgets import DataTable, Footer, Header, Input, Label, ListItem, ListView, Static
from textual.worker import get_current_worker

from rich.text import Text

from keaview.kea_client import KeaError
from keaview.models import LeaseColumn
from keaview.navigation import Focus, Navigator, TableView, ViewRequest

logger = logging.getLogger(__name__)

IP_COLUMN = int(LeaseColumn.IP_ADDRESS)


class SubnetList(ListView):
    """Subnet list with vi-style movement."""

    BINDINGS = [
        Binding("j", "cursor_down", "Down", show=False),
        Binding("k", "cursor_up", "Up", show=False),
    ]


class LeaseTable(DataTable):
    """Data table whose left edge hands focus back to the subnet list."""

    class LeftEdge(Message):
        """Left movement requested while scrolled fully left."""

    class ToggleRowSelect(Message):
        """Enter pressed on the table."""

    BINDINGS = [
        Binding("h", "cursor_left", "Left", show=False),
    ]

    def action_cursor_left(self) -> None:
        if int(self.scroll_x) == 0:
            self.post_message(self.LeftEdge())
        else:
            super().action_cursor_left()

    def action_select_cursor(self) -> None:
        self.post_message(self.ToggleRowSelect())


class LeaseScreen(Screen):
    """Screen for browsing and deleting DHCPv4 leases."""

    BINDINGS = [
        Binding("q", "quit_view", "Quit", show=True),
        Binding("escape", "quit_view", "Quit", show=False),
        Binding("m", "cycle_mode", "Mode", show=True),
        Binding("slash", "begin_search", "Search", show=True),
        Binding("n", "search_next", "Next", show=False),
        Binding("N", "search_previous", "Previous", show=False),
        Binding("d", "delete_lease", "Delete", show=True),
        Binding("l", "focus_table", "Table", show=False),
        Binding("right", "focus_table", "Table", show=False),
    ]

    def __init__(self, navigator: Navigator, status: str = "") -> None:
        super().__init__()
        self.navigator = navigator
        self.status_text = status
        self._view = TableView(navigator.state.display_mode.title)
        self._shown: Optional[ViewRequest] = None

    # ------------------------------------------------------------------
    # Compose
    # ------------------------------------------------------------------

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="lease-main"):
            yield SubnetList(
                *[ListItem(Label(name, markup=False)) for name in self.navigator.subnet_names],
                id="subnet-list",
            )
            yield LeaseTable(id="lease-table", cursor_type="none")
        yield Static(self.status_text, id="status-line", markup=False)
        yield Input(id="search-input", placeholder="/")
        yield Footer()

    def on_mount(self) -> None:
        subnet_list = self.query_one(SubnetList)
        subnet_list.border_title = "Subnets"
        table = self.query_one(LeaseTable)
        table.border_title = self._view.title
        table.zebra_stripes = True
        self.query_one("#search-input", Input).display = False
        subnet_list.focus()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _set_status(self, text: str) -> None:
        self.status_text = text
        self.query_one("#status-line", Static).update(text)

    def _render_view(self, view: TableView) -> None:
        table = self.query_one(LeaseTable)
        table.clear(columns=True)
        table.show_header = view.show_header
        for cell in view.columns:
            table.add_column(Text(cell.text, style=cell.style))
        for row in view.rows:
            table.add_row(*[Text(cell.text, style=cell.style) for cell in row])
        table.border_title = view.title
        self._view = view
        self._apply_row_select()
        table.scroll_home(animate=False)

    def _apply_row_select(self) -> None:
        table = self.query_one(LeaseTable)
        table.cursor_type = "row" if self.navigator.state.row_select else "none"

    def _rebuild(self) -> None:
        """Rebuild the table for the current state; leases are re-fetched."""
        self._load_view(self.navigator.view_request())

    @work(thread=True, exclusive=True, group="table")
    def _load_view(self, request: ViewRequest) -> None:
        try:
            view = self.navigator.build_view(request)
        except KeaError as e:
            self.app.call_from_thread(self.app.fail, str(e))
            return
        if get_current_worker().is_cancelled:
            return
        self.app.call_from_thread(self._show_view, request, view)

    def _show_view(self, request: ViewRequest, view: TableView) -> None:
        # A slow fetch may finish after the operator has moved on
        if not self.navigator.is_current(request):
            logger.debug("Dropping outdated view for %s", request)
            return
        self._shown = request
        self._render_view(view)

    # ------------------------------------------------------------------
    # Subnet selection, mode and sort
    # ------------------------------------------------------------------

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        index = event.list_view.index
        if index is None:
            return
        self.navigator.select_subnet(index)
        self._rebuild()

    def action_cycle_mode(self) -> None:
        if self.navigator.state.focus == Focus.SEARCH:
            return
        # The mode switch applies to the highlighted subnet
        index = self.query_one(SubnetList).index
        if index is not None:
            self.navigator.select_subnet(index)
        self.navigator.cycle_display_mode()
        self._rebuild()

    def on_data_table_header_selected(self, event: DataTable.HeaderSelected) -> None:
        if not self._view.sortable:
            return
        if self.navigator.toggle_sort(LeaseColumn(event.column_index)):
            self._rebuild()

    # ------------------------------------------------------------------
    # Focus
    # ------------------------------------------------------------------

    def on_descendant_focus(self, event: events.DescendantFocus) -> None:
        widget = event.widget
        if isinstance(widget, SubnetList):
            focus = Focus.SUBNETS
        elif isinstance(widget, LeaseTable):
            focus = Focus.TABLE
        else:
            return
        if self.navigator.state.focus == Focus.SEARCH:
            self._hide_search_input()
        self.navigator.focus_changed(focus)

    def action_focus_table(self) -> None:
        if self.navigator.focus_table():
            self.query_one(LeaseTable).focus()

    @on(LeaseTable.LeftEdge)
    def _on_table_left_edge(self) -> None:
        table = self.query_one(LeaseTable)
        if self.navigator.focus_subnets(int(table.scroll_x)):
            self.query_one(SubnetList).focus()

    @on(LeaseTable.ToggleRowSelect)
    def _on_toggle_row_select(self) -> None:
        self.navigator.toggle_row_select()
        self._apply_row_select()

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def _hide_search_input(self) -> None:
        self.query_one("#search-input", Input).display = False
        self.query_one("#status-line", Static).display = True

    def _focus_panel(self, focus: Focus) -> None:
        if focus == Focus.TABLE:
            self.query_one(LeaseTable).focus()
        else:
            self.query_one(SubnetList).focus()

    def action_begin_search(self) -> None:
        if not self.navigator.begin_search():
            return
        search_input = self.query_one("#search-input", Input)
        search_input.value = ""
        self.query_one("#status-line", Static).display = False
        search_input.display = True
        search_input.focus()

    @on(Input.Submitted, "#search-input")
    def _on_search_submitted(self, event: Input.Submitted) -> None:
        target = self.navigator.commit_search(event.value)
        self._hide_search_input()
        self._focus_panel(target)
        self._run_search(forward=True)

    def _cancel_search(self) -> None:
        target = self.navigator.cancel_search()
        self._hide_search_input()
        self._focus_panel(target)

    def _run_search(self, forward: bool) -> None:
        focus = self.navigator.state.focus
        if focus == Focus.SUBNETS:
            subnet_list = self.query_one(SubnetList)
            items = self.navigator.subnet_names
            current = subnet_list.index if subnet_list.index is not None else 0
        elif focus == Focus.TABLE:
            table = self.query_one(LeaseTable)
            items = self._view.texts()
            current = table.cursor_row
        else:
            return

        result = self.navigator.search(items, current, forward=forward)
        if result is None:
            return
        self._set_status(result.message)
        if not result.found:
            return
        if focus == Focus.SUBNETS:
            self.query_one(SubnetList).index = result.index
        else:
            self._apply_row_select()
            self.query_one(LeaseTable).move_cursor(row=result.index, column=0)

    def action_search_next(self) -> None:
        self._run_search(forward=True)

    def action_search_previous(self) -> None:
        self._run_search(forward=False)

    # ------------------------------------------------------------------
    # Delete / quit
    # ------------------------------------------------------------------

    def action_delete_lease(self) -> None:
        if not self.navigator.can_delete():
            return
        # Rows still on screen may belong to a view that is being replaced
        if not self.navigator.is_current(self._shown):
            return
        row = self.query_one(LeaseTable).cursor_row
        if not 0 <= row < len(self._view.rows):
            return
        self._delete_lease(self._view.rows[row][IP_COLUMN].text)

    @work(thread=True)
    def _delete_lease(self, ip_address: str) -> None:
        try:
            text = self.navigator.delete_selected(ip_address)
        except KeaError as e:
            self.app.call_from_thread(self.app.fail, str(e))
            return
        if text is not None:
            self.app.call_from_thread(self._set_status, text)

    def action_quit_view(self) -> None:
        if self.navigator.can_quit():
            self.app.exit()
        else:
            self._cancel_search()
