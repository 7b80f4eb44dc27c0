"""Navigation state for the lease dashboard.

The ``Navigator`` owns the single ``NavigationState`` of a session and
turns operator commands into state changes and table models.  It knows
nothing about widgets: the screen reads the state, renders the
``TableView`` values it gets back and feeds cursor positions in.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Optional, Sequence

from keaview.models import (
    LeaseColumn,
    LeaseState,
    SortSpec,
    Subnet,
    format_duration,
    has_reservation,
    sort_leases,
    sort_subnets,
)
from keaview.search import (
    SearchResult,
    search_list_backward,
    search_list_forward,
    search_table_backward,
    search_table_forward,
)

logger = logging.getLogger(__name__)


class Focus(Enum):
    SUBNETS = "subnets"
    TABLE = "table"
    SEARCH = "search"


class DisplayMode(IntEnum):
    LEASES = 0
    RESERVATIONS = 1
    SUBNET_INFO = 2

    def next(self) -> "DisplayMode":
        return DisplayMode((self + 1) % len(DisplayMode))

    @property
    def title(self) -> str:
        return MODE_TITLES[self]


MODE_TITLES = {
    DisplayMode.LEASES: "Leases",
    DisplayMode.RESERVATIONS: "Reservations",
    DisplayMode.SUBNET_INFO: "Subnet Information",
}

RESERVATION_HEADERS = ["IP", "MAC", "Hostname", "Bootfile", "Next Server", "Server Hostname"]


# ---------------------------------------------------------------------------
# Table model
# ---------------------------------------------------------------------------

@dataclass
class Cell:
    text: str
    color: str = ""
    bold: bool = False

    @property
    def style(self) -> str:
        return " ".join(part for part in ("bold" if self.bold else "", self.color) if part)


def _label(text: str) -> Cell:
    return Cell(text, color="yellow")


@dataclass
class TableView:
    title: str
    columns: list[Cell] = field(default_factory=list)
    rows: list[list[Cell]] = field(default_factory=list)
    sortable: bool = False
    show_header: bool = True

    def texts(self) -> list[list[str]]:
        """Plain text grid of the data rows, for searching."""
        return [[cell.text for cell in row] for row in self.rows]


def lease_view(subnet: Subnet, leases, sort_spec: SortSpec) -> TableView:
    columns = []
    for column in LeaseColumn:
        label = column.header
        if column == sort_spec.column:
            label = f"{label} {sort_spec.arrow}"
        columns.append(_label(label))

    rows = []
    for lease in sort_leases(leases, sort_spec):
        reserved = has_reservation(lease, subnet)
        rows.append([
            Cell(("*" if reserved else "") + lease.hostname, bold=reserved),
            Cell(lease.ip_address),
            Cell(lease.hw_address),
            Cell(lease.state_label, color=LeaseState.color(lease.state)),
            Cell(lease.timestamp),
            Cell(lease.client_id),
        ])
    return TableView(DisplayMode.LEASES.title, columns, rows, sortable=True)


def reservation_view(subnet: Subnet) -> TableView:
    rows = [
        [
            Cell(r.ip_address),
            Cell(r.hw_address),
            Cell(r.hostname),
            Cell(r.boot_file_name),
            Cell(r.next_server),
            Cell(r.server_hostname),
        ]
        for r in subnet.reservations
    ]
    columns = [_label(h) for h in RESERVATION_HEADERS]
    return TableView(DisplayMode.RESERVATIONS.title, columns, rows)


def subnet_info_view(subnet: Subnet) -> TableView:
    rows = [
        [_label("Subnet"), Cell(subnet.subnet), Cell("")],
        [_label("Valid-lifetime"), Cell(format_duration(subnet.valid_lifetime)), Cell("")],
        [_label("Rebind-timer"), Cell(format_duration(subnet.rebind_timer)), Cell("")],
        [_label("Renew-timer"), Cell(format_duration(subnet.renew_timer)), Cell("")],
        [_label("ID"), Cell(str(subnet.id)), Cell("")],
    ]
    for pool in subnet.pools:
        first, last = pool.bounds()
        rows.append([_label("Pool"), Cell(first), Cell("")])
        rows.append([Cell(""), Cell(last), Cell("")])
    for opt in subnet.option_data:
        rows.append([_label("Option-data"), _label("Name"), Cell(opt.name)])
        rows.append([Cell(""), _label("Data"), Cell(opt.data)])
        rows.append([Cell(""), _label("Code"), Cell(str(opt.code))])
        rows.append([Cell(""), _label("Space"), Cell(opt.space)])
        rows.append([Cell(""), _label("CSV-Format"), Cell(str(opt.csv_format).lower())])
    columns = [Cell(""), Cell(""), Cell("")]
    return TableView(DisplayMode.SUBNET_INFO.title, columns, rows, show_header=False)


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------

@dataclass
class NavigationState:
    focus: Focus = Focus.SUBNETS
    display_mode: DisplayMode = DisplayMode.LEASES
    sort_spec: SortSpec = field(default_factory=SortSpec)
    search_target: Optional[Focus] = None
    query: str = ""
    subnet_index: int = 0
    row_select: bool = False


@dataclass(frozen=True)
class ViewRequest:
    """What a table view is built for: subnet, mode and sort order."""
    subnet_index: int
    display_mode: DisplayMode
    sort_column: LeaseColumn
    ascending: bool


class Navigator:
    """Mediates operator commands against the Kea client.

    ``client`` needs ``get_leases(subnet_id)`` and ``delete_lease(ip)``.
    Client errors propagate to the caller.  Only the event loop calls the
    transition methods.  Workers call ``build_view`` with a ``ViewRequest``
    taken on the event loop and drop the result unless ``is_current`` still
    holds when it arrives.
    """

    def __init__(self, client, subnets: list[Subnet], state: Optional[NavigationState] = None):
        self.client = client
        self.subnets = sort_subnets(subnets)
        self.state = state or NavigationState()

    @property
    def subnet(self) -> Optional[Subnet]:
        if 0 <= self.state.subnet_index < len(self.subnets):
            return self.subnets[self.state.subnet_index]
        return None

    @property
    def subnet_names(self) -> list[str]:
        return [s.subnet for s in self.subnets]

    # -- views ---------------------------------------------------------

    def view_request(self) -> ViewRequest:
        """Snapshot of the state a table view depends on."""
        return ViewRequest(
            subnet_index=self.state.subnet_index,
            display_mode=self.state.display_mode,
            sort_column=self.state.sort_spec.column,
            ascending=self.state.sort_spec.ascending,
        )

    def is_current(self, request: Optional[ViewRequest]) -> bool:
        return request is not None and request == self.view_request()

    def build_view(self, request: Optional[ViewRequest] = None) -> TableView:
        """Table model for ``request``, by default the current mode and subnet.

        Leases are fetched fresh on every call.  Only the snapshot is read,
        so a worker thread can build a view while the state moves on.
        """
        if request is None:
            request = self.view_request()
        mode = request.display_mode
        if not 0 <= request.subnet_index < len(self.subnets):
            return TableView(mode.title)
        subnet = self.subnets[request.subnet_index]
        if mode == DisplayMode.LEASES:
            leases = self.client.get_leases(subnet.id)
            return lease_view(subnet, leases, SortSpec(request.sort_column, request.ascending))
        if mode == DisplayMode.RESERVATIONS:
            return reservation_view(subnet)
        return subnet_info_view(subnet)

    # Transitions below only touch state; the caller follows each one with
    # a rebuild, which may block on the network.

    def select_subnet(self, index: int) -> None:
        self.state.subnet_index = index

    def cycle_display_mode(self) -> DisplayMode:
        self.state.display_mode = self.state.display_mode.next()
        return self.state.display_mode

    def toggle_sort(self, column: LeaseColumn) -> bool:
        """Returns False (and changes nothing) outside the lease view."""
        if self.state.display_mode != DisplayMode.LEASES:
            return False
        self.state.sort_spec.toggle(column)
        return True

    # -- focus ---------------------------------------------------------

    def focus_table(self) -> bool:
        if self.state.focus == Focus.SEARCH:
            return False
        self.state.focus = Focus.TABLE
        return True

    def focus_subnets(self, scroll_x: int = 0) -> bool:
        """Leave the table only when it is scrolled fully left."""
        if self.state.focus == Focus.SEARCH:
            return False
        if self.state.focus == Focus.TABLE and scroll_x > 0:
            return False
        self.state.focus = Focus.SUBNETS
        return True

    def focus_changed(self, focus: Focus) -> None:
        """Record a focus change made by the toolkit (Tab, mouse)."""
        if focus != Focus.SEARCH and self.state.focus == Focus.SEARCH:
            self.cancel_search()
        self.state.focus = focus

    def toggle_row_select(self) -> bool:
        self.state.row_select = not self.state.row_select
        return self.state.row_select

    # -- search --------------------------------------------------------

    def begin_search(self) -> bool:
        if self.state.focus == Focus.SEARCH:
            return False
        self.state.search_target = self.state.focus
        self.state.focus = Focus.SEARCH
        return True

    def _end_search(self) -> Focus:
        target = self.state.search_target or Focus.SUBNETS
        self.state.focus = target
        self.state.search_target = None
        return target

    def commit_search(self, query: str) -> Focus:
        """Store the query and return focus to the panel it targets."""
        self.state.query = query
        return self._end_search()

    def cancel_search(self) -> Focus:
        return self._end_search()

    def search(self, items: Sequence, current: int, forward: bool = True) -> Optional[SearchResult]:
        """Search the focused panel with the last query.

        ``items`` are the subnet names for the list, or the table text grid.
        """
        query = self.state.query
        if self.state.focus == Focus.SUBNETS:
            if forward:
                return search_list_forward(items, query, current)
            return search_list_backward(items, query, current)
        if self.state.focus == Focus.TABLE:
            if not self.state.row_select:
                current = -1
            if forward:
                result = search_table_forward(items, query, current)
            else:
                result = search_table_backward(items, query, current)
            if result.found:
                self.state.row_select = True
            return result
        return None

    # -- commands --------------------------------------------------------

    def can_delete(self) -> bool:
        return (
            self.state.focus == Focus.TABLE
            and self.state.display_mode == DisplayMode.LEASES
            and self.state.row_select
        )

    def delete_selected(self, ip_address: str) -> Optional[str]:
        """Delete the lease of the selected row.

        Returns the service's reply text; the table is left as it is.
        """
        if not self.can_delete():
            return None
        result, text = self.client.delete_lease(ip_address)
        logger.info("Delete of lease %s returned %d: %s", ip_address, result, text)
        return text

    def can_quit(self) -> bool:
        return self.state.focus != Focus.SEARCH
