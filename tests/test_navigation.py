"""Tests for the navigation state machine and table models"""
import pytest

from keaview.kea_client import KeaError
from keaview.models import LeaseColumn, SortSpec
from keaview.navigation import DisplayMode, Focus, NavigationState, Navigator

from conftest import FakeKea


@pytest.fixture
def nav(subnets, fake_kea):
    return Navigator(fake_kea, subnets)


def test_initial_state(nav):
    state = nav.state
    assert state.focus == Focus.SUBNETS
    assert state.display_mode == DisplayMode.LEASES
    assert state.sort_spec == SortSpec(LeaseColumn.CLTT, True)
    assert state.row_select is False


def test_subnets_sorted_on_load(nav):
    assert nav.subnet_names == ["10.0.9.0/24", "10.0.10.0/24"]


def test_select_subnet_fetches_leases(nav, fake_kea):
    nav.select_subnet(1)
    view = nav.build_view()
    assert fake_kea.lease_calls == [2]
    assert view.title == "Leases"
    assert view.sortable
    assert nav.state.focus == Focus.SUBNETS
    # Default order: timestamp ascending
    assert [row[1].text for row in view.rows] == ["10.0.10.5", "10.0.10.9", "10.0.10.10"]


def test_lease_rows_flag_reservations(nav):
    nav.select_subnet(1)
    view = nav.build_view()
    printer = next(row for row in view.rows if row[1].text == "10.0.10.5")
    laptop = next(row for row in view.rows if row[1].text == "10.0.10.10")
    assert printer[0].text == "*printer"
    assert printer[0].bold
    assert laptop[0].text == "laptop"
    assert not laptop[0].bold


def test_lease_state_cells(nav):
    nav.select_subnet(1)
    states = {row[1].text: row[3] for row in nav.build_view().rows}
    assert states["10.0.10.10"].text == "default"
    assert states["10.0.10.10"].color == "green"
    assert states["10.0.10.5"].text == "declined"
    assert states["10.0.10.9"].text == "expired-reclaimed"


def test_active_sort_column_header_marked(nav):
    nav.select_subnet(1)
    headers = [cell.text for cell in nav.build_view().columns]
    assert headers == ["Hostname", "IP", "MAC", "State", "Timestamp ▲", "Client ID"]


def test_render_is_idempotent(nav):
    nav.select_subnet(1)
    assert nav.build_view() == nav.build_view()


def test_cycle_display_mode_wraps(nav, fake_kea):
    nav.select_subnet(1)
    assert nav.cycle_display_mode() == DisplayMode.RESERVATIONS
    view = nav.build_view()
    assert view.title == "Reservations"
    assert [c.text for c in view.rows[0][:3]] == ["10.0.10.5", "aa:bb:cc:00:00:05", "printer"]
    assert fake_kea.lease_calls == []

    assert nav.cycle_display_mode() == DisplayMode.SUBNET_INFO
    view = nav.build_view()
    assert view.title == "Subnet Information"
    assert not view.show_header

    assert nav.cycle_display_mode() == DisplayMode.LEASES
    assert nav.build_view().title == "Leases"


def test_subnet_info_rows(nav):
    nav.select_subnet(1)
    nav.state.display_mode = DisplayMode.SUBNET_INFO
    texts = nav.build_view().texts()
    assert texts[0][:2] == ["Subnet", "10.0.10.0/24"]
    assert texts[1][:2] == ["Valid-lifetime", "1h"]
    assert texts[2][:2] == ["Rebind-timer", "30m"]
    assert texts[3][:2] == ["Renew-timer", "15m"]
    assert texts[4][:2] == ["ID", "2"]
    assert texts[5][:2] == ["Pool", "10.0.10.100"]
    assert texts[6][:2] == ["", "10.0.10.200"]
    assert texts[7] == ["Option-data", "Name", "routers"]
    assert texts[8][1:] == ["Data", "10.0.10.1"]
    assert texts[9][1:] == ["Code", "3"]
    assert texts[10][1:] == ["Space", "dhcp4"]
    assert texts[11][1:] == ["CSV-Format", "true"]


def test_toggle_sort_refetches_and_reorders(nav, fake_kea):
    nav.select_subnet(1)
    nav.build_view()
    assert nav.toggle_sort(LeaseColumn.IP_ADDRESS)
    view = nav.build_view()
    assert fake_kea.lease_calls == [2, 2]
    assert [row[1].text for row in view.rows] == ["10.0.10.5", "10.0.10.9", "10.0.10.10"]
    assert nav.state.sort_spec == SortSpec(LeaseColumn.IP_ADDRESS, True)

    nav.toggle_sort(LeaseColumn.IP_ADDRESS)
    view = nav.build_view()
    assert [row[1].text for row in view.rows] == ["10.0.10.10", "10.0.10.9", "10.0.10.5"]


def test_toggle_sort_ignored_outside_lease_mode(nav):
    nav.cycle_display_mode()
    assert not nav.toggle_sort(LeaseColumn.HOSTNAME)
    assert nav.state.sort_spec == SortSpec()


def test_sort_persists_across_subnet_and_mode(nav):
    nav.toggle_sort(LeaseColumn.HOSTNAME)
    nav.select_subnet(0)
    nav.cycle_display_mode()
    nav.cycle_display_mode()
    nav.cycle_display_mode()
    assert nav.state.sort_spec == SortSpec(LeaseColumn.HOSTNAME, True)


def test_focus_moves_between_panels(nav):
    assert nav.focus_table()
    assert nav.state.focus == Focus.TABLE
    assert nav.focus_subnets(scroll_x=0)
    assert nav.state.focus == Focus.SUBNETS


def test_leaving_scrolled_table_refused(nav):
    nav.focus_table()
    assert not nav.focus_subnets(scroll_x=3)
    assert nav.state.focus == Focus.TABLE


def test_search_remembers_target_and_restores_focus(nav):
    nav.focus_table()
    assert nav.begin_search()
    assert nav.state.focus == Focus.SEARCH
    assert nav.state.search_target == Focus.TABLE
    assert nav.commit_search("laptop") == Focus.TABLE
    assert nav.state.focus == Focus.TABLE
    assert nav.state.query == "laptop"


def test_cancel_search_keeps_previous_query(nav):
    nav.begin_search()
    nav.commit_search("10.0")
    nav.begin_search()
    assert nav.cancel_search() == Focus.SUBNETS
    assert nav.state.query == "10.0"
    assert nav.state.focus == Focus.SUBNETS


def test_list_search_through_navigator(nav):
    items = ["10.0.0.0/24", "10.0.1.0/24", "10.0.2.0/24"]
    nav.begin_search()
    nav.commit_search("10.0")
    found = []
    current = 0
    while True:
        result = nav.search(items, current)
        if not result.found:
            break
        found.append(result.index)
        current = result.index
    assert found == [1, 2]
    assert result.message == 'Pattern not found "10.0"'


def test_table_search_enables_row_select(nav):
    nav.select_subnet(1)
    view = nav.build_view()
    nav.focus_table()
    nav.begin_search()
    nav.commit_search("phone")
    # Cursor position is ignored until rows are selectable
    result = nav.search(view.texts(), current=2)
    assert result.found and result.index == 1
    assert nav.state.row_select


def test_table_backward_search_without_selection_not_found(nav):
    nav.select_subnet(1)
    view = nav.build_view()
    nav.focus_table()
    nav.begin_search()
    nav.commit_search("laptop")
    result = nav.search(view.texts(), current=2, forward=False)
    assert not result.found
    assert not nav.state.row_select


def test_quit_suppressed_while_searching(nav):
    assert nav.can_quit()
    nav.begin_search()
    assert not nav.can_quit()
    nav.cancel_search()
    assert nav.can_quit()


def test_toolkit_focus_change_cancels_search(nav):
    nav.begin_search()
    nav.focus_changed(Focus.TABLE)
    assert nav.state.focus == Focus.TABLE
    assert nav.state.search_target is None


def test_delete_requires_row_selection_in_lease_mode(nav, fake_kea):
    nav.focus_table()
    assert nav.delete_selected("10.0.10.10") is None
    nav.toggle_row_select()
    nav.cycle_display_mode()
    assert nav.delete_selected("10.0.10.10") is None
    assert fake_kea.deleted == []


def test_delete_failure_surfaces_text_without_refresh(subnets):
    kea = FakeKea(delete_reply=(1, "lease not found"))
    nav = Navigator(kea, subnets)
    nav.select_subnet(1)
    before = nav.build_view()
    nav.focus_table()
    nav.toggle_row_select()

    assert nav.delete_selected("10.0.10.10") == "lease not found"
    assert kea.deleted == ["10.0.10.10"]
    # No implicit refetch
    assert kea.lease_calls == [2]
    assert "10.0.10.10" in [row[1].text for row in before.rows]


def test_transport_error_propagates(subnets):
    class BrokenKea(FakeKea):
        def get_leases(self, subnet_id):
            raise KeaError("Kea request failed (lease4-get-all): refused")

    nav = Navigator(BrokenKea(), subnets)
    with pytest.raises(KeaError):
        nav.build_view()


def test_empty_subnet_list():
    nav = Navigator(FakeKea(), [])
    view = nav.build_view()
    assert view.rows == []
    assert view.title == "Leases"


def test_state_can_be_supplied(subnets, fake_kea):
    state = NavigationState(display_mode=DisplayMode.RESERVATIONS)
    nav = Navigator(fake_kea, subnets, state)
    assert nav.build_view().title == "Reservations"


def test_list_search_without_query_reports_not_found(nav):
    result = nav.search(nav.subnet_names, 0)
    assert not result.found
    assert result.message == 'Pattern not found ""'


def test_view_built_from_snapshot_ignores_later_state(nav, fake_kea):
    nav.select_subnet(1)
    request = nav.view_request()
    nav.select_subnet(0)
    nav.cycle_display_mode()

    view = nav.build_view(request)
    assert view.title == "Leases"
    assert fake_kea.lease_calls == [2]
    assert not nav.is_current(request)


def test_snapshot_tracks_sort_changes(nav):
    request = nav.view_request()
    assert nav.is_current(request)
    nav.toggle_sort(LeaseColumn.IP_ADDRESS)
    assert not nav.is_current(request)
    assert not nav.is_current(None)
    assert nav.view_request().sort_column == LeaseColumn.IP_ADDRESS
