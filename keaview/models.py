"""Data models for keaview."""

import ipaddress
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from functools import cmp_to_key
from typing import Optional


class LeaseState(IntEnum):
    DEFAULT = 0
    DECLINED = 1
    EXPIRED_RECLAIMED = 2

    @classmethod
    def label(cls, code: int) -> str:
        """Display label for a raw state code; unknown codes are blank."""
        return {
            cls.DEFAULT: "default",
            cls.DECLINED: "declined",
            cls.EXPIRED_RECLAIMED: "expired-reclaimed",
        }.get(code, "")

    @classmethod
    def color(cls, code: int) -> str:
        return {
            cls.DEFAULT: "green",
            cls.DECLINED: "red",
            cls.EXPIRED_RECLAIMED: "yellow",
        }.get(code, "white")


class LeaseColumn(IntEnum):
    """Sortable lease table columns, in display order."""
    HOSTNAME = 0
    IP_ADDRESS = 1
    HW_ADDRESS = 2
    STATE = 3
    CLTT = 4
    CLIENT_ID = 5

    @property
    def header(self) -> str:
        return LEASE_HEADERS[self]


LEASE_HEADERS = {
    LeaseColumn.HOSTNAME: "Hostname",
    LeaseColumn.IP_ADDRESS: "IP",
    LeaseColumn.HW_ADDRESS: "MAC",
    LeaseColumn.STATE: "State",
    LeaseColumn.CLTT: "Timestamp",
    LeaseColumn.CLIENT_ID: "Client ID",
}


def format_duration(seconds: int) -> str:
    """Render a number of seconds as ``1d 2h 3m 4s``, skipping zero parts."""
    if seconds <= 0:
        return "0s"
    days = seconds // 86400
    hours = (seconds % 86400) // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60
    parts = []
    for value, unit in ((days, "d"), (hours, "h"), (minutes, "m"), (secs, "s")):
        if value:
            parts.append(f"{value}{unit}")
    return " ".join(parts)


def _ip_key(text: str) -> tuple:
    # Unparsable addresses sort before all valid ones, among themselves by text
    try:
        return (1, int(ipaddress.IPv4Address(text.strip())))
    except ValueError:
        return (0, text)


def _cmp(a, b) -> int:
    if a == b:
        return 0
    return -1 if a < b else 1


@dataclass
class OptionData:
    name: str = ""
    data: str = ""
    code: int = 0
    space: str = ""
    csv_format: bool = False
    always_send: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "OptionData":
        return cls(
            name=str(data.get("name", "")),
            data=str(data.get("data", "")),
            code=int(data.get("code", 0)),
            space=str(data.get("space", "")),
            csv_format=bool(data.get("csv-format", False)),
            always_send=bool(data.get("always-send", False)),
        )


@dataclass
class Pool:
    pool: str = ""
    option_data: list[OptionData] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "Pool":
        return cls(
            pool=str(data.get("pool", "")),
            option_data=[OptionData.from_dict(o) for o in data.get("option-data", [])],
        )

    def bounds(self) -> tuple[str, str]:
        """First and last address of the pool.

        Kea accepts both ``first-last`` ranges and CIDR prefixes.
        """
        if "-" in self.pool:
            first, last = self.pool.split("-", 1)
            return first.strip(), last.strip()
        try:
            network = ipaddress.IPv4Network(self.pool.strip(), strict=False)
        except ValueError:
            return self.pool, ""
        return str(network.network_address), str(network.broadcast_address)


@dataclass
class Reservation:
    ip_address: str = ""
    hw_address: str = ""
    hostname: str = ""
    boot_file_name: str = ""
    next_server: str = ""
    server_hostname: str = ""
    option_data: list = field(default_factory=list)
    client_classes: list = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "Reservation":
        return cls(
            ip_address=str(data.get("ip-address", "")),
            hw_address=str(data.get("hw-address", "")),
            hostname=str(data.get("hostname", "")),
            boot_file_name=str(data.get("boot-file-name", "")),
            next_server=str(data.get("next-server", "")),
            server_hostname=str(data.get("server-hostname", "")),
            option_data=list(data.get("option-data", [])),
            client_classes=list(data.get("client-classes", [])),
        )


@dataclass
class Subnet:
    id: int
    subnet: str
    reservations: list[Reservation] = field(default_factory=list)
    pools: list[Pool] = field(default_factory=list)
    option_data: list[OptionData] = field(default_factory=list)
    renew_timer: int = 0
    rebind_timer: int = 0
    valid_lifetime: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "Subnet":
        return cls(
            id=int(data["id"]),
            subnet=str(data["subnet"]),
            reservations=[Reservation.from_dict(r) for r in data.get("reservations", [])],
            pools=[Pool.from_dict(p) for p in data.get("pools", [])],
            option_data=[OptionData.from_dict(o) for o in data.get("option-data", [])],
            renew_timer=int(data.get("renew-timer", 0)),
            rebind_timer=int(data.get("rebind-timer", 0)),
            valid_lifetime=int(data.get("valid-lifetime", 0)),
        )

    @property
    def network(self) -> str:
        """Network portion of the CIDR (text before ``/``)."""
        return self.subnet.split("/", 1)[0]

    def reservation_for(self, ip_address: str) -> Optional[Reservation]:
        for reservation in self.reservations:
            if reservation.ip_address == ip_address:
                return reservation
        return None


@dataclass
class Lease:
    ip_address: str
    hw_address: str = ""
    client_id: str = ""
    hostname: str = ""
    state: int = 0
    cltt: int = 0
    valid_lft: int = 0
    subnet_id: int = 0
    fqdn_fwd: bool = False
    fqdn_rev: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "Lease":
        return cls(
            ip_address=str(data["ip-address"]),
            hw_address=str(data.get("hw-address", "")),
            client_id=str(data.get("client-id", "")),
            hostname=str(data.get("hostname", "")),
            state=int(data.get("state", 0)),
            cltt=int(data.get("cltt", 0)),
            valid_lft=int(data.get("valid-lft", 0)),
            subnet_id=int(data.get("subnet-id", 0)),
            fqdn_fwd=bool(data.get("fqdn-fwd", False)),
            fqdn_rev=bool(data.get("fqdn-rev", False)),
        )

    @property
    def state_label(self) -> str:
        return LeaseState.label(self.state)

    @property
    def expires(self) -> int:
        return self.cltt + self.valid_lft

    @property
    def timestamp(self) -> str:
        """Lease creation time in local time, or the raw value when out of range."""
        try:
            return datetime.fromtimestamp(self.cltt).strftime("%Y-%m-%dT%H:%M:%S")
        except (OverflowError, OSError, ValueError):
            return str(self.cltt)


@dataclass
class KeaStatus:
    pid: int = 0
    uptime: int = 0
    reload: int = 0
    multi_threading_enabled: bool = False
    high_availability: list = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "KeaStatus":
        return cls(
            pid=int(data.get("pid", 0)),
            uptime=int(data.get("uptime", 0)),
            reload=int(data.get("reload", 0)),
            multi_threading_enabled=bool(data.get("multi-threading-enabled", False)),
            high_availability=list(data.get("high-availability", [])),
        )

    @property
    def uptime_str(self) -> str:
        return format_duration(self.uptime)


@dataclass
class SortSpec:
    column: LeaseColumn = LeaseColumn.CLTT
    ascending: bool = True

    def toggle(self, column: LeaseColumn) -> None:
        """Flip direction on the active column, otherwise switch to it ascending."""
        if column == self.column:
            self.ascending = not self.ascending
        else:
            self.column = column
            self.ascending = True

    @property
    def arrow(self) -> str:
        return "▲" if self.ascending else "▼"


def compare_leases(a: Lease, b: Lease, column: LeaseColumn) -> int:
    """Compare two leases on one column. Returns -1, 0 or 1."""
    if column == LeaseColumn.HOSTNAME:
        return _cmp(a.hostname, b.hostname)
    if column == LeaseColumn.IP_ADDRESS:
        return _cmp(_ip_key(a.ip_address), _ip_key(b.ip_address))
    if column == LeaseColumn.HW_ADDRESS:
        return _cmp(a.hw_address, b.hw_address)
    if column == LeaseColumn.STATE:
        return _cmp(a.state, b.state)
    if column == LeaseColumn.CLTT:
        return _cmp(a.cltt, b.cltt)
    if column == LeaseColumn.CLIENT_ID:
        return _cmp(a.client_id, b.client_id)
    return 0


def sort_leases(leases: list[Lease], spec: SortSpec) -> list[Lease]:
    """Stable sort on the active column; ties stay in ascending IP order."""
    by_ip = sorted(leases, key=lambda lease: _ip_key(lease.ip_address))
    key = cmp_to_key(lambda a, b: compare_leases(a, b, spec.column))
    return sorted(by_ip, key=key, reverse=not spec.ascending)


def sort_subnets(subnets: list[Subnet]) -> list[Subnet]:
    """Order subnets by the numeric value of their network address."""
    return sorted(subnets, key=lambda s: _ip_key(s.network))


def has_reservation(lease: Lease, subnet: Subnet) -> bool:
    return subnet.reservation_for(lease.ip_address) is not None
