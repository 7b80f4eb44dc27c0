"""Shared fixtures: sample Kea payloads and a fake client."""
import pytest

from keaview.models import Lease, Reservation, Subnet


SUBNET4 = [
    {
        "id": 2,
        "subnet": "10.0.10.0/24",
        "renew-timer": 900,
        "rebind-timer": 1800,
        "valid-lifetime": 3600,
        "pools": [{"pool": "10.0.10.100-10.0.10.200", "option-data": []}],
        "option-data": [
            {
                "name": "routers",
                "data": "10.0.10.1",
                "code": 3,
                "space": "dhcp4",
                "csv-format": True,
                "always-send": False,
            }
        ],
        "reservations": [
            {
                "ip-address": "10.0.10.5",
                "hw-address": "aa:bb:cc:00:00:05",
                "hostname": "printer",
                "boot-file-name": "",
                "next-server": "0.0.0.0",
                "server-hostname": "",
                "option-data": [],
                "client-classes": [],
            }
        ],
    },
    {"id": 1, "subnet": "10.0.9.0/24", "pools": [], "reservations": []},
]

LEASES = [
    {
        "ip-address": "10.0.10.10",
        "hw-address": "aa:bb:cc:00:00:10",
        "client-id": "01:aa",
        "hostname": "laptop",
        "state": 0,
        "cltt": 1700000300,
        "valid-lft": 3600,
        "subnet-id": 2,
        "fqdn-fwd": False,
        "fqdn-rev": False,
    },
    {
        "ip-address": "10.0.10.5",
        "hw-address": "aa:bb:cc:00:00:05",
        "client-id": "01:bb",
        "hostname": "printer",
        "state": 1,
        "cltt": 1700000100,
        "valid-lft": 3600,
        "subnet-id": 2,
    },
    {
        "ip-address": "10.0.10.9",
        "hw-address": "aa:bb:cc:00:00:09",
        "client-id": "01:cc",
        "hostname": "phone",
        "state": 2,
        "cltt": 1700000200,
        "valid-lft": 3600,
        "subnet-id": 2,
    },
]


class FakeKea:
    """Stands in for KeaClient in navigator tests."""

    def __init__(self, leases=None, delete_reply=(0, "IPv4 lease deleted.")):
        self.leases = leases if leases is not None else [Lease.from_dict(d) for d in LEASES]
        self.delete_reply = delete_reply
        self.lease_calls: list[int] = []
        self.deleted: list[str] = []

    def get_leases(self, subnet_id):
        self.lease_calls.append(subnet_id)
        return list(self.leases)

    def delete_lease(self, ip_address):
        self.deleted.append(ip_address)
        return self.delete_reply


@pytest.fixture
def subnets():
    return [Subnet.from_dict(d) for d in SUBNET4]


@pytest.fixture
def leases():
    return [Lease.from_dict(d) for d in LEASES]


@pytest.fixture
def fake_kea():
    return FakeKea()


def make_subnet(subnet_id: int, cidr: str, reserved: tuple = ()) -> Subnet:
    return Subnet(
        id=subnet_id,
        subnet=cidr,
        reservations=[Reservation(ip_address=ip) for ip in reserved],
    )
