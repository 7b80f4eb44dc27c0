"""keaview - terminal browser for Kea DHCPv4 leases."""

__version__ = "0.1.0"
