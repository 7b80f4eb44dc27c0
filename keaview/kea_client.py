"""Kea control agent API client for keaview."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import requests

from keaview.config import Config
from keaview.models import KeaStatus, Lease, Subnet

logger = logging.getLogger(__name__)

# Kea result codes
RESULT_SUCCESS = 0
RESULT_ERROR = 1
RESULT_UNSUPPORTED = 2
RESULT_EMPTY = 3


class KeaError(Exception):
    """Kea API transport or decode error."""
    pass


class Command(str, Enum):
    CONFIG_GET = "config-get"
    STATUS_GET = "status-get"
    LEASE4_GET_ALL = "lease4-get-all"
    LEASE4_DEL = "lease4-del"


@dataclass
class KeaResponse:
    """One element of a control agent response.

    ``arguments`` stays undecoded: each caller pulls the fragment it needs
    and decodes that into typed records.
    """
    result: int
    text: str = ""
    arguments: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "KeaResponse":
        if not isinstance(data, dict) or "result" not in data:
            raise KeaError(f"Malformed response element: {data!r}")
        arguments = data.get("arguments") or {}
        if not isinstance(arguments, dict):
            raise KeaError(f"Malformed response arguments: {arguments!r}")
        try:
            result = int(data["result"])
        except (TypeError, ValueError) as e:
            raise KeaError(f"Malformed result code: {data['result']!r}") from e
        return cls(
            result=result,
            text=str(data.get("text") or ""),
            arguments=arguments,
        )

    def fragment(self, name: str) -> Any:
        """Return a named argument fragment, raising if it is missing."""
        if name not in self.arguments:
            raise KeaError(
                f"Response has no '{name}' argument (result {self.result}: {self.text})"
            )
        return self.arguments[name]


class KeaClient:
    """Client for the Kea control agent REST API.

    Every call is a single JSON POST to the agent root carrying the
    command, its arguments and the target service.  The agent answers
    with a list holding one element per service; only the first is used.

    See: https://kea.readthedocs.io/en/latest/arm/ctrl-channel.html
    """

    def __init__(self, config: Config):
        self.config = config
        self.url = config.url
        self.service = config.service
        self._timeout = config.timeout
        self._session = requests.Session()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def execute(self, command: Command, arguments: Any = "") -> list[KeaResponse]:
        """Send a command and decode the response envelope."""
        payload = {
            "arguments": arguments,
            "command": command.value,
            "service": [self.service],
        }
        logger.debug("Sending %s to %s: %s", command.value, self.url, arguments)
        try:
            resp = self._session.post(
                self.url,
                json=payload,
                timeout=self._timeout,
            )
            resp.raise_for_status()
            body = resp.json()
        except requests.RequestException as e:
            logger.warning("Kea request %s failed: %s", command.value, e)
            raise KeaError(f"Kea request failed ({command.value}): {e}") from e
        except ValueError as e:
            raise KeaError(f"Kea sent an undecodable response ({command.value}): {e}") from e

        if not isinstance(body, list) or not body:
            raise KeaError(f"Kea sent an unexpected envelope ({command.value}): {body!r}")
        return [KeaResponse.from_dict(item) for item in body]

    def _first(self, command: Command, arguments: Any = "") -> KeaResponse:
        return self.execute(command, arguments)[0]

    # ------------------------------------------------------------------
    # Subnets
    # ------------------------------------------------------------------

    def get_subnets(self) -> list[Subnet]:
        """Get the configured IPv4 subnets, in configuration order."""
        response = self._first(Command.CONFIG_GET)
        dhcp4 = response.fragment("Dhcp4")
        if not isinstance(dhcp4, dict) or "subnet4" not in dhcp4:
            raise KeaError("Configuration has no Dhcp4.subnet4 section")
        return _decode_list(Subnet, dhcp4["subnet4"], "subnet4")

    # ------------------------------------------------------------------
    # Leases
    # ------------------------------------------------------------------

    def get_leases(self, subnet_id: int) -> list[Lease]:
        """Get all leases of one subnet."""
        response = self._first(Command.LEASE4_GET_ALL, {"subnets": [subnet_id]})
        if response.result == RESULT_EMPTY and "leases" not in response.arguments:
            return []
        return _decode_list(Lease, response.fragment("leases"), "leases")

    def delete_lease(self, ip_address: str) -> tuple[int, str]:
        """Delete a lease by address.

        The result code and text are passed through untouched; a failed
        delete is reported by the service, not raised.
        """
        response = self._first(Command.LEASE4_DEL, {"ip-address": ip_address})
        return response.result, response.text

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def get_status(self) -> KeaStatus:
        response = self._first(Command.STATUS_GET)
        try:
            return KeaStatus.from_dict(response.arguments)
        except (TypeError, ValueError) as e:
            raise KeaError(f"Malformed status: {e}") from e


def _decode_list(record_cls, items: Any, name: str) -> list:
    if not isinstance(items, list):
        raise KeaError(f"Expected a list for '{name}', got {type(items).__name__}")
    try:
        return [record_cls.from_dict(item) for item in items]
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise KeaError(f"Malformed '{name}' entry: {e}") from e
