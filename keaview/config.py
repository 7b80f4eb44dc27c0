"""Configuration management for keaview."""

from dataclasses import dataclass
from typing import Optional


class ConfigError(Exception):
    """Configuration error."""
    pass


@dataclass
class Config:
    host: str = "127.0.0.1"
    port: int = 8000            # Kea control agent port
    service: str = "dhcp4"      # Daemon the control agent forwards to
    timeout: Optional[float] = None

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @classmethod
    def from_args(cls, args: list[str]) -> "Config":
        """Build configuration from the positional command-line arguments.

        The only accepted argument is the control agent host.
        """
        if len(args) > 1:
            raise ConfigError(
                f"Expected at most one argument (host), got {len(args)}: "
                + " ".join(args)
            )

        config = cls()
        if args:
            host = args[0].strip()
            if not host:
                raise ConfigError("Host must not be empty")
            config.host = host
        return config
