"""keaview TUI screens."""

from keaview.screens.lease_screen import LeaseScreen
from keaview.screens.help_screen import HelpScreen

__all__ = [
    "LeaseScreen",
    "HelpScreen",
]
