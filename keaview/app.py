"""Main keaview Textual Application."""

import logging

from rich.markup import escape
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.screen import Screen
from textual.widgets import Header, Footer, Static, LoadingIndicator
from textual.containers import Container, Center, Middle
from textual import work

from keaview.config import Config
from keaview.kea_client import KeaClient, KeaError
from keaview.models import KeaStatus, Subnet

logger = logging.getLogger(__name__)


class ConnectingScreen(Screen):
    """Screen shown while the subnet configuration is fetched."""

    def __init__(self, url: str):
        super().__init__()
        self.url = url

    def compose(self) -> ComposeResult:
        yield Header()
        with Center():
            with Middle():
                with Container(id="connecting-box"):
                    yield Static(
                        f"Connecting to Kea at {self.url}...",
                        id="connecting-msg",
                        markup=False,
                    )
                    yield LoadingIndicator()
        yield Footer()


class KeaViewApp(App):
    """keaview - Kea DHCPv4 lease browser."""

    TITLE = "keaview"
    SUB_TITLE = "Kea DHCPv4 Leases"
    CSS_PATH = "styles/app.tcss"

    BINDINGS = [
        Binding("question_mark", "help_screen", "Help", show=True),
    ]

    def __init__(self, config: Config):
        super().__init__()
        self.config = config
        self.kea = KeaClient(config)

    def on_mount(self):
        self.push_screen(ConnectingScreen(self.config.url))
        self.connect_to_kea()

    @work(thread=True)
    def connect_to_kea(self):
        """Fetch subnets and daemon status in a background thread."""
        try:
            subnets = self.kea.get_subnets()
            status = self.kea.get_status()
        except KeaError as e:
            self.call_from_thread(self.fail, str(e))
            return
        self.call_from_thread(self._on_connected, subnets, status)

    def _on_connected(self, subnets: list[Subnet], status: KeaStatus):
        self.pop_screen()  # Remove connecting screen
        from keaview.navigation import Navigator
        from keaview.screens.lease_screen import LeaseScreen

        status_line = self.config.url
        if status.pid:
            status_line += f" | pid {status.pid} | up {status.uptime_str}"
        self.push_screen(LeaseScreen(Navigator(self.kea, subnets), status_line))

    def fail(self, error: str):
        """Terminate on a transport or protocol failure."""
        logger.error("Fatal Kea error: %s", error)
        self.exit(
            return_code=1,
            message=f"[bold red]Kea error:[/bold red] {escape(error)}",
        )

    def action_help_screen(self):
        """Show help screen."""
        from keaview.screens.help_screen import HelpScreen
        if not isinstance(self.screen, HelpScreen):
            self.push_screen(HelpScreen())
