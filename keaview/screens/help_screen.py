"""Help screen for keaview."""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.screen import Screen
from textual.widgets import Header, Footer, Static
from textual.containers import VerticalScroll


HELP_TEXT = """\
[bold cyan]keaview — Kea DHCPv4 lease browser[/bold cyan]

[bold]Global Keys[/bold]
  [bold cyan]q[/bold cyan]           Quit
  [bold cyan]Escape[/bold cyan]      Quit / Cancel search
  [bold cyan]m[/bold cyan]           Cycle view (Leases / Reservations / Subnet Information)
  [bold cyan]?[/bold cyan]           Show this help screen
  [bold cyan]Tab[/bold cyan]         Switch between subnet list and table

[bold]Subnet List[/bold]
  [bold cyan]Enter[/bold cyan]       Show the highlighted subnet
  [bold cyan]j k ↑ ↓[/bold cyan]     Move
  [bold cyan]l →[/bold cyan]         Focus table

[bold]Table[/bold]
  [bold cyan]Enter[/bold cyan]       Toggle row selection
  [bold cyan]h ←[/bold cyan]         Focus subnet list (when scrolled fully left)
  [bold cyan]Click header[/bold cyan] Sort leases by column (again to reverse)
  [bold cyan]d[/bold cyan]           Delete the selected lease

[bold]Search[/bold]
  [bold cyan]/[/bold cyan]           Search in the focused panel
  [bold cyan]n[/bold cyan]           Next match
  [bold cyan]N[/bold cyan]           Previous match

[bold]About[/bold]
  keaview talks to the Kea control agent on port 8000.
  Usage:  keaview [HOST]
"""


class HelpScreen(Screen):
    """Help screen showing keybindings."""

    BINDINGS = [
        Binding("escape", "go_back", "Close", show=True),
        Binding("backspace", "go_back", "Close", show=False),
        Binding("q", "go_back", "Close", show=False),
    ]

    def compose(self) -> ComposeResult:
        yield Header()
        with VerticalScroll(id="help-container"):
            yield Static(HELP_TEXT, markup=True)
        yield Footer()

    def action_go_back(self):
        self.app.pop_screen()
