"""Entry point for keaview CLI."""

import logging
import os
import sys


def _setup_logging():
    """Send log records to the Textual devtools console, not the terminal."""
    from textual.logging import TextualHandler

    level = os.environ.get("KEAVIEW_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        handlers=[TextualHandler()],
    )


def main():
    """Main entry point."""
    from rich.console import Console
    from rich.markup import escape
    from keaview.config import Config, ConfigError

    try:
        config = Config.from_args(sys.argv[1:])
    except ConfigError as e:
        console = Console(stderr=True)
        console.print(f"\n[bold red]Usage Error:[/bold red] {escape(str(e))}")
        console.print("\n  [bold]keaview[/bold] [dim]\\[HOST][/dim]")
        sys.exit(2)

    _setup_logging()

    # Launch the TUI app
    from keaview.app import KeaViewApp
    app = KeaViewApp(config=config)
    app.run()
    sys.exit(app.return_code or 0)


if __name__ == "__main__":
    main()
