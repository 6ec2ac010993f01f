"""
Main CLI application
"""
from pathlib import Path
from typing import Optional

import typer

from ... import __version__
from ...core.logging import get_logger, get_stdout_console, setup_logging
from ..config.loader import load_settings
from .connect import register_connect_command
from .disconnect import register_disconnect_command
from .errors import handle_errors
from .remote_exec import register_exec_command
from .status import register_status_command

logger = get_logger(__name__)
console = get_stdout_console()

# Create main app
app = typer.Typer(
    name="haven",
    add_completion=False,
    help="Connect local directories to remote dev workspaces",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

register_connect_command(app)
register_disconnect_command(app)
register_status_command(app)
register_exec_command(app)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"haven {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        "-l",
        help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Log file path",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """
    Haven - keep a local directory in sync with a remote workspace

    Use subcommands to perform different operations:
    - connect: Set up SSH and start syncing
    - disconnect: Flush and stop syncing
    - status: Show connection and sync state
    - exec: Run a command in the mapped remote directory
    """
    setup_logging(level=log_level, log_file=log_file)

    with handle_errors("load configuration"):
        ctx.obj = load_settings()
    logger.debug("Settings: %s", ctx.obj)


def run():
    """CLI entry point"""
    app()


if __name__ == "__main__":
    run()
