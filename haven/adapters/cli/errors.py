"""
Uniform error reporting for CLI commands
"""
from contextlib import contextmanager
from typing import Iterator

import typer
from rich.markup import escape

from ...core.exceptions import HavenError
from ...core.logging import get_logger, get_stderr_console

logger = get_logger(__name__)
stderr_console = get_stderr_console()


def print_error(error: HavenError) -> None:
    stderr_console.print(f"[red]Error:[/red] {escape(str(error))}", highlight=False)
    for hint in error.hints:
        stderr_console.print(f"  {hint}", highlight=False, markup=False)


@contextmanager
def handle_errors(action: str) -> Iterator[None]:
    """
    Turn failures inside the block into exit code 1.

    HavenError carries its own remediation hints; anything else is logged
    with a traceback.
    """
    try:
        yield
    except typer.Exit:
        raise
    except HavenError as e:
        logger.debug("%s failed: %s", action, e)
        print_error(e)
        raise typer.Exit(1)
    except Exception as e:
        logger.exception("Failed to %s", action)
        stderr_console.print(f"[red]Error:[/red] Failed to {action}: {escape(str(e))}", highlight=False)
        raise typer.Exit(1)
