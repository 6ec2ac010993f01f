"""
Exec CLI command
"""
import os
import sys
from typing import List, Optional

import typer

from ...core.exceptions import InputError
from ...core.logging import get_logger
from ...core.paths import canonical_path, is_directory, map_to_remote
from ...domain.hostspec import derive_alias
from ...domain.quote import build_remote_command
from . import services
from .errors import handle_errors

logger = get_logger(__name__)


def register_exec_command(app: typer.Typer) -> None:
    app.command(
        name="exec",
        context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False},
    )(exec_command)


def exec_command(
    ctx: typer.Context,
    command: List[str] = typer.Argument(..., help="Command and arguments to run remotely"),
    cwd: Optional[str] = typer.Option(None, "--cwd", "-C", help="Local directory to map (default: current directory)"),
):
    """
    Run a command in the remote counterpart of the current directory

    Examples:
        haven exec -- npm test
        haven exec --cwd src -- ls -la
    """
    exit_code = 0
    with handle_errors("run remote command"):
        local_cwd = canonical_path(cwd or os.getcwd())
        if not is_directory(local_cwd):
            raise InputError(f"Path does not exist or is not a directory: {cwd}")

        svc = services.build_services(ctx.obj)
        found = svc.connections.find_ancestor(local_cwd)
        if found is None:
            raise InputError(
                "This directory is not connected.",
                hints=["haven connect . --target <host>"],
            )
        local_root, config = found

        remote_cwd = map_to_remote(local_root, config.remote_path, local_cwd)
        remote_command = build_remote_command(remote_cwd, command)
        alias = config.ssh_alias or derive_alias(config.host, config.port)
        tty = sys.stdin.isatty() and sys.stdout.isatty()

        logger.info("exec on %s: %s", alias, remote_command)
        exit_code = svc.ssh.run(alias, remote_command, tty=tty)

    raise typer.Exit(exit_code)
