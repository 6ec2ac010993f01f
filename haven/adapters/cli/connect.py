"""
Connect CLI command
"""
from typing import Optional

import typer

from ...core.duration import parse_duration
from ...core.exceptions import InputError
from ...core.logging import get_logger
from ...domain.flows import ConnectFlow, ConnectRequest
from . import services
from .errors import handle_errors

logger = get_logger(__name__)


def register_connect_command(app: typer.Typer) -> None:
    app.command(name="connect")(connect)


def parse_idle_timeout(value: Optional[str]) -> Optional[int]:
    """
    Raises:
        InputError: If value is not a valid duration
    """
    if value is None:
        return None
    parsed = parse_duration(value)
    if parsed is None:
        raise InputError(
            f"Invalid idle timeout: {value}",
            hints=["Use a duration such as 30m, 2h, 1h30m or 0 to disable."],
        )
    return parsed


def connect(
    ctx: typer.Context,
    path: Optional[str] = typer.Argument(None, help="Local directory (default: enclosing connected directory)"),
    target: Optional[str] = typer.Option(
        None, "--target", "-t", help="Remote target: name, host, user@host or user@host:port"
    ),
    idle_timeout: Optional[str] = typer.Option(
        None, "--idle-timeout", help="Idle timeout, e.g. 30m or 2h (0 disables)"
    ),
    reset_host_key: bool = typer.Option(
        False, "--reset-host-key", help="Forget the cached host key before connecting"
    ),
):
    """
    Connect a local directory to a remote workspace

    Examples:
        haven connect . --target my-workspace
        haven connect ~/src/app --target alice@10.0.0.5:2222
        haven connect --reset-host-key
    """
    with handle_errors("connect"):
        request = ConnectRequest(
            path=path,
            target=target,
            idle_timeout=parse_idle_timeout(idle_timeout),
            reset_host_key=reset_host_key,
        )
        svc = services.build_services(ctx.obj)
        flow = ConnectFlow(
            settings=svc.settings,
            connections=svc.connections,
            sessions=svc.sessions,
            identity=svc.identity,
            host_config=svc.host_config,
            ssh=svc.ssh,
            sync_engine=svc.sync_engine,
            prompts=svc.prompts,
        )
        result = flow.run(request)
        logger.info("Connected %s via %s", result.local_path, result.config.ssh_alias)
