"""
Disconnect CLI command
"""
from typing import Optional

import typer

from ...domain.flows import DisconnectFlow
from . import services
from .errors import handle_errors


def register_disconnect_command(app: typer.Typer) -> None:
    app.command(name="disconnect")(disconnect)


def disconnect(
    ctx: typer.Context,
    path: Optional[str] = typer.Argument(None, help="Local directory (default: enclosing connected directory)"),
    forget: bool = typer.Option(
        False, "--forget", help="Also delete the stored target and its SSH host entry"
    ),
):
    """
    Flush pending changes, stop syncing and end the session

    Failures of individual steps are reported but never abort the
    disconnect; the session record is always removed.
    """
    with handle_errors("disconnect"):
        svc = services.build_services(ctx.obj)
        flow = DisconnectFlow(
            connections=svc.connections,
            sessions=svc.sessions,
            ssh=svc.ssh,
            sync_engine=svc.sync_engine,
            prompts=svc.prompts,
            host_config=svc.host_config,
        )
        flow.run(path, forget=forget)
