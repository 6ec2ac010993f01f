"""
Status CLI command
"""
import json
from typing import Optional

import typer
from rich.markup import escape

from ...core.duration import format_duration_verbose
from ...core.logging import get_stdout_console
from ...core.paths import contract_path
from ...domain.flows import Diagnosis, StatusFlow, StatusReport
from ...infrastructure.sync import format_sync_status
from . import services
from .errors import handle_errors

stdout_console = get_stdout_console()


def register_status_command(app: typer.Typer) -> None:
    app.command(name="status")(status)


# ============================================================
# Rendering
# ============================================================

def print_json(report: StatusReport) -> None:
    typer.echo(json.dumps(report.to_dict(), indent=2))


def print_report(report: StatusReport) -> None:
    if report.host is None:
        stdout_console.print("[dim]○[/dim] Not connected")
        return

    target = escape(f"{report.host}:{report.port}")
    if report.connected:
        stdout_console.print(f"[green]●[/green] Connected to [cyan]{target}[/cyan]")
    else:
        stdout_console.print(f"[dim]○[/dim] Disconnected [dim]({target})[/dim]")

    stdout_console.print(
        f"  {escape(contract_path(report.local_path))} ↔ {escape(report.remote_path)}",
        highlight=False,
    )
    if report.sync_status:
        stdout_console.print(f"  Sync: {escape(format_sync_status(report.sync_status))}", highlight=False)
    if report.session_duration:
        stdout_console.print(f"  Session: {report.session_duration}", highlight=False)
    if report.idle_timeout is not None:
        stdout_console.print(f"  Idle timeout: {format_duration_verbose(report.idle_timeout)}", highlight=False)

    if report.conflicts:
        stdout_console.print()
        stdout_console.print(f"[yellow]⚠[/yellow] {len(report.conflicts)} sync conflict(s):")
        for conflict in report.conflicts:
            stdout_console.print(f"  • {escape(conflict)}", highlight=False)

    if report.errors:
        stdout_console.print()
        stdout_console.print("[yellow]⚠[/yellow] Errors:")
        for error in report.errors:
            stdout_console.print(f"  • {escape(error)}", highlight=False)


def print_diagnosis(diagnosis: Diagnosis) -> None:
    out = stdout_console
    out.print("=== Haven Diagnostics ===")
    out.print()

    if diagnosis.config is None:
        out.print("Status: Not connected")
        out.print("No connection configuration found for this directory.")
        return

    config = diagnosis.config
    out.print(f"Local path: {escape(diagnosis.local_path)}", highlight=False)
    out.print(
        f"Remote: {escape(f'{config.user}@{config.host}:{config.port}{config.remote_path}')}",
        highlight=False,
    )
    out.print(f"SSH alias: {diagnosis.alias}", highlight=False)
    out.print(f"SSH config include: {'OK' if diagnosis.include_ok else 'MISSING'}")
    if diagnosis.host_entry is None:
        out.print("SSH host entry: MISSING")
    else:
        entry = diagnosis.host_entry
        out.print(
            f"SSH host entry: {escape(str(entry['user']))}@{escape(entry['host'])}:{entry['port']} "
            f"({len(entry['identity_files'])} identity file(s))",
            highlight=False,
        )
    out.print()

    if diagnosis.probe is not None:
        out.print(f"SSH: {'OK' if diagnosis.probe.success else 'FAILED'}")
        if diagnosis.probe.error:
            out.print(f"Error: {escape(diagnosis.probe.error)}", highlight=False)
        out.print()

    sync = diagnosis.sync
    if sync is not None:
        out.print(f"Sync status: {escape(sync.status)}", highlight=False)
        if sync.conflicts:
            out.print(f"Conflicts: {len(sync.conflicts)}")
            for conflict in sync.conflicts:
                out.print(f"  - {escape(conflict)}", highlight=False)
        if sync.errors:
            out.print("Errors:")
            for error in sync.errors:
                out.print(f"  - {escape(error)}", highlight=False)


# ============================================================
# Command
# ============================================================

def status(
    ctx: typer.Context,
    path: Optional[str] = typer.Argument(None, help="Local directory (default: current directory)"),
    as_json: bool = typer.Option(False, "--json", help="Print machine-readable JSON"),
    watch: bool = typer.Option(False, "--watch", "-w", help="Refresh until interrupted"),
    diagnose: bool = typer.Option(False, "--diagnose", help="Probe SSH live and show details"),
):
    """
    Show connection and sync status

    Examples:
        haven status
        haven status --json
        haven status --watch
    """
    with handle_errors("read status"):
        svc = services.build_services(ctx.obj)
        flow = StatusFlow(
            connections=svc.connections,
            sessions=svc.sessions,
            sync_engine=svc.sync_engine,
            ssh=svc.ssh,
            host_config=svc.host_config,
        )

        if diagnose:
            print_diagnosis(flow.diagnose(path))
            return

        if watch:
            def render(report: StatusReport) -> None:
                if stdout_console.is_terminal:
                    stdout_console.clear()
                if as_json:
                    print_json(report)
                else:
                    print_report(report)
                    stdout_console.print()
                    stdout_console.print("[dim]Press Ctrl+C to exit[/dim]")

            flow.watch(render, path, interval=svc.settings.watch_interval)
            return

        report = flow.collect(path)
        if as_json:
            print_json(report)
        else:
            print_report(report)
