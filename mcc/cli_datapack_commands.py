"""Datapack CLI command group."""
from __future__ import annotations

import typer
from rich.console import Console

from mcc.cli_support import (
    cli_errors,
    get_state,
    load_server_config,
    print_info,
    print_success,
    print_warning,
)
from mcc.services.server_files import ServerFiles

DatapackTyper = typer.Typer(help="Manage datapacks for the server", add_completion=False)


def register_datapack_commands(root: typer.Typer, console: Console) -> None:
    """Attach datapack commands to the main CLI."""

    @DatapackTyper.command("sync")
    def sync_command(ctx: typer.Context) -> None:
        """Syncs datapacks to the server."""
        state = get_state(ctx)
        with cli_errors(console, state.verbose):
            config = load_server_config(state.config_path)
            result = ServerFiles(config).sync_datapacks()

        for name in result.removed:
            print_info(console, f"Removed {name}", prefix="-")
        for name in result.installed:
            print_success(console, f"Installed {name}")
        for name in result.skipped:
            print_warning(console, f"Skipped {name} (source not found)")

        if result.installed or result.removed:
            console.print("[dim]Run /reload in the server console to apply datapack changes.[/dim]")

    root.add_typer(DatapackTyper, name="datapacks")
