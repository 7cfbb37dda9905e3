#!/usr/bin/env python3
"""minecraft-compose CLI - one TOML file, one Minecraft server container."""
from typing import Optional

import typer
from rich.console import Console

from mcc import __version__
from mcc.cli_console_commands import register_console_commands
from mcc.cli_datapack_commands import register_datapack_commands
from mcc.cli_lifecycle_commands import register_lifecycle_commands
from mcc.cli_support import CliState
from mcc.core.logger import configure_logging, setup_file_logging

app = typer.Typer(
    name="mcc",
    help="""Minecraft Compose - manage a Minecraft server container

One TOML file describes the server.

Quick start:
  mcc up        # create and start the server
  mcc status    # see what it is doing
  mcc console   # talk to it (detach with Ctrl-P Ctrl-Q)
  mcc rcon      # send commands over RCON
  mcc down      # stop and remove the container (world data is kept)
""",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    file: Optional[str] = typer.Option(
        None, "--file", "-f", metavar="FILE",
        help="Config file to use (default: ./minecraft-compose.toml or $MCC_CONFIG).",
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Silences all output except errors."),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="Prints additional output."),
    debug: bool = typer.Option(False, "--debug", "-d", hidden=True, help="Enables extremely verbose debug output."),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Also write log records to this file."),
) -> None:
    configure_logging(debug=debug, quiet=quiet, verbosity=verbose)
    setup_file_logging(log_file, verbose=debug or verbose > 0)
    ctx.obj = CliState(config_path=file, verbose=debug or verbose > 0)


@app.command("version")
def version() -> None:
    """Show minecraft-compose version."""
    console.print(f"minecraft-compose v{__version__}")


register_lifecycle_commands(app, console)
register_console_commands(app, console)
register_datapack_commands(app, console)

if __name__ == "__main__":
    app()
