"""Interactive console CLI commands: console and rcon."""
from __future__ import annotations

import typer
from rich.console import Console
from rich.markup import escape

from mcc.cli_support import (
    build_controller,
    cli_errors,
    get_state,
    load_server_config,
    local_terminal_fds,
    print_info,
    print_warning,
)
from mcc.core.console_session import DETACH_HINT, ConsoleSession, SessionEnd
from mcc.core.rcon_session import RconSession
from mcc.services.server_files import RCON_PASSWORD


def register_console_commands(app: typer.Typer, console: Console) -> None:
    """Attach the console command to the main CLI."""

    @app.command("console")
    def console_command(ctx: typer.Context) -> None:
        """Connects a console to the server.

        Detach with Ctrl-P Ctrl-Q or Ctrl-C; the server keeps running.
        """
        state = get_state(ctx)
        with cli_errors(console, state.verbose):
            config = load_server_config(state.config_path)
            controller = build_controller(config)
            input_fd, output_fd = local_terminal_fds()
            input_sink, output_source = controller.attach()

            console.print(f"[dim]Attached to {controller.name}. Detach with {DETACH_HINT} or Ctrl-C.[/dim]")
            session = ConsoleSession(input_sink, output_source, input_fd, output_fd)
            end = session.run()
            console.print()

            if end is SessionEnd.REMOTE_CLOSED:
                current = controller.status()
                print_warning(console, f"Server closed the console; {controller.name} is now {current.label}")
            else:
                print_info(console, f"Detached from {controller.name}; the server keeps running")

    @app.command("rcon")
    def rcon_command(ctx: typer.Context) -> None:
        """Opens an RCON command prompt on the server.

        One command per line; end with Ctrl-D or Ctrl-C.
        """
        state = get_state(ctx)
        with cli_errors(console, state.verbose):
            config = load_server_config(state.config_path)
            controller = build_controller(config)
            host, port = controller.rcon_address()

            console.print(f"[dim]RCON prompt for {controller.name}. End with Ctrl-D or Ctrl-C.[/dim]")
            session = RconSession(
                host,
                port,
                RCON_PASSWORD,
                prompt=escape(f"[{controller.name}] > "),
                read_line=console.input,
                write_output=lambda response: console.print(response, markup=False, highlight=False),
            )
            sent = session.run()
            console.print()
            print_info(console, f"RCON session with {controller.name} closed after {sent} command(s)")
