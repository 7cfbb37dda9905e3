"""Lifecycle CLI commands: up, down, create, destroy, start, stop, status."""
from __future__ import annotations

from typing import Callable

import typer
from rich.console import Console

from mcc.cli_support import (
    build_controller,
    cli_errors,
    get_state,
    load_server_config,
    print_success,
)
from mcc.core.lifecycle import DEFAULT_GRACE_PERIOD, LifecycleController
from mcc.core.status import StatusReporter
from mcc.models.state import ContainerState

TIMEOUT_HELP = "Seconds to wait for a graceful stop before killing the server."


def register_lifecycle_commands(app: typer.Typer, console: Console) -> None:
    """Attach lifecycle commands to the main CLI."""

    def run(
        ctx: typer.Context,
        action: Callable[[LifecycleController], ContainerState],
        grace_period: int = DEFAULT_GRACE_PERIOD,
    ) -> None:
        state = get_state(ctx)
        with cli_errors(console, state.verbose):
            config = load_server_config(state.config_path)
            controller = build_controller(config, grace_period=grace_period)
            result = action(controller)
            print_success(console, f"{controller.name} is {result.label}")

    @app.command("up")
    def up_command(ctx: typer.Context) -> None:
        """Creates and starts the server container."""
        run(ctx, lambda controller: controller.up())

    @app.command("down")
    def down_command(
        ctx: typer.Context,
        timeout: int = typer.Option(DEFAULT_GRACE_PERIOD, "--timeout", "-t", min=0, help=TIMEOUT_HELP),
    ) -> None:
        """Stops and destroys the server container."""
        run(ctx, lambda controller: controller.down(), grace_period=timeout)

    @app.command("create")
    def create_command(ctx: typer.Context) -> None:
        """Creates the server container."""
        run(ctx, lambda controller: controller.create())

    @app.command("destroy")
    def destroy_command(ctx: typer.Context) -> None:
        """Destroys the server container (world data is kept)."""
        run(ctx, lambda controller: controller.destroy())

    @app.command("start")
    def start_command(ctx: typer.Context) -> None:
        """Starts the server container."""
        run(ctx, lambda controller: controller.start())

    @app.command("stop")
    def stop_command(
        ctx: typer.Context,
        timeout: int = typer.Option(DEFAULT_GRACE_PERIOD, "--timeout", "-t", min=0, help=TIMEOUT_HELP),
    ) -> None:
        """Stops the server container."""
        run(ctx, lambda controller: controller.stop(), grace_period=timeout)

    @app.command("status")
    def status_command(
        ctx: typer.Context,
        porcelain: bool = typer.Option(False, "--porcelain", help="Print only the state name (script-friendly)."),
    ) -> None:
        """Displays the container status."""
        state = get_state(ctx)
        with cli_errors(console, state.verbose):
            config = load_server_config(state.config_path)
            reporter = StatusReporter(build_controller(config))
            report = reporter.report()

        if porcelain:
            typer.echo(report.state.value)
        else:
            reporter.render(report, console)
