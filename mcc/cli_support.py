"""Shared utilities for minecraft-compose CLI modules."""
from __future__ import annotations

import sys
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

import typer
from rich.console import Console
from rich.markup import escape

from mcc.config.loader import load_config
from mcc.core.errors import MccError
from mcc.core.lifecycle import DEFAULT_GRACE_PERIOD, LifecycleController
from mcc.models.config import ConfigValidationError
from mcc.models.server import ServerConfig
from mcc.services.launch import build_launch_parameters
from mcc.services.runtime import ContainerRuntime, DockerRuntime
from mcc.services.server_files import ServerFiles

CONFIG_ERROR_EXIT_CODE = 2


@dataclass
class CliState:
    """Global options shared by every command."""
    config_path: Optional[str] = None
    verbose: bool = False


def get_state(ctx: typer.Context) -> CliState:
    """Return the global options, tolerating commands invoked without the callback."""
    if isinstance(ctx.obj, CliState):
        return ctx.obj
    return CliState()


def get_runtime() -> ContainerRuntime:
    """Return the container runtime used by CLI commands."""
    return DockerRuntime()


def load_server_config(config_path: Optional[str]) -> ServerConfig:
    """Load the configuration file named on the command line (or the default)."""
    return load_config(config_path)


def build_controller(
    config: ServerConfig,
    runtime: Optional[ContainerRuntime] = None,
    grace_period: int = DEFAULT_GRACE_PERIOD,
) -> LifecycleController:
    """Wire a LifecycleController for the configured server."""
    files = ServerFiles(config)
    return LifecycleController(
        runtime if runtime is not None else get_runtime(),
        config.identity,
        build_launch_parameters(config, files.data_path),
        server_files=files,
        grace_period=grace_period,
    )


def local_terminal_fds() -> Tuple[int, int]:
    """File descriptors of the invoking terminal (input, output)."""
    sys.stdout.flush()
    return sys.stdin.fileno(), sys.stdout.fileno()


def handle_cli_error(
    e: Exception,
    console: Console,
    verbose: bool = False,
    exit_code: int = 1
) -> None:
    """Handle CLI errors with consistent formatting.

    Args:
        e: Exception to handle
        console: Rich console for output
        verbose: Show exception traceback if True
        exit_code: Exit code to use
    """
    console.print(f"[red]Error:[/red] {escape(str(e))}")
    if verbose:
        console.print_exception()
    raise typer.Exit(exit_code)


@contextmanager
def cli_errors(console: Console, verbose: bool = False) -> Iterator[None]:
    """Map configuration and lifecycle failures to messages and exit codes."""
    try:
        yield
    except (FileNotFoundError, ConfigValidationError) as e:
        handle_cli_error(e, console, verbose, exit_code=CONFIG_ERROR_EXIT_CODE)
    except MccError as e:
        handle_cli_error(e, console, verbose, exit_code=e.exit_code)
    except OSError as e:
        handle_cli_error(e, console, verbose)


def print_success(console: Console, message: str, prefix: str = "✓") -> None:
    """Print success message with consistent formatting.

    Args:
        console: Rich console for output
        message: Success message
        prefix: Prefix symbol (default: ✓)
    """
    console.print(f"[green]{prefix}[/green] {message}")


def print_warning(console: Console, message: str, prefix: str = "⚠") -> None:
    """Print warning message with consistent formatting."""
    console.print(f"[yellow]{prefix}[/yellow] {message}")


def print_info(console: Console, message: str, prefix: str = "ℹ") -> None:
    """Print info message with consistent formatting."""
    console.print(f"[cyan]{prefix}[/cyan] {message}")
