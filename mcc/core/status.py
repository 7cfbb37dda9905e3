"""Read-only status reporting for the managed server."""
from dataclasses import dataclass

from rich.console import Console
from rich.table import Table

from mcc.core.lifecycle import LifecycleController
from mcc.models.server import ServerIdentity
from mcc.models.state import ContainerDetails, ContainerState, GameState

STATE_STYLES = {
    ContainerState.ABSENT: "dim",
    ContainerState.CREATED: "yellow",
    ContainerState.RUNNING: "green",
    ContainerState.STOPPED: "red",
}


@dataclass
class StatusReport:
    """Container state plus the identity it was resolved from."""
    identity: ServerIdentity
    details: ContainerDetails

    @property
    def state(self) -> ContainerState:
        return self.details.state


class StatusReporter:
    """Queries the controller and renders what it finds. No side effects."""

    def __init__(self, controller: LifecycleController):
        self.controller = controller

    def report(self) -> StatusReport:
        """Raises RuntimeUnavailable if the runtime cannot be reached."""
        return StatusReport(identity=self.controller.identity, details=self.controller.describe())

    def render(self, report: StatusReport, console: Console) -> None:
        identity = report.identity
        details = report.details
        style = STATE_STYLES[details.state]

        table = Table(title=f"Server {identity.name}", show_header=True, header_style="bold cyan")
        table.add_column("Property", style="cyan")
        table.add_column("Value")

        table.add_row("Container", identity.container_name)
        table.add_row("State", f"[{style}]{details.state.label}[/{style}]")
        table.add_row("Address", identity.address)
        if details.is_running:
            table.add_row("Game", self._game_label(details.health))
        if details.container_id:
            table.add_row("Container ID", details.container_id[:12])
        if details.image:
            table.add_row("Image", details.image)
        if details.rcon_address:
            host, port = details.rcon_address
            table.add_row("RCON", f"{host}:{port}")

        console.print(table)

    @staticmethod
    def _game_label(health: GameState) -> str:
        if health is GameState.READY:
            return "[green]ready[/green]"
        if health is GameState.STARTING:
            return "[yellow]starting[/yellow]"
        return "[dim]unknown[/dim]"
