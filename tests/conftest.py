"""Shared test fixtures for minecraft-compose tests."""
import textwrap
from typing import Dict, List, Optional

import pytest

from mcc.core.lifecycle import LifecycleController
from mcc.models.server import ServerIdentity
from mcc.models.state import ContainerDetails, ContainerState, GameState
from mcc.services.runtime.base import ContainerRuntime, LaunchParameters


class FakeRuntime(ContainerRuntime):
    """In-memory runtime that records every call it receives."""

    def __init__(self, state: ContainerState = ContainerState.ABSENT):
        self.state = state
        self.health = GameState.UNKNOWN
        self.calls: List[tuple] = []
        self.history: List[ContainerState] = [state]
        self.failures: Dict[str, BaseException] = {}
        self.streams = None
        self.rcon_address = ("127.0.0.1", "49153")

    def _record(self, operation: str, *args) -> None:
        self.calls.append((operation,) + args)
        if operation in self.failures:
            raise self.failures[operation]

    def _set(self, state: ContainerState) -> None:
        self.state = state
        self.history.append(state)

    @property
    def mutating_calls(self) -> List[tuple]:
        return [call for call in self.calls if call[0] != "inspect"]

    def create(self, name, bind_host, bind_port, launch_parameters):
        self._record("create", name, bind_host, bind_port, launch_parameters)
        self._set(ContainerState.CREATED)

    def start(self, name):
        self._record("start", name)
        self._set(ContainerState.RUNNING)

    def stop(self, name, grace_period):
        self._record("stop", name, grace_period)
        self._set(ContainerState.STOPPED)

    def remove(self, name):
        self._record("remove", name)
        self._set(ContainerState.ABSENT)

    def describe(self, name):
        self._record("inspect", name)
        if self.state is ContainerState.ABSENT:
            return ContainerDetails.absent()
        return ContainerDetails(
            state=self.state,
            health=self.health,
            container_id="0123456789abcdef",
            image="itzg/minecraft-server:latest",
            rcon_address=self.rcon_address,
        )

    def attach(self, name):
        self._record("attach", name)
        return self.streams


@pytest.fixture
def identity() -> ServerIdentity:
    return ServerIdentity(name="server", host="0.0.0.0", port=25565)


@pytest.fixture
def launch_parameters() -> LaunchParameters:
    return LaunchParameters(image="itzg/minecraft-server:latest", environment={"EULA": "true"})


@pytest.fixture
def runtime() -> FakeRuntime:
    return FakeRuntime()


@pytest.fixture
def make_controller(identity, launch_parameters):
    """Build a controller around a FakeRuntime in the given state."""

    def _make(state: ContainerState = ContainerState.ABSENT, server_files=None, grace_period: int = 30):
        fake = FakeRuntime(state)
        controller = LifecycleController(
            fake,
            identity,
            launch_parameters,
            server_files=server_files,
            grace_period=grace_period,
        )
        return controller, fake

    return _make


@pytest.fixture
def write_config(tmp_path):
    """Write a minecraft-compose.toml into tmp_path and return its path."""

    def _write(body: Optional[str] = None, name: str = "minecraft-compose.toml"):
        if body is None:
            body = """\
                name = "server"
                host = "127.0.0.1"
                port = 25570

                [server]
                version = "1.17.1"
                memory = "2G"
                """
        path = tmp_path / name
        path.write_text(textwrap.dedent(body))
        return path

    return _write
