"""Abstract contract for container runtimes."""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Protocol, Tuple

from mcc.models.state import ContainerDetails, ContainerState


class InputSink(Protocol):
    """Write side of an attached container stream (the process's stdin)."""

    def write(self, data: bytes) -> None: ...

    def close(self) -> None: ...


class OutputSource(Protocol):
    """Read side of an attached container stream (the process's stdout)."""

    def read(self, size: int = ...) -> bytes: ...

    def close(self) -> None: ...


@dataclass
class LaunchParameters:
    """Server-variant parameters the runtime needs to create the container."""
    image: str
    environment: Dict[str, str] = field(default_factory=dict)
    container_port: int = 25565
    # container port -> (host ip, host port or None for ephemeral)
    extra_ports: Dict[str, Tuple[str, Optional[int]]] = field(default_factory=dict)
    data_path: Optional[Path] = None
    data_mount: str = "/data"
    restart_policy: str = "always"
    interactive: bool = True
    labels: Dict[str, str] = field(default_factory=dict)


class ContainerRuntime(ABC):
    """Primitive operations against named containers.

    Implementations translate their own failures into RuntimeUnavailable
    (runtime unreachable) or ContainerRuntimeError (runtime reported a failure).
    """

    @abstractmethod
    def create(
        self,
        name: str,
        bind_host: str,
        bind_port: int,
        launch_parameters: LaunchParameters,
    ) -> None:
        """Create a container.

        Args:
            name: Container name
            bind_host: Host address the game port is published on
            bind_port: Host port the game port is published on
            launch_parameters: Image, environment, mounts and policies
        """
        pass

    @abstractmethod
    def start(self, name: str) -> None:
        """Start the container's process."""
        pass

    @abstractmethod
    def stop(self, name: str, grace_period: int) -> None:
        """Stop the container.

        Args:
            name: Container name
            grace_period: Seconds to wait after the graceful stop signal before
                force-killing
        """
        pass

    @abstractmethod
    def remove(self, name: str) -> None:
        """Remove the container and its writable layer."""
        pass

    @abstractmethod
    def describe(self, name: str) -> ContainerDetails:
        """Inspect the container.

        Returns:
            Details with state ABSENT when no such container exists
        """
        pass

    @abstractmethod
    def attach(self, name: str) -> Tuple[InputSink, OutputSource]:
        """Attach to the running container's primary process stream."""
        pass

    def inspect(self, name: str) -> ContainerState:
        """Return only the container's state."""
        return self.describe(name).state
