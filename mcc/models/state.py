"""Container state as reported by the runtime."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class ContainerState(Enum):
    """Runtime view of the container backing a server.

    Never cached: every caller re-reads it from the runtime.
    """
    ABSENT = "absent"
    CREATED = "created"
    RUNNING = "running"
    STOPPED = "stopped"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class GameState(Enum):
    """Health of the game process inside a running container."""
    UNKNOWN = "unknown"
    STARTING = "starting"
    READY = "ready"


@dataclass
class ContainerDetails:
    """Everything one runtime inspection tells us about a container."""
    state: ContainerState
    health: GameState = GameState.UNKNOWN
    container_id: Optional[str] = None
    image: Optional[str] = None
    rcon_address: Optional[Tuple[str, str]] = None

    @property
    def exists(self) -> bool:
        return self.state is not ContainerState.ABSENT

    @property
    def is_running(self) -> bool:
        return self.state is ContainerState.RUNNING

    @classmethod
    def absent(cls) -> "ContainerDetails":
        return cls(state=ContainerState.ABSENT)
