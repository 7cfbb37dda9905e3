"""Server configuration models."""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Optional

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 25565


class ServerType(Enum):
    """Server variants the container image knows how to launch."""
    VANILLA = "vanilla"

    @property
    def image_type(self) -> str:
        """Value of the TYPE variable understood by the server image."""
        return self.value.upper()


@dataclass(frozen=True)
class ServerIdentity:
    """Logical name and network binding of one managed server."""
    name: str
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    def __post_init__(self):
        if not self.name:
            raise ValueError("Server name must not be empty")

    @property
    def container_name(self) -> str:
        """Name of the backing container (one container per server name)."""
        return self.name

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"


@dataclass
class ServerSettings:
    """The [server] table: which server build to run and how."""
    version: str
    memory: Optional[str] = None
    type: ServerType = ServerType.VANILLA


@dataclass
class WorldSettings:
    """The [world] table, written into server.properties."""
    name: str = "world"
    seed: Optional[str] = None
    gamemode: str = "survival"
    difficulty: str = "easy"
    allow_flight: bool = False


@dataclass
class ServerConfig:
    """Fully resolved minecraft-compose configuration."""
    name: str
    server: ServerSettings
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    world: WorldSettings = field(default_factory=WorldSettings)
    datapacks: Dict[str, str] = field(default_factory=dict)
    base_dir: Path = field(default_factory=Path.cwd)

    @property
    def identity(self) -> ServerIdentity:
        return ServerIdentity(name=self.name, host=self.host, port=self.port)

    @property
    def data_dir(self) -> Path:
        """Host directory bind-mounted as the server's /data."""
        return self.base_dir / "data"

    @property
    def datapacks_dir(self) -> Path:
        """Host directory holding datapack sources referenced by [datapacks]."""
        return self.base_dir / "datapacks"
