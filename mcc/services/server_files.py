"""Host-side server files: data folder, server.properties and datapacks."""
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Set

from mcc.core.logger import get_logger
from mcc.models.server import ServerConfig

logger = get_logger(__name__)

# RCON is only published on loopback, see mcc.services.launch
RCON_PASSWORD = "minecraft"

DEFAULT_PROPERTIES: Dict[str, str] = {
    "server-port": "25565",
    "enable-rcon": "true",
    "rcon.port": "25575",
    "rcon.password": RCON_PASSWORD,
    "broadcast-rcon-to-ops": "true",
}


@dataclass
class DatapackSyncResult:
    """What a datapack sync changed."""
    installed: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


def merge_properties(existing: str, to_set: Dict[str, str], to_remove: Set[str]) -> str:
    """Merge managed keys into the text of a server.properties file.

    Lines keep their order; managed keys are rewritten in place, keys in
    to_remove are dropped, and managed keys not yet present are appended in
    sorted order. Comments and unmanaged keys pass through untouched.
    """
    pending = set(to_set)
    lines: List[str] = []

    for line in existing.splitlines():
        if "=" not in line:
            lines.append(line)
            continue

        key = line.split("=", 1)[0]
        if key in pending:
            pending.discard(key)
            lines.append(f"{key}={to_set[key]}")
        elif key in to_remove:
            continue
        else:
            lines.append(line)

    for key in sorted(pending):
        lines.append(f"{key}={to_set[key]}")

    return "\n".join(lines) + "\n"


class ServerFiles:
    """Manages the files bind-mounted into the server container."""

    def __init__(self, config: ServerConfig):
        self.config = config
        self.data_path = config.data_dir.resolve()
        self.server_properties_path = self.data_path / "server.properties"

    def create_data_folder(self) -> None:
        if not self.data_path.is_dir():
            logger.debug(f"Creating data folder {self.data_path}")
            self.data_path.mkdir(parents=True)

    def managed_properties(self) -> Dict[str, str]:
        world = self.config.world
        properties = dict(DEFAULT_PROPERTIES)
        properties.update({
            "level-name": world.name,
            "gamemode": world.gamemode,
            "difficulty": world.difficulty,
            "allow-flight": "true" if world.allow_flight else "false",
        })
        if world.seed is not None:
            properties["level-seed"] = world.seed
        return properties

    def write_server_properties(self) -> Path:
        """Create or update server.properties from the [world] settings.

        Returns:
            Path of the written file
        """
        existing = ""
        if self.server_properties_path.is_file():
            existing = self.server_properties_path.read_text()

        to_remove = set() if self.config.world.seed is not None else {"level-seed"}
        merged = merge_properties(existing, self.managed_properties(), to_remove)
        self.server_properties_path.write_text(merged)
        logger.debug(f"Wrote {self.server_properties_path}")
        return self.server_properties_path

    def prepare(self) -> None:
        """Make sure the data folder and server.properties exist before create."""
        self.create_data_folder()
        self.write_server_properties()

    def sync_datapacks(self) -> DatapackSyncResult:
        """Make the world's datapacks folder match the [datapacks] table."""
        result = DatapackSyncResult()
        wanted = self.config.datapacks
        installed_dir = self.data_path / self.config.world.name / "datapacks"
        installed_dir.mkdir(parents=True, exist_ok=True)

        for entry in sorted(installed_dir.iterdir()):
            if entry.stem in wanted:
                continue
            logger.debug(f"Uninstalling datapack {entry.name}")
            if entry.is_dir():
                shutil.rmtree(entry)
            else:
                entry.unlink()
            result.removed.append(entry.stem)

        for name, source in sorted(wanted.items()):
            source_path = self.config.datapacks_dir / source
            if not source_path.is_file():
                logger.warning(f"Unable to find the source for the datapack \"{name}\", skipping")
                result.skipped.append(name)
                continue

            destination = installed_dir / f"{name}.zip"
            logger.debug(f"Installing {name} from {source_path} to {destination}")
            shutil.copyfile(source_path, destination)
            result.installed.append(name)

        return result
