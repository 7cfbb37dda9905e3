"""Configuration validation logic."""
import re
from typing import Any, Dict, List

from mcc.models.config import ConfigValidationError
from mcc.models.server import ServerType

# Docker's container name rule
CONTAINER_NAME_PATTERN = re.compile(r'^[a-zA-Z0-9][a-zA-Z0-9_.-]+$')

GAMEMODES = ("survival", "creative", "adventure", "spectator")
DIFFICULTIES = ("peaceful", "easy", "normal", "hard")

TOP_LEVEL_KEYS = {"name", "host", "port", "server", "world", "datapacks"}


class ConfigValidator:
    """Validates a raw (parsed TOML) server configuration."""

    def validate(self, config: Dict[str, Any]) -> None:
        """Validate the whole configuration.

        Raises:
            ConfigValidationError: Listing every problem found
        """
        errors: List[str] = []

        unknown = sorted(set(config) - TOP_LEVEL_KEYS)
        if unknown:
            errors.append(f"Unknown top-level keys: {', '.join(unknown)}")

        errors.extend(self._validate_name(config.get('name')))
        errors.extend(self._validate_binding(config))
        errors.extend(self._validate_server(config.get('server')))
        errors.extend(self._validate_world(config.get('world', {})))
        errors.extend(self._validate_datapacks(config.get('datapacks', {})))

        if errors:
            error_msg = "Configuration validation failed:\n  " + "\n  ".join(errors)
            raise ConfigValidationError(error_msg)

    def _validate_name(self, name: Any) -> List[str]:
        if name is None:
            return ["'name' is required"]
        if not isinstance(name, str) or not name:
            return ["'name' must be a non-empty string"]
        if not CONTAINER_NAME_PATTERN.match(name):
            return [
                f"'name' {name!r} is not a valid container name "
                "(letters, digits, '_', '.', '-'; at least 2 characters; must start with a letter or digit)"
            ]
        return []

    def _validate_binding(self, config: Dict[str, Any]) -> List[str]:
        errors = []
        host = config.get('host', '0.0.0.0')
        if not isinstance(host, str) or not host:
            errors.append("'host' must be a non-empty string")

        port = config.get('port', 25565)
        if isinstance(port, bool) or not isinstance(port, int):
            errors.append("'port' must be an integer")
        elif not 1 <= port <= 65535:
            errors.append(f"'port' {port} is out of range (1-65535)")
        return errors

    def _validate_server(self, server: Any) -> List[str]:
        if server is None:
            return ["[server] table is required"]
        if not isinstance(server, dict):
            return ["'server' must be a table"]

        errors = []
        version = server.get('version')
        if not isinstance(version, str) or not version:
            errors.append("'server.version' is required")

        memory = server.get('memory')
        if memory is not None and not isinstance(memory, str):
            errors.append("'server.memory' must be a string such as \"2G\"")

        server_type = server.get('type', ServerType.VANILLA.value)
        known = [t.value for t in ServerType]
        if not isinstance(server_type, str) or server_type.lower() not in known:
            errors.append(f"'server.type' must be one of: {', '.join(known)}")
        return errors

    def _validate_world(self, world: Any) -> List[str]:
        if not isinstance(world, dict):
            return ["'world' must be a table"]

        errors = []
        name = world.get('name', 'world')
        if not isinstance(name, str) or not name:
            errors.append("'world.name' must be a non-empty string")

        seed = world.get('seed')
        if seed is not None and not isinstance(seed, (str, int)):
            errors.append("'world.seed' must be a string or integer")

        gamemode = world.get('gamemode', 'survival')
        if gamemode not in GAMEMODES:
            errors.append(f"'world.gamemode' must be one of: {', '.join(GAMEMODES)}")

        difficulty = world.get('difficulty', 'easy')
        if difficulty not in DIFFICULTIES:
            errors.append(f"'world.difficulty' must be one of: {', '.join(DIFFICULTIES)}")

        if not isinstance(world.get('allow_flight', False), bool):
            errors.append("'world.allow_flight' must be true or false")
        return errors

    def _validate_datapacks(self, datapacks: Any) -> List[str]:
        if not isinstance(datapacks, dict):
            return ["'datapacks' must be a table of name = \"file\" entries"]
        return [
            f"Datapack '{name}' source must be a file name string"
            for name, source in datapacks.items()
            if not isinstance(source, str) or not source
        ]
