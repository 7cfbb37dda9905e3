"""TOML configuration loader."""
import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional

from mcc.config.validator import ConfigValidator
from mcc.core.logger import get_logger
from mcc.models.config import ConfigValidationError
from mcc.models.server import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    ServerConfig,
    ServerSettings,
    ServerType,
    WorldSettings,
)

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = "./minecraft-compose.toml"
CONFIG_ENV_VAR = "MCC_CONFIG"


def find_config(config_path: Optional[str] = None) -> str:
    """Locate the active configuration file (flag, then env, then default)."""
    if config_path:
        return config_path

    if env_config := os.environ.get(CONFIG_ENV_VAR):
        return env_config

    return DEFAULT_CONFIG_PATH


class ConfigLoader:
    """Loads and validates a minecraft-compose configuration file."""

    def __init__(self, config_path: str = DEFAULT_CONFIG_PATH):
        self.config_path = Path(config_path)
        self.raw_config: Optional[Dict[str, Any]] = None
        self.validator = ConfigValidator()

    def load(self) -> ServerConfig:
        """Load TOML configuration from file."""
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config file not found: {self.config_path}")

        logger.debug(f"Loading config from {self.config_path}")
        try:
            text = self.config_path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ConfigValidationError(f"Config file is not valid UTF-8: {self.config_path}") from e
        if not text.strip():
            raise ConfigValidationError(f"Config file is empty: {self.config_path}")

        try:
            self.raw_config = tomllib.loads(text)
        except tomllib.TOMLDecodeError as e:
            raise ConfigValidationError(f"Invalid TOML in {self.config_path}: {e}") from e

        self.validator.validate(self.raw_config)
        return self._build(self.raw_config)

    def _build(self, raw: Dict[str, Any]) -> ServerConfig:
        server = raw['server']
        world = raw.get('world', {})
        seed = world.get('seed')

        return ServerConfig(
            name=raw['name'],
            host=raw.get('host', DEFAULT_HOST),
            port=raw.get('port', DEFAULT_PORT),
            server=ServerSettings(
                version=server['version'],
                memory=server.get('memory'),
                type=ServerType(server.get('type', ServerType.VANILLA.value).lower()),
            ),
            world=WorldSettings(
                name=world.get('name', 'world'),
                seed=str(seed) if seed is not None else None,
                gamemode=world.get('gamemode', 'survival'),
                difficulty=world.get('difficulty', 'easy'),
                allow_flight=world.get('allow_flight', False),
            ),
            datapacks=dict(raw.get('datapacks', {})),
            base_dir=self.config_path.resolve().parent,
        )


def load_config(config_path: Optional[str] = None) -> ServerConfig:
    """Find and load the configuration in one step."""
    return ConfigLoader(find_config(config_path)).load()
