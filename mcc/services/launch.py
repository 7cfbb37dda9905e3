"""Translate a server configuration into container launch parameters."""
from pathlib import Path
from typing import Dict

from mcc.models.server import ServerConfig
from mcc.services.runtime.base import LaunchParameters

IMAGE_NAME = "itzg/minecraft-server"
IMAGE_TAG = "latest"

GAME_PORT = 25565
RCON_PORT = 25575
LABEL_PREFIX = "minecraft-compose"


def server_environment(config: ServerConfig) -> Dict[str, str]:
    """Environment variables the server image reads at startup."""
    env = {
        "EULA": "true",
        "VERSION": config.server.version,
    }
    if config.server.memory:
        env["MEMORY"] = config.server.memory
    env["TYPE"] = config.server.type.image_type
    return env


def build_launch_parameters(config: ServerConfig, data_path: Path) -> LaunchParameters:
    """Build the parameters used to create the server container.

    Args:
        config: Resolved server configuration
        data_path: Absolute host path mounted as the server's /data

    Returns:
        LaunchParameters for ContainerRuntime.create
    """
    return LaunchParameters(
        image=f"{IMAGE_NAME}:{IMAGE_TAG}",
        environment=server_environment(config),
        container_port=GAME_PORT,
        # RCON stays on loopback with an ephemeral host port
        extra_ports={f"{RCON_PORT}/tcp": ("127.0.0.1", None)},
        data_path=data_path,
        restart_policy="always",
        interactive=True,
        labels={
            f"{LABEL_PREFIX}.name": config.name,
            f"{LABEL_PREFIX}.config-dir": str(config.base_dir),
        },
    )
