"""Data models for minecraft-compose."""
from mcc.models.config import ConfigValidationError
from mcc.models.server import (
    ServerConfig,
    ServerIdentity,
    ServerSettings,
    ServerType,
    WorldSettings,
)
from mcc.models.state import ContainerDetails, ContainerState, GameState

__all__ = [
    'ConfigValidationError',
    'ContainerDetails',
    'ContainerState',
    'GameState',
    'ServerConfig',
    'ServerIdentity',
    'ServerSettings',
    'ServerType',
    'WorldSettings',
]
