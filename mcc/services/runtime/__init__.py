"""Container runtime clients."""
from .base import ContainerRuntime, InputSink, LaunchParameters, OutputSource
from .docker_runtime import DockerRuntime
from .streams import SocketStream

__all__ = [
    'ContainerRuntime',
    'DockerRuntime',
    'InputSink',
    'LaunchParameters',
    'OutputSource',
    'SocketStream',
]
