"""Docker Engine runtime using the docker SDK."""
from contextlib import contextmanager
from typing import Dict, Optional, Tuple

import docker
import docker.errors
import requests.exceptions

from mcc.core.errors import ContainerRuntimeError, RuntimeUnavailable
from mcc.core.logger import get_logger
from mcc.models.state import ContainerDetails, ContainerState, GameState
from .base import ContainerRuntime, InputSink, LaunchParameters, OutputSource
from .streams import SocketStream

logger = get_logger(__name__)

STATUS_MAP: Dict[str, ContainerState] = {
    "created": ContainerState.CREATED,
    "running": ContainerState.RUNNING,
    "restarting": ContainerState.RUNNING,
    # A paused container still holds its process and ports; it is unpaused,
    # not started, so it counts as Running (a warning is logged on inspect)
    "paused": ContainerState.RUNNING,
    "exited": ContainerState.STOPPED,
    "dead": ContainerState.STOPPED,
    "removing": ContainerState.ABSENT,
}

HEALTH_MAP: Dict[str, GameState] = {
    "starting": GameState.STARTING,
    "healthy": GameState.READY,
}

RCON_PORT = "25575/tcp"


class DockerRuntime(ContainerRuntime):
    """Container runtime backed by the local (or DOCKER_HOST) Docker daemon."""

    def __init__(self, client: Optional[docker.DockerClient] = None):
        """Initialize runtime.

        Args:
            client: Preconfigured client; created from the environment on first
                use when omitted
        """
        self._client = client

    @property
    def client(self) -> docker.DockerClient:
        if self._client is None:
            try:
                self._client = docker.from_env()
            except docker.errors.DockerException as e:
                raise RuntimeUnavailable("connect", f"cannot reach Docker daemon: {e}") from e
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    @contextmanager
    def _call(self, operation: str, name: str):
        """Translate docker SDK failures into the runtime error taxonomy."""
        try:
            yield
        except docker.errors.APIError as e:
            detail = e.explanation or str(e)
            logger.debug(f"Docker API error during {operation} of {name}: {detail}")
            raise ContainerRuntimeError(operation, f"{name}: {detail}") from e
        except requests.exceptions.ConnectionError as e:
            raise RuntimeUnavailable(operation, f"cannot reach Docker daemon: {e}") from e
        except docker.errors.DockerException as e:
            raise RuntimeUnavailable(operation, str(e)) from e

    def _ensure_image(self, image: str) -> None:
        try:
            self.client.images.get(image)
            return
        except docker.errors.ImageNotFound:
            pass

        logger.info(f"Pulling image {image} (this can take a while)")
        repository, _, tag = image.rpartition(":")
        if not repository or "/" in tag:
            repository, tag = image, "latest"
        self.client.images.pull(repository, tag=tag)
        logger.info(f"✓ Pulled {image}")

    def create(
        self,
        name: str,
        bind_host: str,
        bind_port: int,
        launch_parameters: LaunchParameters,
    ) -> None:
        params = launch_parameters
        ports: Dict[str, Tuple[str, Optional[int]]] = {
            f"{params.container_port}/tcp": (bind_host, bind_port),
        }
        ports.update(params.extra_ports)

        volumes = {}
        if params.data_path is not None:
            volumes[str(params.data_path)] = {"bind": params.data_mount, "mode": "rw"}

        with self._call("create", name):
            self._ensure_image(params.image)
            logger.debug(f"Creating container {name} from {params.image} with ports {ports}")
            self.client.containers.create(
                params.image,
                name=name,
                environment=dict(params.environment),
                ports=ports,
                volumes=volumes,
                restart_policy={"Name": params.restart_policy},
                stdin_open=params.interactive,
                tty=params.interactive,
                labels=dict(params.labels),
            )

    def start(self, name: str) -> None:
        with self._call("start", name):
            self.client.containers.get(name).start()

    def stop(self, name: str, grace_period: int) -> None:
        with self._call("stop", name):
            container = self.client.containers.get(name)
            container.stop(timeout=grace_period)
            container.reload()
            if container.status == "running":
                logger.warning(
                    f"Container {name} still running after {grace_period}s grace period, killing it"
                )
                container.kill()

    def remove(self, name: str) -> None:
        with self._call("remove", name):
            self.client.containers.get(name).remove()

    def describe(self, name: str) -> ContainerDetails:
        with self._call("inspect", name):
            try:
                container = self.client.containers.get(name)
            except docker.errors.NotFound:
                return ContainerDetails.absent()
            return self._details_from_attrs(container.attrs)

    @staticmethod
    def _details_from_attrs(attrs: Dict) -> ContainerDetails:
        state_info = attrs.get("State") or {}
        status = state_info.get("Status")
        state = STATUS_MAP.get(status)
        if state is None:
            # Unknown status strings are treated as a stopped container so
            # destroy stays possible
            logger.debug(f"Unrecognized container status {status!r}")
            state = ContainerState.STOPPED
        elif status == "paused":
            name = (attrs.get("Name") or "").lstrip("/")
            logger.warning(f"Container {name} is paused; run `docker unpause {name}` before using it")

        health = GameState.UNKNOWN
        if state is ContainerState.RUNNING:
            health_status = (state_info.get("Health") or {}).get("Status")
            health = HEALTH_MAP.get(health_status, GameState.UNKNOWN)

        rcon_address = None
        ports = (attrs.get("NetworkSettings") or {}).get("Ports") or {}
        bindings = ports.get(RCON_PORT) or []
        if len(bindings) == 1:
            rcon_address = (bindings[0].get("HostIp"), bindings[0].get("HostPort"))

        return ContainerDetails(
            state=state,
            health=health,
            container_id=attrs.get("Id"),
            image=(attrs.get("Config") or {}).get("Image"),
            rcon_address=rcon_address,
        )

    def attach(self, name: str) -> Tuple[InputSink, OutputSource]:
        with self._call("attach", name):
            container = self.client.containers.get(name)
            raw = container.attach_socket(
                params={"stdin": 1, "stdout": 1, "stderr": 1, "stream": 1}
            )
        stream = SocketStream(raw)
        return stream, stream
