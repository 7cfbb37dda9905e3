"""Server container lifecycle (create, start, stop, destroy, up, down)."""
from typing import Callable, FrozenSet, Optional, Tuple, TypeVar

from mcc.core.errors import (
    AlreadyExists,
    ContainerRuntimeError,
    Interrupted,
    InvalidState,
    MccError,
)
from mcc.core.logger import get_logger
from mcc.models.server import ServerIdentity
from mcc.models.state import ContainerDetails, ContainerState
from mcc.services.runtime.base import ContainerRuntime, InputSink, LaunchParameters, OutputSource
from mcc.services.server_files import ServerFiles

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_GRACE_PERIOD = 30

STARTABLE: FrozenSet[ContainerState] = frozenset({ContainerState.CREATED, ContainerState.STOPPED})
DESTROYABLE: FrozenSet[ContainerState] = frozenset({ContainerState.CREATED, ContainerState.STOPPED})

# Published on every interface; connect through loopback
WILDCARD_HOSTS = ("0.0.0.0", "::")


class LifecycleController:
    """Drives one server's container through its lifecycle.

    Holds no container state of its own: every operation reads the current
    state from the runtime before acting, because the container can be changed
    behind our back (docker CLI, daemon restarts, a crashing server).

    Primitives (create, start, stop, destroy) accept exactly one set of
    starting states and fail otherwise. The composites (up, down) are the only
    place that decides which primitives a given state needs.
    """

    def __init__(
        self,
        runtime: ContainerRuntime,
        identity: ServerIdentity,
        launch_parameters: LaunchParameters,
        server_files: Optional[ServerFiles] = None,
        grace_period: int = DEFAULT_GRACE_PERIOD,
    ):
        self.runtime = runtime
        self.identity = identity
        self.launch_parameters = launch_parameters
        self.server_files = server_files
        self.grace_period = grace_period

    @property
    def name(self) -> str:
        return self.identity.container_name

    def _call(self, operation: str, func: Callable[..., T], *args) -> T:
        """Run one runtime round-trip, turning Ctrl-C into Interrupted."""
        try:
            return func(*args)
        except KeyboardInterrupt:
            logger.debug(f"{operation} of {self.name} interrupted")
            raise Interrupted(operation) from None

    # ------------------------------------------------------------------ #
    # Read path

    def status(self) -> ContainerState:
        """Query the container's current state. Never mutates anything."""
        return self._call("status", self.runtime.inspect, self.name)

    def describe(self) -> ContainerDetails:
        """Query the container's state along with health and port details."""
        return self._call("status", self.runtime.describe, self.name)

    # ------------------------------------------------------------------ #
    # Primitives

    def create(self) -> ContainerState:
        """Create the container. Requires state Absent.

        Raises:
            AlreadyExists: If a container with the server's name exists
        """
        state = self.status()
        if state is not ContainerState.ABSENT:
            raise AlreadyExists("create", f"container '{self.name}' already exists", state)

        if self.server_files is not None:
            try:
                self.server_files.prepare()
            except OSError as e:
                raise MccError("create", f"cannot prepare server data folder: {e}", state) from e

        logger.info(f"Creating container {self.name} ({self.identity.address})")
        self._call(
            "create",
            self.runtime.create,
            self.name,
            self.identity.host,
            self.identity.port,
            self.launch_parameters,
        )
        logger.info(f"✓ Container {self.name} created")
        return ContainerState.CREATED

    def start(self) -> ContainerState:
        """Start the container. Requires state Created or Stopped."""
        state = self.status()
        if state not in STARTABLE:
            if state is ContainerState.RUNNING:
                detail = f"container '{self.name}' is already running"
            else:
                detail = f"container '{self.name}' does not exist; create it first"
            raise InvalidState("start", detail, state)

        logger.info(f"Starting container {self.name}")
        self._call("start", self.runtime.start, self.name)
        logger.info(f"✓ Container {self.name} started")
        return ContainerState.RUNNING

    def stop(self, grace_period: Optional[int] = None) -> ContainerState:
        """Stop the container. Requires state Running.

        The runtime sends a graceful stop, waits up to the grace period and
        force-kills the process if it is still alive.
        """
        grace = self.grace_period if grace_period is None else grace_period
        state = self.status()
        if state is not ContainerState.RUNNING:
            raise InvalidState("stop", f"container '{self.name}' is not running", state)

        logger.info(f"Stopping container {self.name} (grace period {grace}s)")
        self._call("stop", self.runtime.stop, self.name, grace)
        logger.info(f"✓ Container {self.name} stopped")
        return ContainerState.STOPPED

    def destroy(self) -> ContainerState:
        """Remove the container. Requires state Created or Stopped.

        World data lives in the bind-mounted data folder and survives.
        """
        state = self.status()
        if state not in DESTROYABLE:
            if state is ContainerState.RUNNING:
                detail = f"container '{self.name}' is running; stop it first"
            else:
                detail = f"container '{self.name}' does not exist"
            raise InvalidState("destroy", detail, state)

        logger.info(f"Destroying container {self.name}")
        self._call("destroy", self.runtime.remove, self.name)
        logger.info(f"✓ Container {self.name} destroyed")
        return ContainerState.ABSENT

    # ------------------------------------------------------------------ #
    # Composites

    def up(self) -> ContainerState:
        """Drive the container to Running from whatever state it is in.

        Stops at the first failing step; partial progress (e.g. created but not
        started) is left in place for the user to retry from.
        """
        state = self.status()
        if state is ContainerState.ABSENT:
            self.create()
            self.start()
        elif state in STARTABLE:
            self.start()
        else:
            logger.info(f"Container {self.name} is already running")
        return self.status()

    def down(self, grace_period: Optional[int] = None) -> ContainerState:
        """Drive the container to Absent from whatever state it is in."""
        state = self.status()
        if state is ContainerState.RUNNING:
            self.stop(grace_period)
            self.destroy()
        elif state in DESTROYABLE:
            self.destroy()
        else:
            logger.info(f"Container {self.name} does not exist")
        return self.status()

    # ------------------------------------------------------------------ #
    # Console support

    def attach(self) -> Tuple[InputSink, OutputSource]:
        """Attach to the server process. Requires state Running.

        Raises:
            InvalidState: Before any stream is opened, if not running
        """
        state = self.status()
        if state is not ContainerState.RUNNING:
            raise InvalidState("console", f"container '{self.name}' is not running", state)

        logger.debug(f"Attaching to container {self.name}")
        return self._call("console", self.runtime.attach, self.name)

    def rcon_address(self) -> Tuple[str, int]:
        """Host and port of the server's published RCON endpoint.

        Raises:
            InvalidState: If the container is not running
            ContainerRuntimeError: If the RCON port is not published
        """
        details = self.describe()
        if not details.is_running:
            raise InvalidState("rcon", f"container '{self.name}' is not running", details.state)
        if details.rcon_address is None:
            raise ContainerRuntimeError("rcon", f"container '{self.name}' does not publish an RCON port")

        host, port = details.rcon_address
        if not host or host in WILDCARD_HOSTS:
            host = "127.0.0.1"
        return host, int(port)
