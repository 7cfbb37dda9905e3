"""Error taxonomy for lifecycle and console operations.

Every error carries the operation that failed, the container state observed
when it failed (if one was read) and the underlying detail, plus the exit code
the CLI maps it to.
"""
from typing import Optional

from mcc.models.state import ContainerState


class MccError(Exception):
    """Base class for failures surfaced to the CLI."""

    exit_code = 1

    def __init__(
        self,
        operation: str,
        detail: str,
        state: Optional[ContainerState] = None,
    ):
        self.operation = operation
        self.detail = detail
        self.state = state
        super().__init__(self._format())

    def _format(self) -> str:
        message = f"{self.operation}: {self.detail}"
        if self.state is not None:
            message += f" (container state: {self.state.label})"
        return message


class InvalidState(MccError):
    """An operation's precondition on the current container state is violated."""

    exit_code = 3


class AlreadyExists(InvalidState):
    """Create attempted while a container for the server already exists."""

    exit_code = 4


class RuntimeUnavailable(MccError):
    """The container runtime could not be reached at all."""

    exit_code = 5


class ContainerRuntimeError(MccError):
    """The runtime was reached but reported a failure."""

    exit_code = 6


class ConsoleStreamError(ContainerRuntimeError):
    """One direction of an attached console stream failed."""


class Interrupted(MccError):
    """Operation cancelled by a user signal mid-flight."""

    exit_code = 130

    def __init__(self, operation: str, state: Optional[ContainerState] = None):
        super().__init__(operation, "interrupted by user", state)
