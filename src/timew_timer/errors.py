"""Exception hierarchy for timew-timer.

Gateway errors describe problems talking to the tracker binary. Operation
errors describe bad caller input and are raised before any tracker command
is issued.
"""


class TimerError(Exception):
    """Base class for all timew-timer errors."""

    pass


class GatewayError(TimerError):
    """Raised when a tracker command could not be completed."""

    pass


class BinaryUnavailableError(GatewayError):
    """The tracker binary is not installed or not executable."""

    def __init__(self, binary: str = "timew") -> None:
        super().__init__(f"Tracker binary not found: {binary}")
        self.binary = binary


class CommandFailedError(GatewayError):
    """The tracker exited with a non-zero status."""

    def __init__(self, exit_code: int, stderr: str = "", command: list[str] | None = None) -> None:
        message = stderr.strip() or f"exit status {exit_code}"
        super().__init__(f"Tracker command failed: {message}")
        self.exit_code = exit_code
        self.stderr = stderr
        self.command = command or []


class TrackerTimeoutError(GatewayError):
    """The tracker did not finish within the configured timeout."""

    def __init__(self, timeout: float, command: list[str] | None = None) -> None:
        super().__init__(f"Tracker command timed out after {timeout:g}s")
        self.timeout = timeout
        self.command = command or []


class MalformedOutputError(GatewayError):
    """The tracker produced output that could not be parsed."""

    pass


class OperationError(TimerError):
    """Raised when a timer operation is rejected before reaching the tracker."""

    pass


class NoActiveTimerError(OperationError):
    def __init__(self) -> None:
        super().__init__("No timer is running")


class NoTagsError(OperationError):
    def __init__(self) -> None:
        super().__init__("At least one tag is required")


class InvalidTimerIdError(OperationError):
    def __init__(self) -> None:
        super().__init__("Active timer has no interval id")


class InvalidTagsError(OperationError):
    """The supplied tags failed validation."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("Invalid tags: " + "; ".join(errors))
        self.errors = list(errors)
