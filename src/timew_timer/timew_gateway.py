"""TimeWarrior process gateway.

This is the ONLY place that starts the timew binary.
All tracker interaction goes through this class.
"""

import logging
import os
import subprocess

from .errors import BinaryUnavailableError, CommandFailedError, TrackerTimeoutError
from .gateway import TrackerGateway

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class TimewGateway(TrackerGateway):
    """Runs TimeWarrior commands as subprocesses."""

    def __init__(
        self,
        binary: str = "timew",
        timeout: float | None = None,
        database: str | None = None,
        capture_commands: list | None = None,
    ) -> None:
        """Initialize the TimeWarrior gateway.

        Args:
            binary: Name or path of the timew executable
            timeout: Seconds before a command is abandoned (defaults to
                TIMEW_TIMER_TIMEOUT env var or 10)
            database: Optional TimeWarrior database directory (TIMEWARRIORDB)
            capture_commands: Optional list to capture commands for testing
        """
        super().__init__()
        if timeout is None:
            timeout = float(os.environ.get("TIMEW_TIMER_TIMEOUT", DEFAULT_TIMEOUT))
        self.binary = binary
        self.timeout = timeout
        self.database = database
        self.capture_commands = capture_commands

    def _environment(self) -> dict[str, str] | None:
        if not self.database:
            return None
        env = dict(os.environ)
        env["TIMEWARRIORDB"] = os.path.expanduser(self.database)
        return env

    def _execute(self, args: list[str]) -> str:
        """Execute a timew command.

        Args:
            args: Command arguments (e.g., ['start', 'tag1', 'tag2'])

        Returns:
            The command's stdout
        """
        cmd = [self.binary] + args

        # Capture for testing
        if self.capture_commands is not None:
            self.capture_commands.append(cmd)

        logger.debug(f"Running: {' '.join(cmd)}", extra={"command": cmd})

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                errors="replace",
                check=False,
                stdin=subprocess.DEVNULL,
                timeout=self.timeout,
                env=self._environment(),
            )
        except FileNotFoundError as e:
            raise BinaryUnavailableError(self.binary) from e
        except PermissionError as e:
            raise BinaryUnavailableError(self.binary) from e
        except OSError as e:
            logger.warning(f"Cannot run {self.binary}: {e}", extra={"command": cmd})
            raise BinaryUnavailableError(self.binary) from e
        except subprocess.TimeoutExpired as e:
            logger.error(f"Timed out: {' '.join(cmd)}", extra={"command": cmd})
            raise TrackerTimeoutError(self.timeout, cmd) from e

        if result.returncode != 0:
            logger.info(
                f"Command failed: {' '.join(cmd)}: {result.stderr.strip()}",
                extra={"command": cmd, "exit_code": result.returncode},
            )
            raise CommandFailedError(result.returncode, result.stderr, cmd)

        return result.stdout
