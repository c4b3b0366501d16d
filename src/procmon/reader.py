"""Privileged command execution for procmon.

Every poll tick spawns several short-lived commands, so each call must leave
no open pipe or unreaped child behind, whatever the outcome.
"""

import logging
import shlex
import subprocess

from procmon.config import ProcmonSettings, get_settings
from procmon.errors import CommandExecutionError

_logger = logging.getLogger(__name__)


class CommandRunner:
    """Runs shell commands through the configured elevation prefix."""

    def __init__(self, settings: ProcmonSettings | None = None) -> None:
        settings = settings or get_settings()
        self._prefix = shlex.split(settings.su_command)
        self._timeout = settings.command_timeout

    def build_args(self, command: str) -> list[str]:
        """Build the argv for a command, wrapping it in the elevation prefix."""
        if self._prefix:
            return [*self._prefix, command]
        return shlex.split(command)

    def read_text(self, command: str) -> list[str]:
        """
        Run a command and return its standard output as lines.

        Raises:
            CommandExecutionError: If the command cannot be launched, times out
                or exits with a non-zero status.
        """
        return self._execute(command).stdout.splitlines()

    def run(self, command: str) -> None:
        """Run a command for its side effect, discarding its output."""
        self._execute(command)

    def _execute(self, command: str) -> subprocess.CompletedProcess[str]:
        try:
            args = self.build_args(command)
            _logger.debug("Running %s", args)
            # run() drains and closes both pipes and waits for the child,
            # killing it first on timeout.
            result = subprocess.run(
                args,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self._timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise CommandExecutionError(command, stderr=f"timed out after {exc.timeout}s") from exc
        except (OSError, ValueError) as exc:
            raise CommandExecutionError(command, stderr=str(exc)) from exc

        if result.returncode != 0:
            raise CommandExecutionError(command, result.returncode, result.stderr)
        return result
