"""Exceptions raised by the procmon reader and parsers."""


class ProcmonError(Exception):
    """Base class for procmon errors."""


class CommandExecutionError(ProcmonError):
    """A privileged command failed to launch, timed out or exited non-zero."""

    def __init__(self, command: str, returncode: int | None = None, stderr: str = "") -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        detail = f"exit status {returncode}" if returncode is not None else "did not run"
        message = f"{command!r} {detail}"
        if stderr:
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)


class ParseError(ProcmonError):
    """Command output did not match the expected column or field layout."""
