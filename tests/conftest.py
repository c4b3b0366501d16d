"""Shared fixtures for procmon tests."""

import pytest

from procmon.collector import SystemCollector
from procmon.config import ProcmonSettings
from procmon.errors import CommandExecutionError

STAT_BEFORE = ["cpu  0 0 0 100", "cpu0 0 0 0 100"]
STAT_AFTER = ["cpu  50 0 0 150", "cpu0 50 0 0 150"]

FREE_OUTPUT = [
    "              total        used        free      shared  buff/cache   available",
    "Mem:        2000        1000         500           0         500         900",
    "Swap:          0           0           0",
]

MEMINFO_OUTPUT = [
    "MemTotal:        1000 kB",
    "SwapCached:      4096 kB",
    "Cached:          2048 kB",
]

PS_OUTPUT = [
    "USER       PID %CPU %MEM    VSZ   RSS TT       STAT COMMAND",
    "root         1  0.0  0.1 168000 11000 ?       Ss   systemd",
    "user      4242 12.5  3.2 900000 52000 ?       Sl   chrome",
    "short row",
    "user      5151  0.3  1.0 400000 21000 ?       S    Finder",
]


def make_settings(**overrides) -> ProcmonSettings:
    """Settings for tests: unprivileged, no CPU sampling pause."""
    values = {"su_command": "", "cpu_sample_interval": 0.0, "command_timeout": 5.0}
    values.update(overrides)
    return ProcmonSettings(**values)


class FakeRunner:
    """Command runner returning canned output, recording every command."""

    def __init__(self, outputs: dict[str, list] | None = None, fail_kill: bool = False) -> None:
        self.outputs = outputs or {}
        self.fail_kill = fail_kill
        self.calls: list[str] = []

    def _next(self, command: str) -> list[str]:
        self.calls.append(command)
        if command not in self.outputs:
            raise CommandExecutionError(command, 1, "not found")
        output = self.outputs[command]
        # A list of lists is consumed one entry per call
        if output and isinstance(output[0], list):
            return output.pop(0) if len(output) > 1 else output[0]
        return output

    def read_text(self, command: str) -> list[str]:
        return self._next(command)

    def run(self, command: str) -> None:
        self.calls.append(command)
        if self.fail_kill:
            raise CommandExecutionError(command, 1, "No such process")


class FailingRunner:
    """Command runner on which every command fails."""

    def read_text(self, command: str) -> list[str]:
        raise CommandExecutionError(command, 255, "permission denied")

    def run(self, command: str) -> None:
        raise CommandExecutionError(command, 255, "permission denied")


@pytest.fixture
def settings() -> ProcmonSettings:
    return make_settings()


@pytest.fixture
def fake_runner(settings) -> FakeRunner:
    return FakeRunner(
        {
            settings.stat_command: [list(STAT_BEFORE), list(STAT_AFTER)],
            settings.memory_command: list(FREE_OUTPUT),
            settings.meminfo_command: list(MEMINFO_OUTPUT),
            settings.process_command: list(PS_OUTPUT),
        }
    )


@pytest.fixture
def collector(fake_runner, settings) -> SystemCollector:
    return SystemCollector(runner=fake_runner, settings=settings)
