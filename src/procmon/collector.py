"""Stats aggregation, process listing and termination for procmon."""

import logging
import time
from collections.abc import Callable

from procmon.config import ProcmonSettings, get_settings
from procmon.errors import CommandExecutionError, ParseError
from procmon.models import CpuCounterVector, ProcessInfo, SystemStats
from procmon.parsers import (
    parse_cache_mb,
    parse_cpu_counters,
    parse_memory_usage,
    parse_process_table,
)
from procmon.reader import CommandRunner

_logger = logging.getLogger(__name__)


def calculate_cpu_usage(first: CpuCounterVector, second: CpuCounterVector) -> float:
    """
    Compute CPU utilization between two /proc/stat counter snapshots.

    Returns 0.0 when either snapshot has fewer than four counters or nothing
    changed between them. The result is clamped to [0, 100].
    """
    if len(first) < 4 or len(second) < 4:
        return 0.0

    idle = second[3] - first[3]
    total = sum(second) - sum(first)
    if total == 0:
        return 0.0

    usage = (total - idle) / total * 100
    return min(max(usage, 0.0), 100.0)


class SystemCollector:
    """
    Reads system stats and the process table through privileged commands.

    Every public method degrades to a safe default (zero, empty list, no-op)
    instead of raising, so a failed read never aborts a poll cycle.
    """

    def __init__(
        self,
        runner: CommandRunner | None = None,
        settings: ProcmonSettings | None = None,
        sleep: Callable[[float], object] = time.sleep,
    ) -> None:
        """
        Initialize the SystemCollector.

        Args:
            runner: Command runner used for every read. Built from settings if omitted.
            settings: Commands and intervals. Defaults to the environment settings.
            sleep: Called with the pause between the two CPU samples.
        """
        self._settings = settings or get_settings()
        self._runner = runner or CommandRunner(self._settings)
        self._sleep = sleep

    def read_cpu_counters(self) -> CpuCounterVector:
        """Read the aggregate CPU counters, or an empty vector on failure."""
        try:
            return parse_cpu_counters(self._runner.read_text(self._settings.stat_command))
        except (CommandExecutionError, ParseError) as exc:
            _logger.warning("CPU counters unavailable: %s", exc)
            return ()

    def get_cpu_usage(self) -> float:
        """Sample the CPU counters twice, one sample interval apart."""
        first = self.read_cpu_counters()
        self._sleep(self._settings.cpu_sample_interval)
        second = self.read_cpu_counters()
        return calculate_cpu_usage(first, second)

    def get_memory_usage(self) -> float:
        try:
            return parse_memory_usage(self._runner.read_text(self._settings.memory_command))
        except (CommandExecutionError, ParseError) as exc:
            _logger.warning("Memory usage unavailable: %s", exc)
            return 0.0

    def get_cache_stats(self) -> float:
        """Return cached memory in MB, or 0.0 on failure."""
        try:
            return parse_cache_mb(self._runner.read_text(self._settings.meminfo_command))
        except (CommandExecutionError, ParseError) as exc:
            _logger.warning("Cache size unavailable: %s", exc)
            return 0.0

    def get_system_stats(self) -> SystemStats:
        """
        Collect CPU, memory and cache usage.

        Blocks for the CPU sample interval; run it off the UI thread.
        """
        return SystemStats(
            total_cpu_usage=self.get_cpu_usage(),
            total_memory_usage=self.get_memory_usage(),
            cache_memory_usage=self.get_cache_stats(),
        )

    def get_process_list(self) -> list[ProcessInfo]:
        """Return the current process table, or an empty list on failure."""
        try:
            return parse_process_table(self._runner.read_text(self._settings.process_command))
        except (CommandExecutionError, ParseError) as exc:
            _logger.warning("Process list unavailable: %s", exc)
            return []

    def kill_process(self, pid: str) -> None:
        """
        Send a kill for pid without waiting to see whether it took effect.

        Failures are logged and ignored.
        """
        # kill 0 would signal our own process group
        if not (pid.isascii() and pid.isdigit()) or int(pid) == 0:
            _logger.warning("Refusing to kill invalid pid %r", pid)
            return
        try:
            self._runner.run(self._settings.kill_command.format(pid=pid))
        except CommandExecutionError as exc:
            _logger.warning("Kill of pid %s failed: %s", pid, exc)
