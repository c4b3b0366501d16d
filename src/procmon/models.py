"""Data models for procmon."""

import time
from dataclasses import dataclass, field

# Counters after the "cpu" label of /proc/stat; index 3 is idle.
CpuCounterVector = tuple[int, ...]


@dataclass(slots=True, frozen=True)
class ProcessInfo:
    """Immutable row of the process table."""

    pid: str
    name: str
    cpu_usage: str
    memory_usage: str


@dataclass(slots=True, frozen=True)
class SystemStats:
    """Aggregate resource usage for one poll cycle."""

    total_cpu_usage: float  # 0.0 - 100.0
    total_memory_usage: float  # 0.0 - 100.0
    cache_memory_usage: float  # MB

    @classmethod
    def empty(cls) -> "SystemStats":
        """Return the all-zero stats reported when every read fails."""
        return cls(0.0, 0.0, 0.0)


@dataclass(slots=True, frozen=True)
class MonitorSnapshot:
    """Everything published by one poll cycle."""

    stats: SystemStats
    processes: tuple[ProcessInfo, ...]
    timestamp: float = field(default_factory=time.time)
