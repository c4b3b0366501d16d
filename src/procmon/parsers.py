"""Pure parsers turning command output into procmon models."""

from collections.abc import Iterable, Sequence

from procmon.errors import ParseError
from procmon.models import CpuCounterVector, ProcessInfo

CACHED_FIELD = "Cached:"
MIN_PROCESS_COLUMNS = 9

# Column positions in a process table row; the name is always the last column.
PID_COLUMN = 1
CPU_COLUMN = 2
MEMORY_COLUMN = 3


def parse_cpu_counters(lines: Sequence[str]) -> CpuCounterVector:
    """
    Parse the aggregate CPU line of /proc/stat.

    The leading "cpu" label is discarded. Tokens that are not integers are
    dropped rather than zero-filled, so the result may be shorter than the line.
    """
    if not lines:
        return ()
    counters = []
    for token in lines[0].split()[1:]:
        try:
            counters.append(int(token))
        except ValueError:
            continue
    return tuple(counters)


def parse_memory_usage(lines: Sequence[str]) -> float:
    """
    Parse the output of free into a used-memory percentage.

    Raises:
        ParseError: If the second line is missing or lacks numeric total/used columns.
    """
    if len(lines) < 2:
        raise ParseError("memory summary has no data line")
    columns = lines[1].split()
    if len(columns) < 3:
        raise ParseError(f"memory summary line has {len(columns)} columns: {lines[1]!r}")
    try:
        total = float(columns[1])
        used = float(columns[2])
    except ValueError as exc:
        raise ParseError(f"non-numeric memory summary: {lines[1]!r}") from exc

    if total <= 0:
        return 0.0
    return min(max(used / total * 100, 0.0), 100.0)


def parse_cache_mb(lines: Iterable[str]) -> float:
    """Return the Cached field of /proc/meminfo in MB, or 0.0 if absent."""
    for line in lines:
        if not line.startswith(CACHED_FIELD):
            continue
        columns = line.split()
        try:
            return int(columns[1]) / 1024
        except (IndexError, ValueError):
            return 0.0
    return 0.0


def parse_process_table(lines: Sequence[str]) -> list[ProcessInfo]:
    """
    Parse ps output into ProcessInfo rows, in input order.

    The header line is skipped and rows with fewer than nine columns are
    dropped. The name is the last whitespace-separated token, so command
    names containing spaces are truncated to their final word.
    """
    processes: list[ProcessInfo] = []
    for line in lines[1:]:
        columns = line.split()
        if len(columns) < MIN_PROCESS_COLUMNS:
            continue
        processes.append(
            ProcessInfo(
                pid=columns[PID_COLUMN],
                name=columns[-1],
                cpu_usage=columns[CPU_COLUMN],
                memory_usage=columns[MEMORY_COLUMN],
            )
        )
    return processes


def filter_processes(processes: Iterable[ProcessInfo], query: str) -> list[ProcessInfo]:
    """Keep processes whose name contains query, ignoring case."""
    needle = query.casefold()
    return [proc for proc in processes if needle in proc.name.casefold()]
