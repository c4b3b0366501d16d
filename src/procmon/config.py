"""Runtime configuration, loaded from PROCMON_* environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class ProcmonSettings(BaseSettings):
    # Elevation prefix; the command string is passed to it as one argument.
    # Empty runs commands as the current user.
    su_command: str = "su -c"
    command_timeout: float = 10.0

    poll_interval: float = 5.0
    cpu_sample_interval: float = 1.0

    stat_command: str = "cat /proc/stat"
    memory_command: str = "free"
    meminfo_command: str = "cat /proc/meminfo"
    # Nine columns: PID, %CPU and %MEM at indices 1-3, command name last
    process_command: str = "ps -A -o user,pid,%cpu,%mem,vsz,rss,tty,stat,comm"
    kill_command: str = "kill {pid}"

    log_level: str = "WARNING"

    model_config = {"env_prefix": "PROCMON_"}


@lru_cache(maxsize=1)
def get_settings() -> ProcmonSettings:
    """Return the process-wide settings instance."""
    return ProcmonSettings()
