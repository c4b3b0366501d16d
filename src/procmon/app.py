"""procmon - Main Textual application."""

import logging
from queue import Empty, Queue

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal
from textual.logging import TextualHandler
from textual.widgets import DataTable, Footer, Input, Static

from procmon.collector import SystemCollector
from procmon.config import get_settings
from procmon.models import MonitorSnapshot, ProcessInfo, SystemStats
from procmon.monitor import SystemMonitor
from procmon.parsers import filter_processes

_logger = logging.getLogger(__name__)

EMPTY_LIST_MESSAGE = "No processes found or root access denied."


class HeaderStats(Static):
    """Header widget showing CPU, memory and cache usage."""

    DEFAULT_CSS = """
    HeaderStats {
        height: auto;
        padding: 1;
        background: $surface;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize HeaderStats."""
        super().__init__(*args, **kwargs)
        self._stats: SystemStats | None = None

    def compose(self) -> ComposeResult:
        """Compose the header stats layout."""
        yield Horizontal(
            Static(self._get_cpu_info(), id="cpu-info"),
            Static(self._get_mem_info(), id="mem-info"),
            Static(self._get_cache_info(), id="cache-info"),
        )

    def update_stats(self, stats: SystemStats) -> None:
        """Update the statistics display."""
        self._stats = stats
        try:
            self.query_one("#cpu-info", Static).update(self._get_cpu_info())
            self.query_one("#mem-info", Static).update(self._get_mem_info())
            self.query_one("#cache-info", Static).update(self._get_cache_info())
        except Exception:
            pass  # Widget not mounted yet

    def _get_cpu_info(self) -> str:
        if self._stats is None:
            return "CPU Usage\nLoading..."
        return f"CPU Usage\n[b]{self._stats.total_cpu_usage:.1f}%[/b]"

    def _get_mem_info(self) -> str:
        if self._stats is None:
            return "Memory Usage\nLoading..."
        return f"Memory Usage\n[b]{self._stats.total_memory_usage:.1f}%[/b]"

    def _get_cache_info(self) -> str:
        if self._stats is None:
            return "Cache Usage\nLoading..."
        return f"Cache Usage\n[b]{self._stats.cache_memory_usage:.1f}MB[/b]"


class ProcessTable(Container):
    """Container for the filtered process list."""

    DEFAULT_CSS = """
    ProcessTable {
        height: 1fr;
        border: solid $primary;
    }

    #empty-message {
        color: $error;
        padding: 1;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize ProcessTable."""
        super().__init__(*args, **kwargs)
        self._processes: list[ProcessInfo] = []
        self._query: str = ""

    @property
    def processes(self) -> list[ProcessInfo]:
        """All processes from the latest snapshot, before filtering."""
        return list(self._processes)

    @property
    def visible(self) -> list[ProcessInfo]:
        """Processes matching the current search query."""
        return filter_processes(self._processes, self._query)

    def compose(self) -> ComposeResult:
        """Compose the process table."""
        yield Static(EMPTY_LIST_MESSAGE, id="empty-message")
        yield DataTable(id="process-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        table = self.query_one("#process-table", DataTable)
        table.cursor_type = "row"
        table.add_column("PID", key="pid", width=8)
        table.add_column("Name", key="name")
        table.add_column("CPU", key="cpu", width=8)
        table.add_column("Memory", key="mem", width=10)
        self._render_rows()

    def update_processes(self, processes: list[ProcessInfo]) -> None:
        """Replace the process list with a new snapshot."""
        self._processes = list(processes)
        self._render_rows()

    def set_query(self, query: str) -> None:
        """Filter the displayed rows by name."""
        self._query = query
        self._render_rows()

    def remove_process(self, pid: str) -> None:
        """Drop a process ahead of the next snapshot."""
        self._processes = [proc for proc in self._processes if proc.pid != pid]
        self._render_rows()

    def selected_pid(self) -> str | None:
        """PID of the highlighted row, if any."""
        table = self.query_one("#process-table", DataTable)
        if table.row_count == 0:
            return None
        try:
            row_key = table.coordinate_to_cell_key(table.cursor_coordinate).row_key
        except Exception:
            return None
        return row_key.value

    def _render_rows(self) -> None:
        """Rebuild the table from the filtered process list."""
        try:
            table = self.query_one("#process-table", DataTable)
            message = self.query_one("#empty-message", Static)
        except Exception:
            return  # Not mounted yet

        visible = self.visible
        message.display = not visible

        table.clear()
        seen: set[str] = set()
        for proc in visible:
            if proc.pid in seen:
                continue  # Row keys must be unique
            seen.add(proc.pid)
            table.add_row(proc.pid, proc.name, proc.cpu_usage, proc.memory_usage, key=proc.pid)


class ProcmonApp(App):
    """Main procmon application."""

    TITLE = "procmon"
    SUB_TITLE = "Process Monitor"
    AUTO_FOCUS = "#process-table"

    CSS = """
    Screen {
        layout: vertical;
    }

    #header-stats {
        dock: top;
    }

    Horizontal {
        height: auto;
    }

    #cpu-info, #mem-info, #cache-info {
        width: 1fr;
        content-align: center middle;
        text-align: center;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("k", "kill", "Kill"),
        ("slash", "search", "Search"),
        ("escape", "focus_list", "List"),
    ]

    def __init__(
        self,
        collector: SystemCollector | None = None,
        poll_interval: float | None = None,
    ) -> None:
        """Initialize the ProcmonApp."""
        super().__init__()
        self._update_queue: Queue[MonitorSnapshot] = Queue()
        self._monitor = SystemMonitor(self._update_queue, collector, poll_interval)

    @property
    def update_queue(self) -> Queue[MonitorSnapshot]:
        """Queue the monitor publishes snapshots to."""
        return self._update_queue

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield HeaderStats(id="header-stats")
        yield Input(placeholder="Search Processes", id="search")
        yield ProcessTable()
        yield Footer()

    def on_mount(self) -> None:
        """Start the system monitor when the app is mounted."""
        self._monitor.start()
        self.set_interval(0.5, self._check_for_updates)

    def on_unmount(self) -> None:
        """Stop polling when the app shuts down."""
        self._monitor.stop()

    def _check_for_updates(self) -> None:
        """Check the queue for snapshots and show the most recent one."""
        snapshot = None
        while True:
            try:
                snapshot = self._update_queue.get_nowait()
            except Empty:
                break

        if snapshot is not None:
            self._update_ui(snapshot)

    def _update_ui(self, snapshot: MonitorSnapshot) -> None:
        """Update the UI with a new snapshot."""
        try:
            self.query_one("#header-stats", HeaderStats).update_stats(snapshot.stats)
            self.query_one(ProcessTable).update_processes(list(snapshot.processes))
        except Exception:
            _logger.exception("Failed to render snapshot")

    def on_input_changed(self, event: Input.Changed) -> None:
        """Filter the process list as the search text changes."""
        self.query_one(ProcessTable).set_query(event.value)

    def action_search(self) -> None:
        """Focus the search box."""
        self.query_one("#search", Input).focus()

    def action_focus_list(self) -> None:
        """Return focus from the search box to the process list."""
        self.query_one("#process-table", DataTable).focus()

    def action_kill(self) -> None:
        """Kill the highlighted process and drop it from the list."""
        process_table = self.query_one(ProcessTable)
        pid = process_table.selected_pid()
        if pid is None:
            return
        self._monitor.kill_process(pid)
        process_table.remove_process(pid)
        self.notify(f"Kill sent to {pid}")

    def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        self._monitor.stop()
        self.exit()


def configure_logging() -> None:
    """Route log records to the Textual devtools console."""
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        handlers=[TextualHandler()],
        format="%(name)s: %(message)s",
    )


def main() -> None:
    """Entry point for procmon application."""
    configure_logging()
    app = ProcmonApp()
    app.run()


if __name__ == "__main__":
    main()
