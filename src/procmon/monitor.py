"""Polling engine for procmon."""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from queue import Queue

from procmon.collector import SystemCollector
from procmon.config import get_settings
from procmon.models import MonitorSnapshot

_logger = logging.getLogger(__name__)


class SystemMonitor:
    """
    System monitor that polls a SystemCollector on a fixed interval.

    Runs in a separate daemon thread and pushes one MonitorSnapshot per tick to
    a thread-safe Queue. Stats and the process list are collected concurrently
    on a two-worker pool; the next tick starts only after both finish.
    """

    def __init__(
        self,
        update_queue: Queue[MonitorSnapshot],
        collector: SystemCollector | None = None,
        poll_interval: float | None = None,
    ) -> None:
        """
        Initialize the SystemMonitor.

        Args:
            update_queue: Thread-safe queue to push updates to.
            collector: Source of stats and processes. Defaults to a collector
                whose CPU sampling pause ends early when the monitor stops.
            poll_interval: Seconds between ticks. Defaults to the configured 5.0s.
        """
        self._queue = update_queue
        self._stop_event = threading.Event()
        self._collector = collector or SystemCollector(sleep=self._stop_event.wait)
        self.poll_interval = get_settings().poll_interval if poll_interval is None else poll_interval
        self._thread: threading.Thread | None = None
        self._pool: ThreadPoolExecutor | None = None
        self._kill_pool: ThreadPoolExecutor | None = None
        self._latest: MonitorSnapshot | None = None

    @property
    def poll_interval(self) -> float:
        """Get the current poll interval."""
        return self._poll_interval

    @poll_interval.setter
    def poll_interval(self, value: float) -> None:
        """Set the poll interval."""
        self._poll_interval = max(0.1, value)  # Minimum 0.1 seconds

    @property
    def is_running(self) -> bool:
        """Check if the monitor thread is running."""
        return self._thread is not None and self._thread.is_alive()

    @property
    def latest(self) -> MonitorSnapshot | None:
        """The most recently published snapshot, if any."""
        return self._latest

    def start(self) -> None:
        """Start the monitoring thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._pool = ThreadPoolExecutor(max_workers=2, thread_name_prefix="SystemMonitorWorker")
        self._kill_pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="ProcessTerminator")
        self._thread = threading.Thread(
            target=self._poll_loop,
            daemon=True,
            name="SystemMonitor",
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the monitoring thread and wait for in-flight commands.

        Args:
            timeout: How long to wait for the poll thread to stop (seconds).
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
        # Commands are bounded by the runner timeout, so these waits end.
        for pool in (self._pool, self._kill_pool):
            if pool is not None:
                pool.shutdown(wait=True, cancel_futures=True)
        self._pool = None
        self._kill_pool = None

    def kill_process(self, pid: str) -> Future[None]:
        """
        Terminate a process in the background, independent of the poll cycle.

        The returned future completes once the kill command has been issued.
        """
        if self._kill_pool is None:
            future: Future[None] = Future()
            future.set_result(self._collector.kill_process(pid))
            return future
        return self._kill_pool.submit(self._collector.kill_process, pid)

    def _poll_loop(self) -> None:
        """Main polling loop running in the background thread."""
        while not self._stop_event.is_set():
            try:
                snapshot = self._collect_snapshot()
                if not self._stop_event.is_set():
                    self._publish(snapshot)
            except Exception:
                # Keep the loop running whatever a single tick does
                _logger.exception("Poll tick failed")

            # Wait for poll_interval seconds or until stop is requested
            self._stop_event.wait(timeout=self._poll_interval)

    def _collect_snapshot(self) -> MonitorSnapshot:
        """Collect stats and processes concurrently and wait for both."""
        assert self._pool is not None
        stats_future = self._pool.submit(self._collector.get_system_stats)
        processes_future = self._pool.submit(self._collector.get_process_list)
        return MonitorSnapshot(
            stats=stats_future.result(),
            processes=tuple(processes_future.result()),
        )

    def _publish(self, snapshot: MonitorSnapshot) -> None:
        self._latest = snapshot
        self._queue.put(snapshot)
