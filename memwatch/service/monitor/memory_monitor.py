"""
Memory Monitor Module

Samples the memory of a whole process tree on a background thread until the
supervisor signals that the watched command has exited.
"""
import threading
import time
from typing import Optional

from memwatch.config.monitor_config import MonitorConfig
from memwatch.consts.SamplerState import SamplerState
from memwatch.errors import MemwatchError
from memwatch.models.high_water_mark_state import ReportDecision
from memwatch.service.monitor.high_water_mark import HighWaterMarkDetector
from memwatch.service.output.output_sink import OutputSink
from memwatch.service.report.reporter import ReportRenderer
from memwatch.service.snapshot.snapshot_provider import ProcessSnapshotProvider
from memwatch.service.tree.aggregate_calculator import compute_memory_stats
from memwatch.service.tree.tree_builder import build_process_tree
from memwatch.util.log_config import setup_logger
from memwatch.util.units import bytes_to_mib

logger = setup_logger(__name__)


class MemoryMonitor:
    """Monitor the aggregate memory of a process and its descendants"""

    def __init__(
        self,
        pid: int,
        config: MonitorConfig,
        cancel_event: threading.Event,
        provider: Optional[ProcessSnapshotProvider] = None,
        sink: Optional[OutputSink] = None,
    ):
        """
        Initialize memory monitor.

        Args:
            pid: Root of the process tree to watch
            config: Thresholds, interval and rendering options
            cancel_event: Set once by the supervisor when the command exits
            provider: Process table source (default: psutil based)
            sink: Report destination (default: built from config.out)
        """
        self.pid = pid
        self.config = config
        self.cancel_event = cancel_event
        self.provider = provider or ProcessSnapshotProvider()
        self.sink = sink or OutputSink(config.out)
        self.detector = HighWaterMarkDetector(config.thresholds)
        self.renderer = ReportRenderer(show_command=config.show_command, show_free=config.show_free)
        self.state = SamplerState.RUNNING
        self.pending = ""
        self.reports_written = 0
        self.error: Optional[BaseException] = None
        self.thread: Optional[threading.Thread] = None

    @property
    def high_water_mark(self) -> int:
        return self.detector.high_water_mark

    def start(self):
        """Start monitoring in a background thread"""
        if self.thread is not None:
            return

        self.thread = threading.Thread(target=self._monitor_thread, name="memwatch-sampler", daemon=True)
        self.thread.start()

    def join(self, timeout: Optional[float] = None) -> Optional[BaseException]:
        """
        Wait for the sampling thread to drain and stop.

        Returns:
            The error that ended sampling early, or None
        """
        if self.thread:
            self.thread.join(timeout=timeout)
        return self.error

    def _monitor_thread(self):
        try:
            self.run()
        except MemwatchError as e:
            logger.error(f"Monitor error: {e}")
            self.error = e
        except Exception as e:
            logger.exception(f"Unexpected monitor error: {e}")
            self.error = e
        finally:
            self.state = SamplerState.STOPPED

    def run(self):
        """
        Main sampling loop. Runs on the calling thread.

        Each tick runs to completion; only then does the loop wait for the
        earlier of the next deadline and the cancel event.
        """
        interval = self.config.thresholds.check_interval
        with self.sink:
            self.state = SamplerState.RUNNING
            next_deadline = time.monotonic()

            while True:
                self.tick()

                now = time.monotonic()
                next_deadline += interval
                if next_deadline <= now:
                    # Tick overran the period; restart the schedule from now
                    next_deadline = now + interval

                if self.cancel_event.wait(timeout=next_deadline - now):
                    break

            self.state = SamplerState.DRAINING
            self._flush()
            self.state = SamplerState.STOPPED

    def tick(self) -> Optional[ReportDecision]:
        """
        Take one sample: snapshot, aggregate, evaluate and maybe report.

        Returns:
            The detector decision, or None if the watched pid is not in the table
        """
        entries = build_process_tree(self.provider.snapshot())
        stats = compute_memory_stats(self.pid, entries)

        root_stats = stats.get(self.pid)
        if root_stats is None:
            logger.debug(f"Process {self.pid} not found in snapshot")
            self.detector.skip_tick()
            return None

        decision = self.detector.evaluate(root_stats.aggregate_bytes)
        if decision.triggered:
            logger.debug(f"Reached a new high water mark of {bytes_to_mib(decision.aggregate_bytes)} MiB, "
                         f"{bytes_to_mib(decision.increase_bytes)} MiB greater than before")

        free_memory = self.provider.read_free_memory() if self.config.show_free else None
        self.pending = self.renderer.render(self.pid, entries, stats, decision, free_memory)

        if decision.should_report:
            self._flush()

        return decision

    def _flush(self):
        if not self.pending:
            return
        buffer, self.pending = self.pending, ""
        self.sink.write(buffer)
        self.reports_written += 1
