from typing import Callable, List, Optional

from memwatch.config.monitor_config import MonitorConfig, ThresholdConfig
from memwatch.models.free_memory import FreeMemoryStats
from memwatch.models.process_record import ProcessRecord

KIB = 1024
MIB = 1024 * 1024


def record(pid: int, parent_pid: Optional[int] = None, kib: int = 0, exe: str = "",
           name: str = "proc", cmdline: Optional[List[str]] = None) -> ProcessRecord:
    return ProcessRecord(
        pid=pid,
        parent_pid=parent_pid,
        rss_bytes=kib * KIB,
        exe=exe,
        name=name,
        cmdline=cmdline or [],
    )


def thresholds(absolute_kib: int = 1024, relative: float = 0.0, interval: float = 0.001,
               every_nth: Optional[int] = None) -> ThresholdConfig:
    return ThresholdConfig(
        threshold_absolute_bytes=absolute_kib * KIB,
        threshold_relative=relative,
        check_interval=interval,
        report_every_nth=every_nth,
    )


def monitor_config(out: Optional[str] = None, show_free: bool = False, show_command: bool = False,
                   **threshold_kwargs) -> MonitorConfig:
    return MonitorConfig(
        thresholds=thresholds(**threshold_kwargs),
        out=out,
        show_free=show_free,
        show_command=show_command,
    )


FREE_MEMORY = FreeMemoryStats(
    total=16000 * MIB,
    used=6000 * MIB,
    free=2000 * MIB,
    available=9000 * MIB,
    swap_total=4096 * MIB,
    swap_used=100 * MIB,
    swap_free=3996 * MIB,
)


class FakeSnapshotProvider:
    """Replays a fixed sequence of snapshots; the last one repeats forever."""

    def __init__(self, snapshots: List[List[ProcessRecord]],
                 on_snapshot: Optional[Callable[[int], None]] = None):
        self.snapshots = snapshots
        self.on_snapshot = on_snapshot
        self.calls = 0

    def snapshot(self) -> List[ProcessRecord]:
        index = min(self.calls, len(self.snapshots) - 1)
        self.calls += 1
        if self.on_snapshot is not None:
            self.on_snapshot(self.calls)
        return list(self.snapshots[index])

    def read_free_memory(self) -> FreeMemoryStats:
        return FREE_MEMORY
