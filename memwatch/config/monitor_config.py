from dataclasses import dataclass
from typing import Optional

DEFAULT_THRESHOLD_ABSOLUTE_KIB = 1024
DEFAULT_THRESHOLD_RELATIVE = 0.0
DEFAULT_CHECK_INTERVAL_MS = 250
MAX_REPORT_EVERY_NTH = 255


@dataclass(frozen=True)
class ThresholdConfig:
    threshold_absolute_bytes: int
    threshold_relative: float
    check_interval: float  # seconds
    report_every_nth: Optional[int] = None  # None disables periodic reports

    @property
    def periodic_enabled(self) -> bool:
        return self.report_every_nth is not None and self.report_every_nth > 0


@dataclass(frozen=True)
class MonitorConfig:
    thresholds: ThresholdConfig
    out: Optional[str] = None  # None or "-" means stderr
    show_free: bool = False
    show_command: bool = False

    def __str__(self):
        return (f"MonitorConfig(\n"
                f"  out={self.out or '-'},\n"
                f"  threshold_absolute={self.thresholds.threshold_absolute_bytes // 1024}KiB,\n"
                f"  threshold_relative={self.thresholds.threshold_relative},\n"
                f"  check_interval={self.thresholds.check_interval * 1000:.0f}ms,\n"
                f"  report_every_nth={self.thresholds.report_every_nth},\n"
                f"  show_free={self.show_free},\n"
                f"  show_command={self.show_command}\n"
                f")")
