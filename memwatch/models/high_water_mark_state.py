from dataclasses import dataclass


@dataclass
class HighWaterMarkState:
    """Detector state, owned by the sampling thread for its whole lifetime"""
    high_water_mark_bytes: int = 0
    tick_index: int = 0


@dataclass(frozen=True)
class ReportDecision:
    """Outcome of evaluating one tick against the high water mark"""
    aggregate_bytes: int
    previous_high_water_mark: int
    triggered: bool
    periodic_due: bool

    @property
    def should_report(self) -> bool:
        return self.triggered or self.periodic_due

    @property
    def increase_bytes(self) -> int:
        return self.aggregate_bytes - self.previous_high_water_mark
