from typing import Optional

from memwatch.config.monitor_config import ThresholdConfig
from memwatch.models.high_water_mark_state import HighWaterMarkState, ReportDecision


class HighWaterMarkDetector:
    """
    Decide, tick by tick, whether the aggregate memory of the watched tree
    deserves a report.

    A new high water mark needs both the absolute and the relative increase
    over the current mark. The mark only moves when that happens, so it never
    decreases. With a periodic cadence, every Nth tick is reported as well.
    """

    def __init__(self, thresholds: ThresholdConfig, state: Optional[HighWaterMarkState] = None):
        self.thresholds = thresholds
        self.state = state if state is not None else HighWaterMarkState()

    @property
    def high_water_mark(self) -> int:
        return self.state.high_water_mark_bytes

    def evaluate(self, aggregate_bytes: int) -> ReportDecision:
        hwm = self.state.high_water_mark_bytes
        exceeds_absolute = aggregate_bytes > hwm + self.thresholds.threshold_absolute_bytes
        exceeds_relative = aggregate_bytes > hwm * (1.0 + self.thresholds.threshold_relative)
        triggered = exceeds_absolute and exceeds_relative

        decision = ReportDecision(
            aggregate_bytes=aggregate_bytes,
            previous_high_water_mark=hwm,
            triggered=triggered,
            periodic_due=self._periodic_due(),
        )

        if triggered:
            self.state.high_water_mark_bytes = aggregate_bytes
        self.state.tick_index += 1
        return decision

    def skip_tick(self) -> None:
        """Advance the tick counter for a tick with nothing to evaluate."""
        self.state.tick_index += 1

    def _periodic_due(self) -> bool:
        if not self.thresholds.periodic_enabled:
            return False
        return self.state.tick_index % self.thresholds.report_every_nth == 0
