"""Models for process snapshots and monitoring state."""

from .free_memory import FreeMemoryStats
from .high_water_mark_state import HighWaterMarkState, ReportDecision
from .process_record import MemoryStats, ProcessEntry, ProcessRecord

__all__ = [
    "FreeMemoryStats",
    "HighWaterMarkState",
    "MemoryStats",
    "ProcessEntry",
    "ProcessRecord",
    "ReportDecision",
]
