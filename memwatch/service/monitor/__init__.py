from .high_water_mark import HighWaterMarkDetector
from .memory_monitor import MemoryMonitor

__all__ = ["HighWaterMarkDetector", "MemoryMonitor"]
