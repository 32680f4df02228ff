from dataclasses import dataclass


@dataclass(frozen=True)
class FreeMemoryStats:
    """System-wide memory usage, all values in bytes"""
    total: int
    used: int
    free: int
    available: int
    swap_total: int
    swap_used: int
    swap_free: int
