"""
Process table data models.

ProcessRecord is one row of a snapshot. ProcessEntry and MemoryStats are
derived from a snapshot and only live for the tick that built them.
"""
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class ProcessRecord:
    """A single process as seen in one snapshot"""
    pid: int
    parent_pid: Optional[int]
    rss_bytes: int  # Resident Set Size (physical memory)
    exe: str
    name: str
    cmdline: List[str] = field(default_factory=list)


@dataclass
class ProcessEntry:
    """
    A node of the process tree.

    `record` is None when the pid was only seen as somebody's parent, i.e. the
    process left the table before (or while) the snapshot was taken. Use
    `resolved` rather than testing `record` directly.
    """
    record: Optional[ProcessRecord] = None
    children: List[int] = field(default_factory=list)

    @property
    def resolved(self) -> bool:
        return self.record is not None

    @property
    def private_bytes(self) -> int:
        if self.record is None:
            return 0
        return self.record.rss_bytes


@dataclass(frozen=True)
class MemoryStats:
    private_bytes: int
    aggregate_bytes: int
