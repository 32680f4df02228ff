"""
Process Snapshot Module

Reads the OS process table through psutil and turns it into flat
ProcessRecord lists. The table scan is not atomic: processes may appear,
exit or change parent while it runs, and consumers must tolerate that.
"""
from typing import List

import psutil

from memwatch.errors import SnapshotError
from memwatch.models.free_memory import FreeMemoryStats
from memwatch.models.process_record import ProcessRecord
from memwatch.util.log_config import setup_logger

logger = setup_logger(__name__)

PROCESS_ATTRS = ["pid", "ppid", "memory_info", "exe", "name", "cmdline"]


class ProcessSnapshotProvider:
    """Snapshot every process visible to the current user"""

    def snapshot(self) -> List[ProcessRecord]:
        """
        Take one snapshot of the process table.

        Processes that exit during the scan are skipped by psutil; fields we
        are not allowed to read come back as None and degrade to defaults.

        Returns:
            List of ProcessRecord, one per live process

        Raises:
            SnapshotError: if the process table cannot be read at all
        """
        try:
            return [
                to_process_record(proc.info)
                for proc in psutil.process_iter(PROCESS_ATTRS, ad_value=None)
            ]
        except (psutil.Error, OSError) as e:
            raise SnapshotError(f"Cannot read process table: {e}") from e

    def read_free_memory(self) -> FreeMemoryStats:
        """System-wide memory and swap usage, like free(1)."""
        try:
            vm = psutil.virtual_memory()
            swap = psutil.swap_memory()
        except (psutil.Error, OSError) as e:
            raise SnapshotError(f"Cannot read system memory: {e}") from e

        return FreeMemoryStats(
            total=vm.total,
            used=vm.used,
            free=vm.free,
            available=vm.available,
            swap_total=swap.total,
            swap_used=swap.used,
            swap_free=swap.free,
        )


def to_process_record(info: dict) -> ProcessRecord:
    pid = info["pid"]
    parent_pid = info.get("ppid")
    if parent_pid == pid:
        # pid 0 reports itself as its own parent on some platforms
        parent_pid = None

    mem_info = info.get("memory_info")
    rss_bytes = mem_info.rss if mem_info is not None else 0

    return ProcessRecord(
        pid=pid,
        parent_pid=parent_pid,
        rss_bytes=rss_bytes,
        exe=info.get("exe") or "",
        name=info.get("name") or "",
        cmdline=list(info.get("cmdline") or []),
    )
