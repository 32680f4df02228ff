"""
Report rendering.

Produces the text written to the output sink for one tick: a summary line,
the process tree with private and aggregate memory, optional argument lines
under each process and an optional free(1)-style block.
"""
from typing import Dict, List, Optional

from tabulate import tabulate

from memwatch.models.free_memory import FreeMemoryStats
from memwatch.models.high_water_mark_state import ReportDecision
from memwatch.models.process_record import MemoryStats, ProcessEntry
from memwatch.service.tree.tree_builder import iter_subtree
from memwatch.util.file_utils import executable_name
from memwatch.util.units import bytes_to_mib

LINE_PREFIX = "🌊 "
PROGRAM_NAME = "memwatch"
TITLE_WIDTH = 50
PAD_WIDTH = 30
INDENT_WIDTH = 2
COMMAND_WRAP_WIDTH = 100
UNRESOLVED_NAME = "<exited>"


def process_title(pid: int, entry: Optional[ProcessEntry]) -> str:
    if entry is None or not entry.resolved:
        return f"{UNRESOLVED_NAME} ({pid})"
    record = entry.record
    name = executable_name(record.exe, record.name)
    return f"{name} ({pid})"


def format_row(title: str, private: str, aggregate: str, depth: int) -> str:
    indent = " " * (depth * INDENT_WIDTH)
    pad = " " * max(0, PAD_WIDTH - depth * INDENT_WIDTH)
    return f"{LINE_PREFIX}{indent}{title:<{TITLE_WIDTH}}{pad}{private:>9}MiB {aggregate:>9}MiB"


def wrap_command(cmdline: List[str], depth: int) -> List[str]:
    """
    Word-wrap an argument vector beneath its process line.

    The pending line is flushed once it grows past COMMAND_WRAP_WIDTH before
    the next argument is appended, and once more after the last argument.
    """
    if not cmdline:
        return []

    indent = " " * (depth * INDENT_WIDTH)
    lines = []
    line_buffer = "  "
    for arg in cmdline:
        if len(line_buffer) > COMMAND_WRAP_WIDTH:
            lines.append(f"{LINE_PREFIX}{indent}{line_buffer}")
            line_buffer = "    "
        line_buffer += f" {arg}"
    lines.append(f"{LINE_PREFIX}{indent}{line_buffer}")
    return lines


def render_free_memory(free_memory: FreeMemoryStats) -> List[str]:
    """free(1) -m style table, values in MiB."""
    def mib(value: int) -> str:
        return f"{bytes_to_mib(value)}Mi"

    rows = [
        ["Mem:", mib(free_memory.total), mib(free_memory.used),
         mib(free_memory.free), mib(free_memory.available)],
        ["Swap:", mib(free_memory.swap_total), mib(free_memory.swap_used),
         mib(free_memory.swap_free), ""],
    ]
    table = tabulate(rows, headers=["", "total", "used", "free", "available"],
                     tablefmt="plain", stralign="right")
    return [f"{LINE_PREFIX}  {line}" for line in table.splitlines()]


class ReportRenderer:

    def __init__(self, show_command: bool = False, show_free: bool = False):
        self.show_command = show_command
        self.show_free = show_free

    def render(
        self,
        pid: int,
        entries: Dict[int, ProcessEntry],
        stats: Dict[int, MemoryStats],
        decision: ReportDecision,
        free_memory: Optional[FreeMemoryStats] = None,
    ) -> str:
        """
        Render one tick into a text buffer. Nothing is written here.

        Args:
            pid: Root of the watched tree
            entries: Index produced by build_process_tree
            stats: Output of compute_memory_stats for the same tick
            decision: Detector verdict for the tick, selects the summary wording
            free_memory: System memory block, rendered when show_free is set

        Returns:
            The report text, newline terminated
        """
        msg = "high water mark reached" if decision.triggered else "presently at"
        lines = [
            f"{LINE_PREFIX}{PROGRAM_NAME}: {msg}: {bytes_to_mib(decision.aggregate_bytes)} MiB used",
            format_row("process", "private ", "total ", 0),
        ]

        for node_pid, depth in iter_subtree(pid, entries):
            node_stats = stats.get(node_pid)
            if node_stats is None:
                continue
            entry = entries.get(node_pid)
            lines.append(format_row(
                process_title(node_pid, entry),
                str(bytes_to_mib(node_stats.private_bytes)),
                str(bytes_to_mib(node_stats.aggregate_bytes)),
                depth,
            ))
            if self.show_command and entry is not None and entry.resolved:
                lines.extend(wrap_command(entry.record.cmdline, depth))

        lines.append("")

        if self.show_free and free_memory is not None:
            lines.extend(render_free_memory(free_memory))

        return "\n".join(lines) + "\n"
