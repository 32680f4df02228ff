from typing import Dict

from memwatch.models.process_record import MemoryStats, ProcessEntry

_DONE = object()


def compute_memory_stats(pid: int, entries: Dict[int, ProcessEntry]) -> Dict[int, MemoryStats]:
    """
    Compute private and aggregate memory for every process under `pid`.

    Post-order traversal with an explicit stack: a node's stats are final once
    all of its children have been summed. Unresolved entries count as zero
    but their children are still added. A child that is already on the current
    path or already summed (a cycle or a duplicate link from an inconsistent
    snapshot) is skipped.

    Args:
        pid: Root of the subtree to aggregate
        entries: Index produced by build_process_tree

    Returns:
        pid -> MemoryStats for the reachable subtree; empty if `pid` is unknown
    """
    stats: Dict[int, MemoryStats] = {}
    if pid not in entries:
        return stats

    totals = {pid: entries[pid].private_bytes}
    on_path = {pid}
    stack = [(pid, iter(entries[pid].children))]

    while stack:
        current, children = stack[-1]
        child = next(children, _DONE)

        if child is _DONE:
            stack.pop()
            on_path.discard(current)
            stats[current] = MemoryStats(
                private_bytes=entries[current].private_bytes,
                aggregate_bytes=totals[current],
            )
            if stack:
                totals[stack[-1][0]] += totals[current]
            continue

        # Each pid is visited once: a repeat is a cycle or a second parent link
        if child in on_path or child in stats or child not in entries:
            continue

        on_path.add(child)
        totals[child] = entries[child].private_bytes
        stack.append((child, iter(entries[child].children)))

    return stats
