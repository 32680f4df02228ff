"""
Process tree reconstruction.

Turns a flat snapshot into a pid -> ProcessEntry index. Parent links come
from a non-atomic table scan, so the resulting graph may reference parents
that are gone, and in rare races may even contain cycles. Every walk over
the index therefore guards against visiting a pid twice.
"""
from typing import Dict, Iterable, Iterator, Tuple

from memwatch.models.process_record import ProcessEntry, ProcessRecord

_DONE = object()


def build_process_tree(records: Iterable[ProcessRecord]) -> Dict[int, ProcessEntry]:
    """
    Build the parent -> children index in a single pass.

    A parent that is missing from the snapshot still gets an (unresolved)
    entry so its children stay reachable from it.
    """
    entries: Dict[int, ProcessEntry] = {}
    for record in records:
        entry = entries.setdefault(record.pid, ProcessEntry())
        entry.record = record

        if record.parent_pid is not None:
            parent_entry = entries.setdefault(record.parent_pid, ProcessEntry())
            parent_entry.children.append(record.pid)

    return entries


def iter_subtree(pid: int, entries: Dict[int, ProcessEntry]) -> Iterator[Tuple[int, int]]:
    """
    Walk the subtree rooted at `pid` depth-first, yielding (pid, depth) in
    pre-order. Each pid is yielded once; a child already on the current path
    or already walked is skipped.
    """
    if pid not in entries:
        return

    seen = {pid}
    stack = [(pid, iter(entries[pid].children))]
    yield pid, 0

    while stack:
        _, children = stack[-1]
        child = next(children, _DONE)
        if child is _DONE:
            stack.pop()
            continue
        if child in seen or child not in entries:
            continue

        yield child, len(stack)
        seen.add(child)
        stack.append((child, iter(entries[child].children)))
