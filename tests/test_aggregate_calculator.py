import random

from memwatch.service.tree.aggregate_calculator import compute_memory_stats
from memwatch.service.tree.tree_builder import build_process_tree

from helpers import KIB, record


def test_root_with_two_children():
    entries = build_process_tree([
        record(100, 1, kib=1000),
        record(101, 100, kib=500),
        record(102, 100, kib=300),
    ])

    stats = compute_memory_stats(100, entries)

    assert stats[100].private_bytes == 1000 * KIB
    assert stats[100].aggregate_bytes == 1800 * KIB
    assert stats[101].aggregate_bytes == 500 * KIB
    assert stats[102].aggregate_bytes == 300 * KIB
    assert 1 not in stats


def test_absent_root_gives_empty_result():
    entries = build_process_tree([record(1, kib=10)])

    assert compute_memory_stats(2, entries) == {}


def test_unresolved_entry_counts_zero_but_children_are_summed():
    # 50 vanished from the table but 51 and 52 still name it as parent
    entries = build_process_tree([record(51, 50, kib=200), record(52, 50, kib=100)])

    stats = compute_memory_stats(50, entries)

    assert stats[50].private_bytes == 0
    assert stats[50].aggregate_bytes == 300 * KIB


def test_cycle_is_truncated():
    entries = build_process_tree([
        record(5, 7, kib=1),
        record(6, 5, kib=2),
        record(7, 6, kib=4),
    ])

    stats = compute_memory_stats(5, entries)

    assert stats[5].aggregate_bytes == 7 * KIB
    assert stats[6].aggregate_bytes == 6 * KIB
    assert stats[7].aggregate_bytes == 4 * KIB


def test_deep_chain_does_not_hit_recursion_limit():
    depth = 5000
    records = [record(1, kib=1)] + [record(pid, pid - 1, kib=1) for pid in range(2, depth + 1)]

    stats = compute_memory_stats(1, build_process_tree(records))

    assert stats[1].aggregate_bytes == depth * KIB
    assert stats[depth].aggregate_bytes == 1 * KIB


def test_aggregate_equals_private_plus_children_for_random_trees():
    rng = random.Random(1234)
    for _ in range(20):
        records = [record(1, kib=rng.randint(0, 5000))]
        for pid in range(2, rng.randint(2, 60)):
            records.append(record(pid, rng.randint(1, pid - 1), kib=rng.randint(0, 5000)))
        rng.shuffle(records)

        entries = build_process_tree(records)
        stats = compute_memory_stats(1, entries)

        assert len(stats) == len(records)
        for pid, pid_stats in stats.items():
            children_total = sum(stats[child].aggregate_bytes for child in entries[pid].children)
            assert pid_stats.aggregate_bytes == pid_stats.private_bytes + children_total
            assert pid_stats.aggregate_bytes >= pid_stats.private_bytes


def test_pid_listed_under_two_parents_is_counted_once():
    entries = build_process_tree([
        record(1, kib=1),
        record(2, 1, kib=2),
        record(3, 1, kib=4),
        record(4, 2, kib=8),
    ])
    entries[3].children.append(4)

    stats = compute_memory_stats(1, entries)

    assert stats[1].aggregate_bytes == 15 * KIB
    assert stats[2].aggregate_bytes == 10 * KIB
    assert stats[3].aggregate_bytes == 4 * KIB
