from .aggregate_calculator import compute_memory_stats
from .tree_builder import build_process_tree, iter_subtree

__all__ = ["build_process_tree", "compute_memory_stats", "iter_subtree"]
