from .snapshot_provider import ProcessSnapshotProvider

__all__ = ["ProcessSnapshotProvider"]
