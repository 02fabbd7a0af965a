"""Snapshot loaders for the release record collection."""

from update_lens.adapters.snapshots.json_snapshot_loader import JsonSnapshotLoader

__all__ = ["JsonSnapshotLoader"]
