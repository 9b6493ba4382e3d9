"""Standalone database operations"""

from .restore import Restorer
from .snapshot import Snapshotter, snapshot_filename
from .cleanup import drop_databases

__all__ = [
    "Restorer",
    "Snapshotter",
    "snapshot_filename",
    "drop_databases",
]
