"""Core enumerations for dumpkit"""

from enum import Enum


class ItemState(str, Enum):
    """Per-item pipeline state"""
    INIT = "init"
    WORKSPACE_READY = "workspace_ready"
    IMPORTED = "imported"
    COMPOSED = "composed"
    CLEANED = "cleaned"
    RESTORING = "restoring"
    RESTORED = "restored"
    DONE = "done"
    FAILED = "failed"


class ItemOutcome(str, Enum):
    """Terminal outcome of one batch item"""
    DUMPED = "dumped"
    RESTORED = "restored"
    FAILED = "failed"


class SnapshotType(str, Enum):
    """Snapshot export flavour"""
    FULL = "full"
    SLIM = "slim"


class Phase(str, Enum):
    """Progress phase labels"""
    IMPORT = "Importing full dump…"
    EXPORT = "Exporting slim dump…"
    CLEANUP = "Cleaning up…"
    SNAPSHOT = "Exporting database…"
    RESTORE = "Restoring…"
    DROP = "Dropping databases…"
    COMPLETE = "Complete"

    @staticmethod
    def restoring(target: str) -> str:
        """Label for a restore into a named database"""
        return f"Restoring to {target}…"
