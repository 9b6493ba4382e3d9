"""Core abstractions for the dumpkit pipeline"""

from .models import *
from .enums import *
from .exceptions import *
from .interfaces import *

__all__ = [
    # Models
    "ConnectionParams",
    "DatabaseInfo",
    "DumpFile",
    "ExclusionSet",
    "ProgressEvent",
    "ProgressPolicy",
    "RestoreSummary",
    "ItemResult",
    "BatchRequest",
    "BatchResult",
    "SnapshotResult",
    "DropError",
    "DropResult",
    "logical_name",
    # Enums
    "ItemState",
    "ItemOutcome",
    "SnapshotType",
    "Phase",
    # Exceptions
    "DumpkitError",
    "ExternalProcessError",
    "ConfigurationError",
    "PipelineError",
    "DumpFileError",
    "InvalidNameError",
    # Interfaces
    "ByteCallback",
    "DatabaseEngine",
]
