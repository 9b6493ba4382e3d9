"""Database engine layer"""

from .process import ProcessRunner, ProcessResult
from .mysql import MySQLClient, check_connection
from .workspace import Workspace, WorkspaceManager
from .composer import DumpComposer

__all__ = [
    "ProcessRunner",
    "ProcessResult",
    "MySQLClient",
    "check_connection",
    "Workspace",
    "WorkspaceManager",
    "DumpComposer",
]
