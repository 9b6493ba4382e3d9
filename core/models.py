"""Core data models for the dumpkit pipeline"""

from datetime import datetime
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .enums import ItemOutcome, ItemState, SnapshotType
from .exceptions import DumpFileError


# ─────────────────────────────────────────────────────────────
# Engine connection
# ─────────────────────────────────────────────────────────────

class ConnectionParams(BaseModel):
    """Resolved connection parameters for the external client"""
    host: str = "localhost"
    port: int = 3306
    user: str = "root"
    password: str = ""
    socket: Optional[str] = None

    @field_validator("user")
    @classmethod
    def user_required(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("user is required")
        return value

    @field_validator("port")
    @classmethod
    def port_in_range(cls, value: int) -> int:
        if not 1 <= value <= 65535:
            raise ValueError(f"port {value} is out of range")
        return value

    @field_validator("socket")
    @classmethod
    def empty_socket_is_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None

    def to_cli_args(self) -> list[str]:
        """Render as client/dump utility arguments"""
        args = [f"--user={self.user}"]
        if self.password:
            args.append(f"--password={self.password}")
        if self.socket:
            args.append(f"--socket={self.socket}")
        else:
            args.append(f"--host={self.host}")
            args.append(f"--port={self.port}")
        return args

    def describe(self) -> str:
        """Human-readable connection type"""
        if self.socket:
            return f"Socket ({self.socket})"
        return f"TCP ({self.host}:{self.port})"


class DatabaseInfo(BaseModel):
    """Table count and on-disk size of a database"""
    table_count: int = 0
    size_mb: float = 0.0


# ─────────────────────────────────────────────────────────────
# Inputs
# ─────────────────────────────────────────────────────────────

class DumpFile(BaseModel):
    """An on-disk dump artifact"""
    path: str
    name: str
    size_bytes: int
    modified: datetime

    @classmethod
    def from_path(cls, path) -> "DumpFile":
        """Stat a dump file; raises FileNotFoundError when missing"""
        file_path = Path(path)
        stats = file_path.stat()
        if not file_path.is_file():
            raise DumpFileError(f"Not a regular file: {file_path}", str(file_path))
        return cls(
            path=str(file_path),
            name=logical_name(file_path),
            size_bytes=stats.st_size,
            modified=datetime.fromtimestamp(stats.st_mtime),
        )

    def current_size(self) -> int:
        """Re-read the size from disk"""
        return Path(self.path).stat().st_size


def logical_name(path) -> str:
    """Base name of a dump file without its .sql extension"""
    name = Path(path).name
    if name.endswith(".sql"):
        return name[:-len(".sql")]
    return name


class ExclusionSet(BaseModel):
    """Tables whose row data is left out of slim dumps"""
    tables: list[str] = []
    source: Optional[str] = None

    def __contains__(self, table: str) -> bool:
        return table in self.tables

    def __len__(self) -> int:
        return len(self.tables)


# ─────────────────────────────────────────────────────────────
# Progress
# ─────────────────────────────────────────────────────────────

class ProgressEvent(BaseModel):
    """Transient progress notification"""
    index: int = 0
    total: int = 1
    item_name: Optional[str] = None
    phase: str
    percent: int = Field(default=0, ge=0, le=100)
    bytes_processed: Optional[int] = None


# ─────────────────────────────────────────────────────────────
# Results
# ─────────────────────────────────────────────────────────────

class RestoreSummary(BaseModel):
    """Outcome of restoring a dump into a target database"""
    database_name: str
    dump_path: str
    table_count: int = 0
    size_mb: float = 0.0


class ItemResult(BaseModel):
    """Result of processing one input dump"""
    success: bool
    file_name: str
    source_path: str
    outcome: ItemOutcome
    full_size: Optional[int] = None
    slim_size: Optional[int] = None
    full_size_text: Optional[str] = None
    slim_size_text: Optional[str] = None
    savings: Optional[int] = None
    output_path: Optional[str] = None
    restore: Optional[RestoreSummary] = None
    restore_error: Optional[str] = None
    error: Optional[str] = None
    failed_state: Optional[ItemState] = None


class BatchRequest(BaseModel):
    """Input for a slim batch run"""
    files: list[str]
    output_dir: Path
    exclusions_path: Optional[Path] = None
    restore_targets: dict[str, str] = {}

    @field_validator("files")
    @classmethod
    def files_required(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("at least one input file is required")
        return value


class BatchResult(BaseModel):
    """Ordered results of a slim batch run"""
    success: bool = True
    results: list[ItemResult] = []
    exclusions: list[str] = []

    @property
    def succeeded(self) -> int:
        return sum(1 for result in self.results if result.success)

    @property
    def failed(self) -> int:
        return sum(1 for result in self.results if not result.success)

    @property
    def partial_failure(self) -> bool:
        return self.failed > 0


class SnapshotResult(BaseModel):
    """Outcome of a database snapshot"""
    database_name: str
    file_name: str
    file_path: str
    size_bytes: int
    size_text: str
    table_count: int
    type: SnapshotType


class DropError(BaseModel):
    """A database that could not be dropped"""
    database: str
    error: str


class DropResult(BaseModel):
    """Outcome of a bulk drop"""
    success: bool = True
    deleted: list[str] = []
    errors: list[DropError] = []


class ProgressPolicy(BaseModel):
    """Rate limiting and capping for progress events"""
    interval: float = Field(default=0.2, ge=0)
    cap: int = Field(default=95, ge=0, le=100)
    bytes_per_percent: int = Field(default=1024 * 1024, ge=1)
