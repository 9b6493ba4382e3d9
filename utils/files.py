"""Dump file discovery and formatting helpers"""

import os
import re
import shutil
import time
from datetime import datetime
from pathlib import Path
from typing import Optional

from core.exceptions import DumpFileError, InvalidNameError
from core.models import DumpFile, logical_name


def discover_dump_files(directory) -> list[DumpFile]:
    """
    List .sql files in a directory, newest first

    Args:
        directory: Directory to search

    Returns:
        DumpFile per .sql file; empty when the directory does not exist
    """
    root = Path(directory)
    try:
        candidates = [p for p in root.iterdir() if p.suffix == ".sql" and p.is_file()]
    except FileNotFoundError:
        return []

    files = [DumpFile.from_path(p) for p in candidates]
    return sorted(files, key=lambda f: f.modified, reverse=True)


def format_file_size(size_bytes: int) -> str:
    """Format file size in human-readable form"""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    if size_bytes < 1024 ** 2:
        return f"{size_bytes / 1024:.2f} KB"
    if size_bytes < 1024 ** 3:
        return f"{size_bytes / 1024 ** 2:.2f} MB"
    return f"{size_bytes / 1024 ** 3:.2f} GB"


def format_file_age(modified: datetime, now: Optional[float] = None) -> str:
    """Format the age of a timestamp, e.g. '3h ago'"""
    now = time.time() if now is None else now
    diff = int(now - modified.timestamp())

    if diff < 60:
        return "just now"
    if diff < 3600:
        return f"{diff // 60}m ago"
    if diff < 86400:
        return f"{diff // 3600}h ago"
    if diff < 604800:
        return f"{diff // 86400}d ago"
    if diff < 2592000:
        return f"{diff // 604800}w ago"
    if diff < 31536000:
        return f"{diff // 2592000}mo ago"
    return f"{diff // 31536000}y ago"


def sanitize_filename(name: str) -> str:
    """Lowercase, hyphenate whitespace and drop anything else unsafe"""
    name = re.sub(r"\s+", "-", name)
    return re.sub(r"[^a-zA-Z0-9_-]", "", name).lower()


def get_timestamp(now: Optional[datetime] = None) -> str:
    """Timestamp for filenames in YYYYMMDD_HHMMSS format"""
    return (now or datetime.now()).strftime("%Y%m%d_%H%M%S")


def database_name_from_file(path, slim_suffix: str = "_slim") -> str:
    """Suggested database name for a dump file"""
    name = logical_name(path)
    if slim_suffix and name.endswith(slim_suffix):
        return name[:-len(slim_suffix)]
    return name


def _sql_file(path) -> DumpFile:
    """Stat an existing regular .sql file"""
    dump = DumpFile.from_path(path)
    if Path(dump.path).suffix != ".sql":
        raise DumpFileError(f"Not a .sql file: {dump.path}", dump.path)
    return dump


def rename_dump(path, new_name: str) -> Path:
    """
    Rename a dump file within its directory

    Args:
        path: Existing .sql file
        new_name: New base name; a trailing .sql is accepted

    Returns:
        Path of the renamed file
    """
    dump = _sql_file(path)
    name = new_name.strip()
    if name.endswith(".sql"):
        name = name[:-len(".sql")]
    if not name or Path(name).name != name:
        raise InvalidNameError(f"Invalid file name: {new_name!r}")
    if name == dump.name:
        raise InvalidNameError("New name must be different from old name")

    target = Path(dump.path).with_name(f"{name}.sql")
    if target.exists():
        raise DumpFileError(f"File '{target.name}' already exists", str(target))
    os.rename(dump.path, target)
    return target


def replace_dump(source, target) -> DumpFile:
    """
    Overwrite an existing dump with a copy of another; the source is kept

    Returns:
        DumpFile for the replaced target
    """
    new = _sql_file(source)
    old = _sql_file(target)
    if Path(new.path).resolve() == Path(old.path).resolve():
        raise DumpFileError("Source and target are the same file", old.path)
    shutil.copyfile(new.path, old.path)
    return DumpFile.from_path(old.path)


def delete_dumps(paths) -> int:
    """
    Delete dump files

    Every path is checked before anything is deleted, so an invalid path
    leaves all files in place.

    Returns:
        Number of files deleted
    """
    dumps = [_sql_file(p) for p in paths]
    for dump in dumps:
        os.unlink(dump.path)
    return len(dumps)
