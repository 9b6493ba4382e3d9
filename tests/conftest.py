import re
from pathlib import Path
from typing import Iterable, Optional

import pytest

from core.exceptions import ExternalProcessError
from core.interfaces import DatabaseEngine
from core.models import DatabaseInfo
from db.process import notify
from ui.progress import ProgressTracker

CREATE_RE = re.compile(r"^CREATE TABLE `([^`]+)`")
INSERT_RE = re.compile(r"^INSERT INTO `([^`]+)` VALUES (.*);$")


class FakeEngine(DatabaseEngine):
    """In-memory engine understanding a tiny CREATE/INSERT dump dialect"""

    def __init__(self, chunk_size: int = 16):
        self.databases: dict[str, dict[str, list[str]]] = {}
        self.calls: list[tuple] = []
        self.failures: dict[str, set] = {}
        self.chunk_size = chunk_size

    def fail(self, operation: str, name: str) -> None:
        self.failures.setdefault(operation, set()).add(name)

    def _check(self, operation: str, name: str) -> None:
        self.calls.append((operation, name))
        if name in self.failures.get(operation, set()):
            raise ExternalProcessError("mysql", 1, f"ERROR: {operation} {name} refused")

    async def database_exists(self, name: str) -> bool:
        self._check("exists", name)
        return name in self.databases

    async def create_database(self, name: str) -> None:
        self._check("create", name)
        if name in self.databases:
            raise ExternalProcessError("mysql", 1, f"ERROR 1007: database {name} exists")
        self.databases[name] = {}

    async def drop_database(self, name: str) -> None:
        self._check("drop", name)
        if name not in self.databases:
            raise ExternalProcessError("mysql", 1, f"ERROR 1008: database {name} doesn't exist")
        del self.databases[name]

    async def list_databases(self) -> list[str]:
        return sorted(self.databases)

    async def database_info(self, name: str) -> DatabaseInfo:
        tables = self.databases.get(name, {})
        rows = sum(len(r) for r in tables.values())
        return DatabaseInfo(table_count=len(tables), size_mb=round(rows / 1024, 2))

    async def import_dump(self, name, dump_path, on_progress=None) -> None:
        self._check("import", name)
        if name not in self.databases:
            raise ExternalProcessError("mysql", 1, f"ERROR 1049: Unknown database '{name}'")
        data = Path(dump_path).read_bytes()
        for offset in range(self.chunk_size, len(data) + self.chunk_size, self.chunk_size):
            await notify(on_progress, min(offset, len(data)))
        tables = self.databases[name]
        for line in data.decode().splitlines():
            if line == "BROKEN":
                raise ExternalProcessError("mysql", 1, "ERROR 1064: syntax error")
            if m := CREATE_RE.match(line):
                tables.setdefault(m.group(1), [])
            elif m := INSERT_RE.match(line):
                tables[m.group(1)].append(m.group(2))

    async def export_dump(
        self,
        name,
        out_path,
        *,
        schema: bool = True,
        data: bool = True,
        ignore_tables: Iterable[str] = (),
        on_progress=None
    ) -> None:
        kind = "export_schema" if not data else "export_data" if not schema else "export"
        self._check(kind, name)
        if name not in self.databases:
            raise ExternalProcessError("mysqldump", 2, f"Got error: 1049: Unknown database '{name}'")
        ignored = set(ignore_tables)
        lines = [f"-- dump of {name}"]
        for table, rows in self.databases[name].items():
            if table in ignored:
                continue
            if schema:
                lines.append(f"CREATE TABLE `{table}` (id int);")
            if data:
                lines.extend(f"INSERT INTO `{table}` VALUES {row};" for row in rows)
        payload = ("\n".join(lines) + "\n").encode()
        with open(out_path, "wb") as out:
            for offset in range(0, len(payload), self.chunk_size):
                out.write(payload[offset:offset + self.chunk_size])
                await notify(on_progress, min(offset + self.chunk_size, len(payload)))


class RecordingProgress(ProgressTracker):
    """Progress tracker collecting every event"""

    def __init__(self):
        self.events = []

    def update(self, event):
        self.events.append(event)


def write_dump(path: Path, tables: dict[str, int], broken: bool = False) -> Path:
    """Write a fake full dump with `rows` rows per table"""
    lines = []
    for table, rows in tables.items():
        lines.append(f"CREATE TABLE `{table}` (id int);")
        lines.extend(f"INSERT INTO `{table}` VALUES ({i});" for i in range(rows))
    if broken:
        lines.append("BROKEN")
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def progress() -> RecordingProgress:
    return RecordingProgress()


@pytest.fixture
def shop_dump(tmp_path: Path) -> Path:
    full = tmp_path / "full"
    full.mkdir()
    return write_dump(full / "shop.sql", {"orders": 20, "sessions": 200, "cache": 100})
