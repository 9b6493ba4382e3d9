"""Abstract base classes for dumpkit components"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Optional

from .models import DatabaseInfo

# Receives the running byte count; may return an awaitable
ByteCallback = Callable[[int], Any]


class DatabaseEngine(ABC):
    """Operations the pipeline needs from the external database engine"""

    @abstractmethod
    async def database_exists(self, name: str) -> bool:
        """Whether a database with exactly this name exists"""
        pass

    @abstractmethod
    async def create_database(self, name: str) -> None:
        """Create an empty database"""
        pass

    @abstractmethod
    async def drop_database(self, name: str) -> None:
        """Drop a database; fails if it does not exist"""
        pass

    @abstractmethod
    async def list_databases(self) -> list[str]:
        """Non-system databases, sorted"""
        pass

    @abstractmethod
    async def database_info(self, name: str) -> DatabaseInfo:
        """Table count and size of a database"""
        pass

    @abstractmethod
    async def import_dump(
        self,
        name: str,
        dump_path: str,
        on_progress: Optional[ByteCallback] = None
    ) -> None:
        """Stream a dump file into a database"""
        pass

    @abstractmethod
    async def export_dump(
        self,
        name: str,
        out_path: str,
        *,
        schema: bool = True,
        data: bool = True,
        ignore_tables: Iterable[str] = (),
        on_progress: Optional[ByteCallback] = None
    ) -> None:
        """Export a database to a file.

        schema=False omits CREATE TABLE statements, data=False omits rows,
        ignore_tables leaves the named tables out entirely.
        """
        pass
