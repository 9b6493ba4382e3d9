"""MySQL engine access through the mysql client and mysqldump"""

import asyncio
import logging
from typing import Iterable, Optional

from core.exceptions import ExternalProcessError
from core.interfaces import ByteCallback, DatabaseEngine
from core.models import ConnectionParams, DatabaseInfo
from utils.sql import escape_like, quote_identifier, quote_literal
from .process import ProcessRunner

logger = logging.getLogger(__name__)

SYSTEM_DATABASES = frozenset({"information_schema", "mysql", "performance_schema", "sys"})


class MySQLClient(DatabaseEngine):
    """Drives the mysql client and mysqldump for one connection session"""

    def __init__(
        self,
        params: ConnectionParams,
        runner: Optional[ProcessRunner] = None,
        mysql_bin: str = "mysql",
        mysqldump_bin: str = "mysqldump",
        charset: str = "utf8mb4",
        collation: str = "utf8mb4_unicode_ci",
    ):
        self.params = params
        self.runner = runner or ProcessRunner()
        self.mysql_bin = mysql_bin
        self.mysqldump_bin = mysqldump_bin
        self.charset = charset
        self.collation = collation

    @classmethod
    def from_settings(cls, settings) -> "MySQLClient":
        """Build a client from application settings"""
        return cls(
            settings.get_connection_params(),
            mysql_bin=settings.MYSQL_BIN,
            mysqldump_bin=settings.MYSQLDUMP_BIN,
            charset=settings.DATABASE_CHARSET,
            collation=settings.DATABASE_COLLATION,
        )

    async def execute(self, sql: str, database: Optional[str] = None) -> list[list[str]]:
        """Run a statement and return tab-separated result rows without headers"""
        args = [*self.params.to_cli_args(), "--batch", "--skip-column-names", "-e", sql]
        if database:
            args.append(database)
        result = await self.runner.run(self.mysql_bin, args)
        text = result.stdout.decode("utf-8", errors="replace")
        return [line.split("\t") for line in text.splitlines() if line]

    async def database_exists(self, name: str) -> bool:
        rows = await self.execute(f"SHOW DATABASES LIKE {quote_literal(escape_like(name))}")
        return any(row[0] == name for row in rows)

    async def create_database(self, name: str) -> None:
        await self.execute(
            f"CREATE DATABASE {quote_identifier(name)} "
            f"CHARACTER SET {self.charset} COLLATE {self.collation}"
        )
        logger.debug("Created database %s", name)

    async def drop_database(self, name: str) -> None:
        await self.execute(f"DROP DATABASE {quote_identifier(name)}")
        logger.debug("Dropped database %s", name)

    async def list_databases(self) -> list[str]:
        rows = await self.execute("SHOW DATABASES")
        return sorted(row[0] for row in rows if row[0] not in SYSTEM_DATABASES)

    async def database_info(self, name: str) -> DatabaseInfo:
        rows = await self.execute(
            "SELECT COUNT(*), COALESCE(ROUND(SUM(data_length + index_length) / 1024 / 1024, 2), 0) "
            f"FROM information_schema.tables WHERE table_schema = {quote_literal(name)}"
        )
        if not rows:
            return DatabaseInfo()
        count, size = rows[0][0], rows[0][1]
        return DatabaseInfo(table_count=int(count), size_mb=float(size))

    async def ping(self) -> str:
        """Check the connection; returns the connection description"""
        await self.execute("SELECT 1")
        return self.params.describe()

    async def import_dump(
        self,
        name: str,
        dump_path: str,
        on_progress: Optional[ByteCallback] = None
    ) -> None:
        args = [*self.params.to_cli_args(), name]
        source = await asyncio.to_thread(open, dump_path, "rb")
        try:
            await self.runner.run(self.mysql_bin, args, stdin=source, on_input=on_progress)
        finally:
            source.close()

    def export_args(
        self,
        name: str,
        *,
        schema: bool = True,
        data: bool = True,
        ignore_tables: Iterable[str] = ()
    ) -> list[str]:
        """mysqldump arguments for an export"""
        args = [*self.params.to_cli_args()]
        if not data:
            args.append("--no-data")
        if not schema:
            args.append("--no-create-info")
        for table in ignore_tables:
            args.append(f"--ignore-table={name}.{table}")
        args.append(name)
        return args

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
        args = self.export_args(name, schema=schema, data=data, ignore_tables=ignore_tables)
        sink = await asyncio.to_thread(open, out_path, "wb")
        try:
            await self.runner.run(self.mysqldump_bin, args, stdout=sink, on_output=on_progress)
        finally:
            sink.close()


async def check_connection(client: MySQLClient) -> dict:
    """Connection status for display"""
    try:
        description = await client.ping()
        return {"success": True, "type": description, "user": client.params.user}
    except ExternalProcessError as e:
        return {"success": False, "error": str(e)}
