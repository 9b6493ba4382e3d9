"""Slim dump composition: schema export + filtered data export"""

import asyncio
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from core.interfaces import ByteCallback, DatabaseEngine
from core.models import ExclusionSet
from .process import notify

logger = logging.getLogger(__name__)


def _temp_artifact(directory: Path, prefix: str) -> Path:
    fd, name = tempfile.mkstemp(prefix=prefix, suffix=".sql", dir=directory)
    os.close(fd)
    return Path(name)


def _concatenate(schema_path: Path, data_path: Path, output_path: Path) -> int:
    """Append the data export to the schema export and move it into place"""
    with open(schema_path, "ab") as out, open(data_path, "rb") as data:
        shutil.copyfileobj(data, out)
    os.replace(schema_path, output_path)
    return output_path.stat().st_size


class DumpComposer:
    """
    Builds a slim dump from a database.

    The schema pass exports every table definition, including excluded
    tables. The data pass exports rows for every table not excluded. The
    output is the schema export followed byte-for-byte by the data export.
    Temporary artifacts live next to the output so the final move is a
    rename on the same filesystem.
    """

    def __init__(self, engine: DatabaseEngine):
        self.engine = engine

    async def compose(
        self,
        database: str,
        output_path,
        exclusions: ExclusionSet,
        on_progress: Optional[ByteCallback] = None
    ) -> int:
        """
        Write a slim dump of `database` to `output_path`

        Progress is one increasing byte counter: schema bytes count half,
        data bytes count half on top of the schema's half.

        Returns:
            Size of the written output in bytes
        """
        output = Path(output_path)
        output.parent.mkdir(parents=True, exist_ok=True)
        schema_path = data_path = None
        schema_bytes = 0

        async def schema_progress(count: int):
            nonlocal schema_bytes
            schema_bytes = count
            await notify(on_progress, count // 2)

        async def data_progress(count: int):
            await notify(on_progress, schema_bytes // 2 + count // 2)

        try:
            schema_path = _temp_artifact(output.parent, "._slim_schema_")
            data_path = _temp_artifact(output.parent, "._slim_data_")
            await self.engine.export_dump(
                database, str(schema_path), data=False, on_progress=schema_progress
            )
            await self.engine.export_dump(
                database,
                str(data_path),
                schema=False,
                ignore_tables=list(exclusions.tables),
                on_progress=data_progress,
            )
            size = await asyncio.to_thread(_concatenate, schema_path, data_path, output)
            logger.debug("Composed %s (%d bytes, %d tables without data)", output, size, len(exclusions))
            return size
        finally:
            for artifact in (schema_path, data_path):
                if artifact is None:
                    continue
                try:
                    artifact.unlink(missing_ok=True)
                except OSError as e:
                    logger.warning("Could not remove temporary file %s: %s", artifact, e)
