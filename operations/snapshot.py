"""Snapshots of live databases"""

import logging
from pathlib import Path
from typing import Optional

from core.enums import Phase, SnapshotType
from core.exceptions import InvalidNameError
from core.interfaces import DatabaseEngine
from core.models import ExclusionSet, ProgressEvent, ProgressPolicy, SnapshotResult
from db.composer import DumpComposer
from ui.progress import ProgressAggregator, ProgressTracker, emit
from utils.files import format_file_size, get_timestamp, sanitize_filename

logger = logging.getLogger(__name__)


def snapshot_filename(database: str, description: str, timestamp: Optional[str] = None) -> str:
    """<db>_snapshot_<description>_<timestamp>.sql"""
    return f"{database}_snapshot_{sanitize_filename(description.strip())}_{timestamp or get_timestamp()}.sql"


class Snapshotter:
    """Exports a live database to a timestamped dump file"""

    def __init__(
        self,
        engine: DatabaseEngine,
        progress: Optional[ProgressTracker] = None,
        policy: Optional[ProgressPolicy] = None
    ):
        self.engine = engine
        self.composer = DumpComposer(engine)
        self.progress = progress
        self.policy = policy

    async def snapshot(
        self,
        database: str,
        description: str,
        output_dir,
        snapshot_type: SnapshotType = SnapshotType.FULL,
        exclusions: Optional[ExclusionSet] = None,
    ) -> SnapshotResult:
        """
        Export `database` into `output_dir`

        A slim snapshot with an empty exclusion set is written as a full one.
        """
        if not sanitize_filename((description or "").strip()):
            raise InvalidNameError("Snapshot description is required")

        exclusions = exclusions or ExclusionSet()
        effective = SnapshotType.SLIM
        if snapshot_type == SnapshotType.FULL or len(exclusions) == 0:
            effective = SnapshotType.FULL
        if snapshot_type == SnapshotType.SLIM and effective == SnapshotType.FULL:
            logger.warning("No tables configured for exclusion; creating a full snapshot of %s", database)

        output = Path(output_dir)
        output.mkdir(parents=True, exist_ok=True)
        file_path = output / snapshot_filename(database, description)

        tracker = ProgressAggregator.with_policy(
            self.policy, self.progress, Phase.SNAPSHOT.value, item_name=database
        )
        await tracker.start()
        try:
            if effective == SnapshotType.SLIM:
                await self.composer.compose(database, file_path, exclusions, on_progress=tracker.update)
            else:
                await self.engine.export_dump(database, str(file_path), on_progress=tracker.update)
        except BaseException:
            file_path.unlink(missing_ok=True)
            raise
        await tracker.finish()
        await emit(self.progress, ProgressEvent(phase=Phase.COMPLETE.value, percent=100))

        size = file_path.stat().st_size
        info = await self.engine.database_info(database)
        return SnapshotResult(
            database_name=database,
            file_name=file_path.name,
            file_path=str(file_path),
            size_bytes=size,
            size_text=format_file_size(size),
            table_count=info.table_count,
            type=effective,
        )
