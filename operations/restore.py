"""Restore a dump file into a named database"""

import logging
from typing import Optional

from core.enums import Phase
from core.interfaces import DatabaseEngine
from core.models import DumpFile, ProgressPolicy, RestoreSummary
from db.workspace import WorkspaceManager
from ui.progress import ProgressAggregator, ProgressTracker

logger = logging.getLogger(__name__)


class Restorer:
    """Drops, recreates and fills a target database from a dump"""

    def __init__(
        self,
        engine: DatabaseEngine,
        progress: Optional[ProgressTracker] = None,
        policy: Optional[ProgressPolicy] = None
    ):
        self.engine = engine
        self.workspaces = WorkspaceManager(engine)
        self.progress = progress
        self.policy = policy

    async def restore(
        self,
        dump_path: str,
        target: str,
        *,
        index: int = 0,
        total: int = 1,
        item_name: Optional[str] = None,
    ) -> RestoreSummary:
        """
        Restore `dump_path` into `target`, replacing any existing database

        Args:
            dump_path: Dump file to import
            target: Target database name
            index, total, item_name: Batch position reported in progress events

        Returns:
            RestoreSummary with the target's table count and size
        """
        dump = DumpFile.from_path(dump_path)

        tracker = ProgressAggregator.with_policy(
            self.policy,
            self.progress,
            Phase.restoring(target),
            index=index,
            total=total,
            item_name=item_name or dump.name,
            total_bytes=dump.size_bytes,
        )
        await tracker.start()

        await self.workspaces.recreate(target)
        await self.engine.import_dump(target, dump.path, on_progress=tracker.update)
        await tracker.finish()

        info = await self.engine.database_info(target)
        logger.info("Restored %s into %s (%d tables)", dump.path, target, info.table_count)
        return RestoreSummary(
            database_name=target,
            dump_path=dump.path,
            table_count=info.table_count,
            size_mb=info.size_mb,
        )
