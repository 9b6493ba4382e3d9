"""Ephemeral workspace databases"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from core.interfaces import DatabaseEngine

logger = logging.getLogger(__name__)


class Workspace:
    """A scratch database held for the duration of one transformation"""

    def __init__(self, manager: "WorkspaceManager", name: str):
        self.manager = manager
        self.name = name
        self.dropped = False

    async def drop(self) -> None:
        """Drop the workspace now; the scope will not drop it again"""
        await self.manager.drop(self.name)
        self.dropped = True


class WorkspaceManager:
    """Creates and drops named databases on the engine"""

    def __init__(self, engine: DatabaseEngine):
        self.engine = engine

    async def exists(self, name: str) -> bool:
        return await self.engine.database_exists(name)

    async def create(self, name: str) -> None:
        await self.engine.create_database(name)

    async def drop(self, name: str) -> None:
        await self.engine.drop_database(name)

    async def recreate(self, name: str) -> None:
        """Drop if present, then create empty"""
        if await self.exists(name):
            logger.info("Dropping existing database %s before recreating it", name)
            await self.drop(name)
        await self.create(name)

    async def discard(self, name: str) -> bool:
        """
        Best-effort drop used on error paths

        Returns:
            True when the database is known to be gone; errors are logged, not raised
        """
        try:
            if await self.exists(name):
                await self.drop(name)
            return True
        except Exception as e:
            logger.warning("Could not clean up workspace %s: %s", name, e)
            return False

    @asynccontextmanager
    async def workspace(self, name: str) -> AsyncIterator[Workspace]:
        """
        Recreate a workspace and guarantee it is dropped on exit

        The body may drop the workspace itself via Workspace.drop(). If it
        did not (including when it raised), the workspace is discarded on
        the way out without masking the body's exception.
        """
        try:
            await self.recreate(name)
        except BaseException:
            await self.discard(name)
            raise
        ws = Workspace(self, name)
        try:
            yield ws
        finally:
            if not ws.dropped:
                ws.dropped = await self.discard(name)
