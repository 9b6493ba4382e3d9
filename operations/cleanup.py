"""Bulk database removal"""

import logging
from typing import Iterable, Optional

from core.enums import Phase
from core.interfaces import DatabaseEngine
from core.models import DropError, DropResult, ProgressEvent
from ui.progress import ProgressTracker, emit

logger = logging.getLogger(__name__)


async def drop_databases(
    engine: DatabaseEngine,
    names: Iterable[str],
    progress: Optional[ProgressTracker] = None
) -> DropResult:
    """Drop each database in turn; failures are collected, not raised"""
    names = list(names)
    result = DropResult()

    for i, name in enumerate(names):
        await emit(progress, ProgressEvent(
            index=i,
            total=len(names),
            item_name=name,
            phase=Phase.DROP.value,
            percent=round(i * 100 / len(names)),
        ))
        try:
            await engine.drop_database(name)
            result.deleted.append(name)
        except Exception as e:
            logger.warning("Could not drop %s: %s", name, e)
            result.errors.append(DropError(database=name, error=str(e)))

    await emit(progress, ProgressEvent(
        index=len(names),
        total=max(len(names), 1),
        phase=Phase.COMPLETE.value,
        percent=100,
    ))
    return result
