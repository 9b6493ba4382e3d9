"""Slim dump batch orchestrator"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from core.enums import ItemOutcome, ItemState, Phase
from core.exceptions import ConfigurationError, PipelineError
from core.interfaces import DatabaseEngine
from core.models import (
    BatchRequest, BatchResult, DumpFile, ExclusionSet, ItemResult,
    ProgressEvent, ProgressPolicy, RestoreSummary, logical_name
)
from db.composer import DumpComposer
from db.workspace import WorkspaceManager
from operations.restore import Restorer
from ui.progress import ProgressAggregator, ProgressTracker, emit
from utils.exclusions import load_exclusions
from utils.files import format_file_size

logger = logging.getLogger(__name__)


@dataclass
class ItemContext:
    """State of one item moving through the pipeline"""
    index: int
    total: int
    source_path: str
    name: str
    workspace_name: str
    output_path: Path
    restore_target: Optional[str] = None
    state: ItemState = ItemState.INIT
    dump: Optional[DumpFile] = None
    slim_size: Optional[int] = None
    restore: Optional[RestoreSummary] = None
    restore_error: Optional[str] = None

    def advance(self, state: ItemState) -> None:
        logger.debug("%s: %s -> %s", self.name, self.state.value, state.value)
        self.state = state


def savings_percent(full_size: int, slim_size: int) -> int:
    """Percentage by which the slim dump is smaller"""
    if full_size <= 0:
        return 0
    return round((1 - slim_size / full_size) * 100)


class Orchestrator:
    """
    Runs a batch of full dumps through import, slim export, cleanup and an
    optional restore, one item at a time.

    Per-item failures become failed ItemResults and the batch carries on;
    only problems that prevent the batch from starting raise PipelineError.
    """

    def __init__(
        self,
        engine: DatabaseEngine,
        progress: Optional[ProgressTracker] = None,
        policy: Optional[ProgressPolicy] = None,
        workspace_suffix: str = "_temp",
        slim_suffix: str = "_slim",
    ):
        self.engine = engine
        self.progress = progress
        self.policy = policy or ProgressPolicy()
        self.workspace_suffix = workspace_suffix
        self.slim_suffix = slim_suffix

        self.workspaces = WorkspaceManager(engine)
        self.composer = DumpComposer(engine)
        self.restorer = Restorer(engine, progress, self.policy)

    def workspace_name(self, path) -> str:
        return f"{logical_name(path)}{self.workspace_suffix}"

    def output_path(self, path, output_dir: Path) -> Path:
        return Path(output_dir) / f"{logical_name(path)}{self.slim_suffix}.sql"

    async def run(self, request: BatchRequest) -> BatchResult:
        """Execute the batch"""
        try:
            exclusions = (
                load_exclusions(request.exclusions_path)
                if request.exclusions_path else ExclusionSet()
            )
            output_dir = Path(request.output_dir)
            output_dir.mkdir(parents=True, exist_ok=True)
        except (ConfigurationError, OSError) as e:
            raise PipelineError(f"Slim dump batch could not start: {e}") from e

        if len(exclusions) == 0:
            logger.warning("No tables excluded; slim dumps will contain all data")

        total = len(request.files)
        results = []
        for i, path in enumerate(request.files):
            ctx = ItemContext(
                index=i,
                total=total,
                source_path=path,
                name=logical_name(path),
                workspace_name=self.workspace_name(path),
                output_path=self.output_path(path, output_dir),
                restore_target=request.restore_targets.get(path),
            )
            results.append(await self._process_item(ctx, exclusions))

        await emit(self.progress, ProgressEvent(
            index=total,
            total=total,
            item_name=None,
            phase=Phase.COMPLETE.value,
            percent=100,
        ))

        batch = BatchResult(success=True, results=results, exclusions=list(exclusions.tables))
        logger.info("Slim batch finished: %d succeeded, %d failed", batch.succeeded, batch.failed)
        return batch

    @staticmethod
    def build_request(
        files: list[str],
        output_dir,
        exclusions_path=None,
        restore_targets: Optional[dict] = None
    ) -> BatchRequest:
        """Validate batch input; raises PipelineError when unusable"""
        try:
            return BatchRequest(
                files=files,
                output_dir=output_dir,
                exclusions_path=exclusions_path,
                restore_targets=restore_targets or {},
            )
        except ValidationError as e:
            raise PipelineError(f"Invalid slim dump batch: {e}") from e

    async def _process_item(self, ctx: ItemContext, exclusions: ExclusionSet) -> ItemResult:
        try:
            ctx.dump = DumpFile.from_path(ctx.source_path)

            async with self.workspaces.workspace(ctx.workspace_name) as workspace:
                ctx.advance(ItemState.WORKSPACE_READY)

                await self._import(ctx)
                ctx.advance(ItemState.IMPORTED)

                await self._compose(ctx, exclusions)
                ctx.advance(ItemState.COMPOSED)

                cleanup = self._tracker(ctx, Phase.CLEANUP.value)
                await cleanup.start()
                await workspace.drop()
                await cleanup.finish()
                ctx.advance(ItemState.CLEANED)

        except Exception as e:
            failed_in = ctx.state
            ctx.advance(ItemState.FAILED)
            logger.warning("%s failed during %s: %s", ctx.name, failed_in.value, e)
            return ItemResult(
                success=False,
                file_name=ctx.name,
                source_path=ctx.source_path,
                outcome=ItemOutcome.FAILED,
                error=str(e) or type(e).__name__,
                failed_state=failed_in,
            )

        if ctx.restore_target:
            await self._restore(ctx)

        ctx.advance(ItemState.DONE)
        return self._success(ctx)

    def _tracker(self, ctx: ItemContext, phase: str, total_bytes: Optional[int] = None) -> ProgressAggregator:
        return ProgressAggregator.with_policy(
            self.policy,
            self.progress,
            phase,
            index=ctx.index,
            total=ctx.total,
            item_name=ctx.name,
            total_bytes=total_bytes,
        )

    async def _import(self, ctx: ItemContext) -> None:
        tracker = self._tracker(ctx, Phase.IMPORT.value, total_bytes=ctx.dump.current_size())
        await tracker.start()
        await self.engine.import_dump(ctx.workspace_name, ctx.dump.path, on_progress=tracker.update)
        await tracker.finish()

    async def _compose(self, ctx: ItemContext, exclusions: ExclusionSet) -> None:
        tracker = self._tracker(ctx, Phase.EXPORT.value)
        await tracker.start()
        ctx.slim_size = await self.composer.compose(
            ctx.workspace_name, ctx.output_path, exclusions, on_progress=tracker.update
        )
        await tracker.finish()

    async def _restore(self, ctx: ItemContext) -> None:
        """Restore failures leave the item successful with restore_error set"""
        ctx.advance(ItemState.RESTORING)
        try:
            ctx.restore = await self.restorer.restore(
                str(ctx.output_path),
                ctx.restore_target,
                index=ctx.index,
                total=ctx.total,
                item_name=ctx.name,
            )
            ctx.advance(ItemState.RESTORED)
        except Exception as e:
            logger.warning("%s: restore into %s failed: %s", ctx.name, ctx.restore_target, e)
            ctx.restore_error = str(e) or type(e).__name__

    def _success(self, ctx: ItemContext) -> ItemResult:
        full_size = ctx.dump.size_bytes
        slim_size = ctx.slim_size or 0
        return ItemResult(
            success=True,
            file_name=ctx.name,
            source_path=ctx.source_path,
            outcome=ItemOutcome.RESTORED if ctx.restore else ItemOutcome.DUMPED,
            full_size=full_size,
            slim_size=slim_size,
            full_size_text=format_file_size(full_size),
            slim_size_text=format_file_size(slim_size),
            savings=savings_percent(full_size, slim_size),
            output_path=str(ctx.output_path),
            restore=ctx.restore,
            restore_error=ctx.restore_error,
        )
