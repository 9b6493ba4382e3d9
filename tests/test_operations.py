from pathlib import Path

import pytest

from conftest import FakeEngine, RecordingProgress, write_dump
from core.enums import Phase, SnapshotType
from core.exceptions import InvalidNameError
from core.models import ExclusionSet
from operations import Restorer, Snapshotter, drop_databases, snapshot_filename


@pytest.mark.asyncio
async def test_restore_replaces_target(engine: FakeEngine, progress: RecordingProgress, tmp_path: Path):
    dump = write_dump(tmp_path / "shop_slim.sql", {"orders": 4, "cache": 0})
    engine.databases["shop"] = {"stale": ["(1)"]}

    summary = await Restorer(engine, progress).restore(str(dump), "shop")

    assert summary.database_name == "shop"
    assert summary.table_count == 2
    assert set(engine.databases["shop"]) == {"orders", "cache"}
    percents = [e.percent for e in progress.events]
    assert percents[0] == 0 and percents[-1] == 100
    assert {e.phase for e in progress.events} == {Phase.restoring("shop")}


@pytest.mark.asyncio
async def test_restore_missing_file_does_not_touch_target(engine, progress, tmp_path):
    engine.databases["shop"] = {"orders": ["(1)"]}
    with pytest.raises(FileNotFoundError):
        await Restorer(engine, progress).restore(str(tmp_path / "nope.sql"), "shop")
    assert engine.databases["shop"] == {"orders": ["(1)"]}


@pytest.mark.asyncio
async def test_full_snapshot(engine, progress, tmp_path):
    engine.databases["shop"] = {"orders": ["(1)", "(2)"], "sessions": ["(1)"]}

    result = await Snapshotter(engine, progress).snapshot("shop", "Before upgrade", tmp_path)

    assert result.type == SnapshotType.FULL
    assert result.file_name.startswith("shop_snapshot_before-upgrade_")
    assert result.table_count == 2
    text = Path(result.file_path).read_text()
    assert "INSERT INTO `sessions`" in text
    assert progress.events[-1].phase == Phase.COMPLETE.value


@pytest.mark.asyncio
async def test_slim_snapshot(engine, progress, tmp_path):
    engine.databases["shop"] = {"orders": ["(1)"], "sessions": ["(1)"]}

    result = await Snapshotter(engine, progress).snapshot(
        "shop", "nightly", tmp_path, SnapshotType.SLIM, ExclusionSet(tables=["sessions"])
    )

    assert result.type == SnapshotType.SLIM
    text = Path(result.file_path).read_text()
    assert "CREATE TABLE `sessions`" in text
    assert "INSERT INTO `sessions`" not in text
    assert "INSERT INTO `orders`" in text


@pytest.mark.asyncio
async def test_slim_snapshot_without_exclusions_is_full(engine, progress, tmp_path):
    engine.databases["shop"] = {"orders": ["(1)"]}
    result = await Snapshotter(engine, progress).snapshot("shop", "x", tmp_path, SnapshotType.SLIM)
    assert result.type == SnapshotType.FULL


@pytest.mark.asyncio
async def test_failed_snapshot_leaves_no_file(engine, progress, tmp_path):
    with pytest.raises(Exception, match="Unknown database"):
        await Snapshotter(engine, progress).snapshot("missing", "x", tmp_path)
    assert list(tmp_path.iterdir()) == []


@pytest.mark.asyncio
async def test_snapshot_requires_description(engine, tmp_path):
    with pytest.raises(InvalidNameError):
        await Snapshotter(engine).snapshot("shop", "  !! ", tmp_path)


def test_snapshot_filename():
    assert snapshot_filename("shop", "Pre Release", "20240101_000000") == \
        "shop_snapshot_pre-release_20240101_000000.sql"


@pytest.mark.asyncio
async def test_drop_databases_collects_errors(engine, progress):
    engine.databases.update({"a": {}, "c": {}})
    result = await drop_databases(engine, ["a", "b", "c"], progress)

    assert result.success
    assert result.deleted == ["a", "c"]
    assert [e.database for e in result.errors] == ["b"]
    assert engine.databases == {}
    assert [e.item_name for e in progress.events] == ["a", "b", "c", None]
