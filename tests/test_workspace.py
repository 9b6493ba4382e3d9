import pytest

from conftest import FakeEngine
from core.exceptions import ExternalProcessError
from db.workspace import WorkspaceManager


@pytest.mark.asyncio
async def test_recreate_replaces_existing(engine: FakeEngine):
    engine.databases["shop_temp"] = {"old": ["(1)"]}
    manager = WorkspaceManager(engine)

    await manager.recreate("shop_temp")

    assert engine.databases["shop_temp"] == {}
    assert [c[0] for c in engine.calls] == ["exists", "drop", "create"]


@pytest.mark.asyncio
async def test_recreate_creates_when_absent(engine: FakeEngine):
    await WorkspaceManager(engine).recreate("shop_temp")
    assert [c[0] for c in engine.calls] == ["exists", "create"]


@pytest.mark.asyncio
async def test_create_collision_raises(engine: FakeEngine):
    engine.databases["shop_temp"] = {}
    with pytest.raises(ExternalProcessError):
        await WorkspaceManager(engine).create("shop_temp")


@pytest.mark.asyncio
async def test_drop_missing_raises(engine: FakeEngine):
    with pytest.raises(ExternalProcessError):
        await WorkspaceManager(engine).drop("nothing")


@pytest.mark.asyncio
async def test_scope_drops_on_error(engine: FakeEngine):
    manager = WorkspaceManager(engine)
    with pytest.raises(RuntimeError, match="boom"):
        async with manager.workspace("shop_temp"):
            assert await manager.exists("shop_temp")
            raise RuntimeError("boom")
    assert not await manager.exists("shop_temp")


@pytest.mark.asyncio
async def test_scope_does_not_drop_twice(engine: FakeEngine):
    manager = WorkspaceManager(engine)
    async with manager.workspace("shop_temp") as ws:
        await ws.drop()
    assert ws.dropped
    assert [c for c in engine.calls if c[0] == "drop"] == [("drop", "shop_temp")]


@pytest.mark.asyncio
async def test_scope_keeps_primary_error_when_cleanup_fails(engine: FakeEngine):
    engine.fail("drop", "shop_temp")
    manager = WorkspaceManager(engine)
    with pytest.raises(RuntimeError, match="primary"):
        async with manager.workspace("shop_temp") as ws:
            raise RuntimeError("primary")
    assert not ws.dropped


@pytest.mark.asyncio
async def test_discard_swallows_errors(engine: FakeEngine):
    engine.fail("exists", "shop_temp")
    assert await WorkspaceManager(engine).discard("shop_temp") is False
