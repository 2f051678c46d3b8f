"""Unit tests for the session registry."""

import pytest

from doc_analyzer.exception.custom_exception import DocumentAnalyzerException
from orchestrator.workspace_manager import WorkspaceManager


@pytest.fixture
def manager(workspace_manager):
    return workspace_manager


@pytest.mark.asyncio
async def test_create_and_get(manager):
    workspace = await manager.create()

    assert manager.get(workspace.session_id) is workspace
    assert manager.get("missing") is None
    assert manager.list() == [workspace]
    assert not workspace.has_api_key


@pytest.mark.asyncio
async def test_delete(manager):
    workspace = await manager.create()

    assert manager.delete(workspace.session_id)
    assert manager.get(workspace.session_id) is None
    assert not manager.delete(workspace.session_id)


@pytest.mark.asyncio
async def test_stored_key_applies_to_new_workspaces(manager, credential_store):
    credential_store.set("sk-stored")

    workspace = await manager.create()

    assert manager.api_key_configured()
    assert workspace.has_api_key


@pytest.mark.asyncio
async def test_env_key_is_fallback(manager, monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")

    assert manager.current_api_key() == "sk-env"


@pytest.mark.asyncio
async def test_set_api_key_reaches_live_workspaces(manager, credential_store):
    first = await manager.create()
    second = await manager.create()

    await manager.set_api_key("  sk-new  ")

    assert credential_store.get() == "sk-new"
    assert first.has_api_key and second.has_api_key


@pytest.mark.asyncio
async def test_set_blank_key_is_rejected(manager):
    with pytest.raises(ValueError):
        await manager.set_api_key("   ")


@pytest.mark.asyncio
async def test_clear_api_key(manager, credential_store):
    credential_store.set("sk-stored")

    assert await manager.clear_api_key()
    assert not manager.api_key_configured()
    assert not await manager.clear_api_key()


def test_cache_limits_come_from_config(test_config, credential_store, fake_loader):
    test_config["sessions"]["max_sessions"] = 2
    mgr = WorkspaceManager(
        config=test_config, credential_store=credential_store, model_loader_factory=fake_loader
    )

    assert mgr.cache.maxsize == 2
    assert mgr.cache.ttl == test_config["sessions"]["ttl_seconds"]


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def timed_manager(test_config, credential_store, fake_loader, clock, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setattr("doc_analyzer.utils.model_loader.load_dotenv", lambda *a, **kw: False)
    test_config["sessions"]["ttl_seconds"] = 3600
    mgr = WorkspaceManager(
        config=test_config,
        credential_store=credential_store,
        model_loader_factory=fake_loader,
        timer=clock,
    )
    yield mgr
    for workspace in mgr.list():
        workspace.close()


@pytest.mark.asyncio
async def test_access_renews_idle_ttl(timed_manager, clock):
    workspace = await timed_manager.create()

    clock.now = 3000
    assert timed_manager.get(workspace.session_id) is workspace

    clock.now = 3700
    assert timed_manager.get(workspace.session_id) is workspace


@pytest.mark.asyncio
async def test_idle_workspace_expires_and_is_closed(timed_manager, clock):
    workspace = await timed_manager.create()
    temp_dir = workspace.chat_service.ingestor.temp_dir
    assert temp_dir.exists()

    clock.now = 3601

    assert timed_manager.get(workspace.session_id) is None
    assert timed_manager.list() == []
    assert not temp_dir.exists()


@pytest.mark.asyncio
async def test_evicted_workspace_is_closed(test_config, credential_store, fake_loader, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setattr("doc_analyzer.utils.model_loader.load_dotenv", lambda *a, **kw: False)
    test_config["sessions"]["max_sessions"] = 1
    mgr = WorkspaceManager(
        config=test_config, credential_store=credential_store, model_loader_factory=fake_loader
    )

    first = await mgr.create()
    first_dir = first.chat_service.ingestor.temp_dir
    second = await mgr.create()

    assert mgr.get(first.session_id) is None
    assert mgr.get(second.session_id) is second
    assert not first_dir.exists()
    mgr.delete(second.session_id)


@pytest.mark.asyncio
async def test_clear_api_key_detaches_live_workspaces(manager, make_upload):
    await manager.set_api_key("sk-test")
    workspace = await manager.create()
    await workspace.add_files([make_upload("a.txt", "alpha")])

    await manager.clear_api_key()

    assert not workspace.has_api_key
    assert not workspace.is_ready()
    assert workspace.list_files()


@pytest.mark.asyncio
async def test_clear_api_key_falls_back_to_env(manager, monkeypatch):
    await manager.set_api_key("sk-stored")
    workspace = await manager.create()
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")

    await manager.clear_api_key()

    assert workspace.has_api_key


@pytest.mark.asyncio
async def test_failed_key_change_is_not_stored(manager, credential_store, make_upload, monkeypatch):
    await manager.set_api_key("sk-good")
    workspace = await manager.create()
    await workspace.add_files([make_upload("a.txt", "alpha")])

    async def failing(_key):
        raise DocumentAnalyzerException("Failed to re-index documents with the new API key")

    monkeypatch.setattr(workspace.chat_service, "set_api_key", failing)

    with pytest.raises(DocumentAnalyzerException):
        await manager.set_api_key("sk-bad")

    assert credential_store.get() == "sk-good"
