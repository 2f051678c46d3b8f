# orchestrator/workspace_manager.py
from __future__ import annotations

import os
from time import monotonic
from typing import List, Optional

from cachetools import TTLCache

from doc_analyzer.logger import GLOBAL_LOGGER as log
from doc_analyzer.src.workspace import Workspace
from doc_analyzer.utils.config_loader import load_config
from doc_analyzer.utils.credential_store import CredentialStore
from doc_analyzer.utils.model_loader import ApiKeyManager, ModelLoader


class WorkspaceCache(TTLCache):
    """TTLCache that closes a workspace when it expires or is evicted for space."""

    def expire(self, time=None):
        expired = super().expire(time)
        for session_id, workspace in expired or ():
            log.info("Workspace expired | session_id=%s", session_id)
            workspace.close()
        return expired

    def popitem(self):
        session_id, workspace = super().popitem()
        log.info("Workspace evicted | session_id=%s", session_id)
        workspace.close()
        return session_id, workspace


class WorkspaceManager:
    """
    Keeps a per-session cache of Workspace instances.

    Each Workspace:
      - Holds its own in-memory index, file list and conversation
      - Gets the current API key on creation (stored key first, then OPENAI_API_KEY)
    A workspace expires after the configured TTL without access; every get()
    renews it.
    """

    def __init__(
        self,
        config: Optional[dict] = None,
        credential_store: Optional[CredentialStore] = None,
        model_loader_factory=ModelLoader,
        timer=monotonic,
    ):
        self.config = config if config is not None else load_config()
        self.model_loader_factory = model_loader_factory

        sessions_cfg = self.config.get("sessions", {})
        self.cache: WorkspaceCache = WorkspaceCache(
            maxsize=sessions_cfg.get("max_sessions", 500),
            ttl=sessions_cfg.get("ttl_seconds", 3600),
            timer=timer,
        )

        cred_cfg = self.config.get("credentials", {})
        self.credential_store = credential_store or CredentialStore(
            path=os.getenv("DOC_ANALYZER_CREDENTIALS") or cred_cfg.get("path"),
            storage_key=cred_cfg.get("storage_key", "openai_api_key"),
        )

    def current_api_key(self) -> Optional[str]:
        return self.credential_store.get() or ApiKeyManager().get("OPENAI_API_KEY")

    def api_key_configured(self) -> bool:
        return self.current_api_key() is not None

    async def create(self) -> Workspace:
        workspace = Workspace(config=self.config, model_loader_factory=self.model_loader_factory)

        api_key = self.current_api_key()
        if api_key:
            await workspace.set_api_key(api_key)

        self.cache[workspace.session_id] = workspace
        log.info("Created new Workspace | session_id=%s", workspace.session_id)
        return workspace

    def get(self, session_id: str) -> Optional[Workspace]:
        self.cache.expire()
        workspace = self.cache.get(session_id)
        if workspace is not None:
            # re-store to restart the idle clock
            self.cache[session_id] = workspace
            log.debug("Reusing cached Workspace | session_id=%s", session_id)
        return workspace

    def delete(self, session_id: str) -> bool:
        workspace = self.cache.pop(session_id, None)
        if workspace is None:
            return False
        workspace.close()
        return True

    def list(self) -> List[Workspace]:
        self.cache.expire()
        return list(self.cache.values())

    async def set_api_key(self, api_key: str) -> str:
        """
        Hand the key to every live workspace, then persist it.
        A workspace that fails to re-index keeps its previous models and the
        key is not stored.
        """
        api_key = (api_key or "").strip()
        if not api_key:
            raise ValueError("API key must not be blank")

        for workspace in self.list():
            await workspace.set_api_key(api_key)

        self.credential_store.set(api_key)
        log.info("API key updated | workspaces=%d", len(self.cache))
        return api_key

    async def clear_api_key(self) -> bool:
        """
        Remove the stored key. Live workspaces fall back to OPENAI_API_KEY when
        it is set, otherwise they drop their models until a new key arrives.
        """
        removed = self.credential_store.clear()

        fallback = self.current_api_key()
        for workspace in self.list():
            if fallback:
                await workspace.set_api_key(fallback)
            else:
                workspace.clear_api_key()

        log.info("API key cleared | removed=%s | env_fallback=%s", removed, fallback is not None)
        return removed


workspace_manager = WorkspaceManager()


def get_workspace_manager() -> WorkspaceManager:
    return workspace_manager
