from typing import List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from doc_analyzer.logger import GLOBAL_LOGGER as log
from orchestrator.workspace_manager import WorkspaceManager, get_workspace_manager

router = APIRouter()


class SessionInfo(BaseModel):
    id: str
    created_at: str
    files: int
    messages: int
    ready: bool


def _session_info(workspace) -> SessionInfo:
    return SessionInfo(
        id=workspace.session_id,
        created_at=str(workspace.created_at),
        files=len(workspace.files),
        messages=len(workspace.conversation),
        ready=workspace.is_ready(),
    )


@router.get("/sessions", response_model=List[SessionInfo])
async def list_sessions(manager: WorkspaceManager = Depends(get_workspace_manager)):
    return [_session_info(w) for w in manager.list()]


@router.post("/sessions")
async def create_session(manager: WorkspaceManager = Depends(get_workspace_manager)):
    workspace = await manager.create()
    log.info("Created new session | session_id=%s", workspace.session_id)
    return {"session_id": workspace.session_id, "api_key_configured": workspace.has_api_key}


@router.delete("/sessions/{session_id}")
async def delete_session(session_id: str, manager: WorkspaceManager = Depends(get_workspace_manager)):
    if not manager.delete(session_id):
        raise HTTPException(404, "Session not found")
    log.info("Session deleted | session_id=%s", session_id)
    return {"deleted": True}
