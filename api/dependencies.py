from fastapi import Depends, HTTPException

from doc_analyzer.src.workspace import Workspace
from orchestrator.workspace_manager import WorkspaceManager, get_workspace_manager


def get_workspace(
    session_id: str,
    manager: WorkspaceManager = Depends(get_workspace_manager),
) -> Workspace:
    workspace = manager.get(session_id)
    if workspace is None:
        raise HTTPException(404, "Session not found")
    return workspace
