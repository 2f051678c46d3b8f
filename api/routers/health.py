from fastapi import APIRouter, Depends

from orchestrator.workspace_manager import WorkspaceManager, get_workspace_manager

router = APIRouter()


@router.get("")
async def health(manager: WorkspaceManager = Depends(get_workspace_manager)):
    return {
        "status": "ok",
        "sessions": len(manager.cache),
        "api_key_configured": manager.api_key_configured(),
    }
