from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from doc_analyzer.exception.custom_exception import DocumentAnalyzerException
from doc_analyzer.logger import GLOBAL_LOGGER as log
from orchestrator.workspace_manager import WorkspaceManager, get_workspace_manager

router = APIRouter()


class ApiKeyRequest(BaseModel):
    api_key: str


class ApiKeyStatus(BaseModel):
    configured: bool


@router.get("/credentials/api-key", response_model=ApiKeyStatus)
async def api_key_status(manager: WorkspaceManager = Depends(get_workspace_manager)):
    # never echo the key itself
    return ApiKeyStatus(configured=manager.api_key_configured())


@router.put("/credentials/api-key", response_model=ApiKeyStatus)
async def set_api_key(req: ApiKeyRequest, manager: WorkspaceManager = Depends(get_workspace_manager)):
    """
    Store the key and apply it to every open session.
    The key is not validated against the provider.
    """
    try:
        await manager.set_api_key(req.api_key)
    except ValueError:
        raise HTTPException(400, "api_key required")
    except DocumentAnalyzerException as e:
        log.error("Failed to apply API key | error=%s", str(e))
        raise HTTPException(500, "Failed to apply API key")
    return ApiKeyStatus(configured=True)


@router.delete("/credentials/api-key")
async def clear_api_key(manager: WorkspaceManager = Depends(get_workspace_manager)):
    # open sessions lose their models unless OPENAI_API_KEY is set
    return {"deleted": await manager.clear_api_key()}
