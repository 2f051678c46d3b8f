from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import get_workspace
from doc_analyzer.exception.custom_exception import ClientNotInitializedError
from doc_analyzer.src.workspace import Workspace

router = APIRouter()


@router.get("/search/{session_id}")
async def search(
    query: str = Query(..., min_length=1),
    k: int = Query(4, ge=1, le=20),
    workspace: Workspace = Depends(get_workspace),
):
    """Retrieval only: the k chunks closest to the query, most similar first."""
    try:
        chunks = await workspace.chat_service.retrieve(query, k=k)
    except ClientNotInitializedError as e:
        raise HTTPException(400, e.error_message)
    return [c.model_dump() for c in chunks]
