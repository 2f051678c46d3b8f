from fastapi import APIRouter, Depends

from api.dependencies import get_workspace
from doc_analyzer.src.workspace import Workspace

router = APIRouter()


@router.get("/messages/{session_id}")
async def get_messages(workspace: Workspace = Depends(get_workspace)):
    return [
        {"id": m.id, "role": m.role, "content": m.content, "created_at": str(m.timestamp)}
        for m in workspace.conversation.messages
    ]
