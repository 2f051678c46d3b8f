from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from doc_analyzer.exception.custom_exception import ClientNotInitializedError, NoDocumentsError
from doc_analyzer.logger import GLOBAL_LOGGER as log
from orchestrator.workspace_manager import WorkspaceManager, get_workspace_manager

router = APIRouter()


class ChatRequest(BaseModel):
    session_id: str
    message: str


class ChatResponse(BaseModel):
    answer: str
    message_id: str


@router.post("/chat", response_model=ChatResponse)
async def chat(req: ChatRequest, manager: WorkspaceManager = Depends(get_workspace_manager)):
    """
    Main chat endpoint.

    Pipeline:
      1. Validate session and message
      2. Embed the message and retrieve the top-k chunks
      3. Compose the prompt with the session instructions
      4. Call the chat model and record both turns
    A failing model call is answered with an apology message, not an error status.
    """
    session_id = req.session_id.strip()
    input_query = req.message.strip()

    if not session_id:
        raise HTTPException(400, "session_id required")
    if not input_query:
        raise HTTPException(400, "message required")

    log.info("Chat request received | session_id=%s", session_id)

    workspace = manager.get(session_id)
    if workspace is None:
        raise HTTPException(404, "Session not found")

    try:
        reply = await workspace.ask(input_query)
    except (ClientNotInitializedError, NoDocumentsError) as e:
        raise HTTPException(400, e.error_message)

    log.info("Chat completed | session_id=%s", session_id)
    return ChatResponse(answer=reply.content, message_id=reply.id)
