from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from doc_analyzer.exception.custom_exception import ClientNotInitializedError, DocumentAnalyzerException
from doc_analyzer.logger import GLOBAL_LOGGER as log
from doc_analyzer.utils.file_io import format_file_size
from orchestrator.workspace_manager import WorkspaceManager, get_workspace_manager

router = APIRouter()

UPLOAD_FAILED_MESSAGE = "Failed to upload and process files. Please try again."


@router.post("/upload")
async def upload_files(
    files: list[UploadFile] = File(...),
    session_id: str | None = Form(None),
    manager: WorkspaceManager = Depends(get_workspace_manager),
):
    """
    Upload endpoint:
      - Uses the given session or creates a new one
      - Skips files with an unsupported type or above the size cap
      - Extracts, chunks and indexes the rest into the session's store
    """
    if not files:
        raise HTTPException(400, "No files uploaded")

    if not session_id and not manager.api_key_configured():
        raise HTTPException(400, "OpenAI API key not configured")

    if session_id:
        workspace = manager.get(session_id)
        if workspace is None:
            raise HTTPException(404, "Session not found")
        log.info("Uploading to existing session | session_id=%s", session_id)
    else:
        workspace = await manager.create()
        log.info("Uploading created new session | session_id=%s", workspace.session_id)

    if not workspace.has_api_key:
        raise HTTPException(400, "OpenAI API key not configured")

    try:
        result = await workspace.add_files(files)
    except ClientNotInitializedError:
        raise HTTPException(400, "OpenAI API key not configured")
    except DocumentAnalyzerException as e:
        log.error("Upload failed | session_id=%s | error=%s", workspace.session_id, str(e))
        raise HTTPException(500, UPLOAD_FAILED_MESSAGE)

    log.info(
        "Upload completed | session_id=%s | files=%d | chunks=%d",
        workspace.session_id,
        len(result.accepted),
        len(result.chunks),
    )
    return {
        "session_id": workspace.session_id,
        "indexed": len(result.accepted) > 0,
        "files": [
            {
                "id": f.id,
                "name": f.name,
                "size": f.size,
                "size_display": format_file_size(f.size),
                "mime_type": f.mime_type,
            }
            for f in result.accepted
        ],
        "rejected": result.rejected,
        "chunks": len(result.chunks),
    }
