from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_workspace
from doc_analyzer.src.workspace import Workspace
from doc_analyzer.utils.file_io import format_file_size

router = APIRouter()


@router.get("/files/{session_id}")
async def list_files(workspace: Workspace = Depends(get_workspace)):
    return [
        {
            "id": f.id,
            "name": f.name,
            "size": f.size,
            "size_display": format_file_size(f.size),
            "mime_type": f.mime_type,
        }
        for f in workspace.list_files()
    ]


@router.delete("/files/{session_id}/{file_id}")
async def remove_file(file_id: str, workspace: Workspace = Depends(get_workspace)):
    if not workspace.remove_file(file_id):
        raise HTTPException(404, "File not found")
    return {"deleted": True, "remaining": len(workspace.files)}
