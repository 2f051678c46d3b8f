from fastapi import APIRouter, Depends
from pydantic import BaseModel

from api.dependencies import get_workspace
from doc_analyzer.src.workspace import Workspace

router = APIRouter()


class Instructions(BaseModel):
    instructions: str


@router.get("/instructions/{session_id}", response_model=Instructions)
async def get_instructions(workspace: Workspace = Depends(get_workspace)):
    return Instructions(instructions=workspace.instructions)


@router.put("/instructions/{session_id}", response_model=Instructions)
async def update_instructions(req: Instructions, workspace: Workspace = Depends(get_workspace)):
    # takes effect from the next message on
    return Instructions(instructions=workspace.update_instructions(req.instructions))


@router.post("/instructions/{session_id}/reset", response_model=Instructions)
async def reset_instructions(workspace: Workspace = Depends(get_workspace)):
    return Instructions(instructions=workspace.reset_instructions())
