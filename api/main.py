from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routers import (
    chat,
    credentials,
    data_upload,
    files,
    health,
    instructions,
    messages,
    search,
    session,
)
from doc_analyzer.exception.custom_exception import DocumentAnalyzerException
from doc_analyzer.logger import GLOBAL_LOGGER as log
from orchestrator.workspace_manager import workspace_manager


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info("Application startup initiated")
    yield
    for workspace in workspace_manager.list():
        workspace.close()
    log.info("Application shutdown")


app = FastAPI(title="Document Analyzer Backend", version="1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DocumentAnalyzerException)
async def document_analyzer_exception_handler(request: Request, exc: DocumentAnalyzerException):
    log.error("Unhandled application error | path=%s | error=%s", request.url.path, str(exc))
    return JSONResponse(status_code=500, content={"detail": "internal_error"})


# Router Registration
app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(credentials.router, tags=["credentials"])
app.include_router(session.router, tags=["session"])
app.include_router(data_upload.router, tags=["upload"])
app.include_router(files.router, tags=["files"])
app.include_router(instructions.router, tags=["instructions"])
app.include_router(chat.router, tags=["chat"])
app.include_router(messages.router, tags=["messages"])
app.include_router(search.router, tags=["search"])


@app.get("/")
async def root():
    return {"message": "Backend is running"}
