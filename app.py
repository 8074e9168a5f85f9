import logging
import os
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()
from typing import Annotated, Optional

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse, JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from models import (
    STATUSES,
    BatchRequest,
    CreateTaskRequest,
    ScreenshotRequest,
    Status,
    UpdateTaskRequest,
)
from repository import TaskRepository
from screenshots import InvalidScreenshot, ScreenshotStore
from storage import JsonBucketStorage, bootstrap

ROOT = Path(__file__).parent
DATA_DIR = Path(os.getenv("HANDOFF_DATA_DIR", ROOT / "data"))
SCREENSHOTS_DIR = Path(os.getenv("HANDOFF_SCREENSHOTS_DIR", DATA_DIR / "screenshots"))
INDEX_HTML = ROOT / "index.html"

logger = logging.getLogger(__name__)

app = FastAPI(title="Handoff")


@app.on_event("startup")
def startup():
    bootstrap(DATA_DIR, SCREENSHOTS_DIR)


def get_screenshots() -> ScreenshotStore:
    return ScreenshotStore(SCREENSHOTS_DIR)


def get_repository(
    screenshots: Annotated[ScreenshotStore, Depends(get_screenshots)],
) -> TaskRepository:
    return TaskRepository(JsonBucketStorage(DATA_DIR), screenshots)


Repo = Annotated[TaskRepository, Depends(get_repository)]


@app.exception_handler(StarletteHTTPException)
def http_error(request: Request, exc: StarletteHTTPException):
    # Unknown paths and unsupported methods both read as "Not found".
    if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
        return JSONResponse({"error": "Not found"}, status_code=status.HTTP_404_NOT_FOUND)
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
def validation_error(request: Request, exc: RequestValidationError):
    detail = [
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
        for err in exc.errors()
    ]
    return JSONResponse(
        {"error": "Invalid request", "detail": detail},
        status_code=422,
    )


@app.exception_handler(InvalidScreenshot)
def invalid_screenshot(request: Request, exc: InvalidScreenshot):
    return JSONResponse({"error": "Invalid screenshot data"}, status_code=status.HTTP_400_BAD_REQUEST)


@app.exception_handler(Exception)
def internal_error(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse({"error": "Internal server error"}, status_code=500)


def not_found():
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")


@app.get("/api/tasks")
def list_tasks(repo: Repo, status: Optional[str] = None):
    bucket = Status(status) if status in {s.value for s in STATUSES} else None
    return repo.list(bucket)


@app.post("/api/tasks", status_code=201)
def create_task(req: CreateTaskRequest, repo: Repo):
    return repo.create(req.text, req.category, req.priority, req.screenshots)


@app.post("/api/tasks/batch", status_code=201)
def create_batch(req: BatchRequest, repo: Repo):
    return repo.create_batch(req.lines)


@app.post("/api/tasks/{task_id}/screenshots")
def attach_screenshot(task_id: str, req: ScreenshotRequest, repo: Repo):
    task = repo.attach_screenshot(task_id, req.data)
    if task is None:
        raise not_found()
    return task


@app.patch("/api/tasks/{task_id}")
def update_task(task_id: str, req: UpdateTaskRequest, repo: Repo):
    task = repo.update(task_id, req.model_dump(exclude_unset=True))
    if task is None:
        raise not_found()
    return task


@app.delete("/api/tasks/{task_id}", status_code=204)
def delete_task(task_id: str, repo: Repo):
    if not repo.delete(task_id):
        raise not_found()
    return Response(status_code=204)


@app.get("/screenshots/{filename:path}")
def screenshot(
    filename: str,
    screenshots: Annotated[ScreenshotStore, Depends(get_screenshots)],
):
    if ".." in filename or "/" in filename:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    if not screenshots.exists(filename):
        raise not_found()
    return FileResponse(screenshots.path_for(filename), media_type="image/png")


@app.get("/")
@app.get("/index.html")
def root():
    return FileResponse(INDEX_HTML, media_type="text/html")
