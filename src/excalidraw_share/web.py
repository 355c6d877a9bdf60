"""FastAPI application exposing the drawing upload, view and admin APIs."""
from __future__ import annotations

import json
import logging
import secrets
import uuid
from pathlib import Path
from typing import Any, Dict

from fastapi import Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse

from .errors import AppError, BadRequestError, NotFoundError, PayloadTooLargeError, UnauthorizedError
from .models import (
    ListResponse,
    PublicDrawingMeta,
    PublicListResponse,
    UploadResponse,
    validate_drawing,
)
from .settings import Settings, load_settings
from .storage import DrawingStorage, FileSystemStorage, sanitize_id

logger = logging.getLogger(__name__)


def generate_drawing_id(storage: DrawingStorage) -> str:
    """Short random id; falls back to a longer one if the short one is taken."""
    candidate = uuid.uuid4().hex[:8]
    if storage.exists(candidate):
        return uuid.uuid4().hex[:12]
    return candidate


def _validate_requested_id(drawing_id: Any) -> str:
    if not isinstance(drawing_id, str) or not drawing_id or sanitize_id(drawing_id) != drawing_id:
        raise BadRequestError(
            "Invalid drawing id: only letters, digits, '-' and '_' are allowed."
        )
    return drawing_id


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def _error_response(exc: AppError) -> JSONResponse:
    message = exc.message
    if exc.status_code >= 500:
        logger.error("%s: %s", exc.__class__.__name__, exc.message)
        message = "Internal server error"
    return JSONResponse(status_code=exc.status_code, content={"error": message})


def _mount_frontend(app: FastAPI, frontend_dir: Path) -> None:
    root = frontend_dir.resolve()
    index_file = root / "index.html"

    @app.get("/{full_path:path}", include_in_schema=False)
    def serve_frontend(full_path: str):
        if full_path.startswith("api/"):
            raise NotFoundError("Not found")
        candidate = (root / full_path).resolve()
        if candidate.is_relative_to(root) and candidate.is_file():
            return FileResponse(candidate)
        if index_file.is_file():
            return FileResponse(index_file)
        raise NotFoundError("Not found")


def create_app(
    settings: Settings | None = None,
    storage: DrawingStorage | None = None,
    config_path: str | Path | None = None,
) -> FastAPI:
    settings = settings or load_settings(config_path)
    storage = storage or FileSystemStorage(settings.data_dir)
    app = FastAPI(title="excalidraw-share", version="0.1.0")

    app.add_middleware(GZipMiddleware, minimum_size=1024)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):  # noqa: ARG001 - FastAPI signature
        return _error_response(exc)

    def require_api_key(request: Request):
        header = request.headers.get("Authorization") or ""
        scheme, _, token = header.partition(" ")
        if scheme != "Bearer" or not token:
            logger.warning("Missing or malformed Authorization header")
            raise UnauthorizedError()
        if not secrets.compare_digest(token.encode("utf-8"), settings.api_key.encode("utf-8")):
            logger.warning("Invalid API key attempt")
            raise UnauthorizedError()

    async def read_upload_document(request: Request) -> Dict[str, Any]:
        limit = settings.max_upload_bytes
        declared = request.headers.get("Content-Length")
        if declared and declared.isdigit() and int(declared) > limit:
            raise PayloadTooLargeError()
        body = bytearray()
        async for chunk in request.stream():
            body.extend(chunk)
            if len(body) > limit:
                raise PayloadTooLargeError()
        try:
            document = json.loads(body, parse_constant=_reject_constant)
        except ValueError as exc:
            raise BadRequestError(f"Invalid JSON: {exc}") from exc
        if not isinstance(document, dict):
            raise BadRequestError("Invalid document: expected a JSON object.")
        return document

    auth = Depends(require_api_key)

    @app.get("/api/health", response_class=PlainTextResponse)
    def health():
        return "ok"

    @app.get("/api/public/drawings", response_model=PublicListResponse)
    def list_drawings_public():
        drawings = [PublicDrawingMeta.from_meta(meta) for meta in storage.list()]
        return PublicListResponse(drawings=drawings)

    @app.get("/api/view/{drawing_id}")
    def get_drawing(drawing_id: str):
        return storage.load(drawing_id)

    @app.post(
        "/api/upload",
        response_model=UploadResponse,
        status_code=201,
        dependencies=[auth],
    )
    def upload_drawing(response: Response, payload: Dict[str, Any] = Depends(read_upload_document)):
        document = dict(payload)
        requested_id = document.pop("id", None)
        source_path = document.pop("source_path", None)
        validate_drawing(document)

        is_update = requested_id is not None
        if is_update:
            drawing_id = _validate_requested_id(requested_id)
        else:
            drawing_id = generate_drawing_id(storage)

        storage.save(drawing_id, document)

        if is_update:
            response.status_code = 200
            logger.info("Drawing updated id=%s source_path=%s", drawing_id, source_path)
        else:
            logger.info("Drawing uploaded id=%s source_path=%s", drawing_id, source_path)
        return UploadResponse(id=drawing_id, url=settings.share_url(drawing_id))

    @app.get("/api/drawings", response_model=ListResponse, dependencies=[auth])
    def list_drawings():
        return ListResponse(drawings=storage.list())

    @app.delete("/api/drawings/{drawing_id}", status_code=204, dependencies=[auth])
    def delete_drawing(drawing_id: str):
        storage.delete(drawing_id)
        logger.info("Drawing deleted id=%s", drawing_id)
        return Response(status_code=204)

    if settings.frontend_dir.is_dir():
        _mount_frontend(app, settings.frontend_dir)

    return app
