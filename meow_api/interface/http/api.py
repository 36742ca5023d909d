"""HTTP API for the cat pic store.

Why: Consumable API without business logic; pure delegation to
     ManageCatPics plus status/message mapping.
"""

import mimetypes
from contextlib import asynccontextmanager
from typing import Any
from urllib.parse import quote

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from meow_api.application.dtos import UploadedFile
from meow_api.application.use_cases.manage_cat_pics import ManageCatPics
from meow_api.config.compose import Container, build_container
from meow_api.domain.errors import DomainError, NoFileProvided, NotFound, StorageFault
from meow_api.log_config import get_logger

UPLOAD_FIELD = "catPic"

NO_FILE_UPLOADED = "No file uploaded"
FILE_NOT_FOUND = "File not found"

log = get_logger(__name__)


# Pydantic models for response documentation/validation
class CatPicReceiptModel(BaseModel):
    """Response model for create/update."""

    id: str
    message: str


class CatPicModel(BaseModel):
    id: str


class MessageModel(BaseModel):
    message: str


class ErrorModel(BaseModel):
    error: str


_UPLOAD_BODY: dict[str, Any] = {
    "requestBody": {
        "content": {
            "multipart/form-data": {
                "schema": {
                    "type": "object",
                    "properties": {
                        UPLOAD_FIELD: {
                            "type": "string",
                            "format": "binary",
                            "description": "The cat picture to upload.",
                        }
                    },
                    "required": [UPLOAD_FIELD],
                }
            }
        },
        "required": True,
    }
}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _map_error(
    err: DomainError | None,
    table: dict[type[DomainError], tuple[int, str]],
    fallback: str,
) -> JSONResponse:
    """Map one domain error to a JSON error response via ``table``."""
    for err_type, (status_code, message) in table.items():
        if isinstance(err, err_type):
            return _error(status_code, message)
    return _error(500, fallback)


def get_container(request: Request) -> Container:
    container = request.app.state.container
    if container is None:
        raise StarletteHTTPException(status_code=503, detail="Service not initialized")
    return container


def get_cat_pics(container: Container = Depends(get_container)) -> ManageCatPics:
    return container.get_cat_pics_use_case()


async def read_upload(request: Request) -> UploadedFile | None:
    """Decode the ``catPic`` multipart field, or None if it was not sent."""
    async with request.form() as form:
        field = form.get(UPLOAD_FIELD)
        if not isinstance(field, UploadFile):
            return None
        content = await field.read()
        return UploadedFile(filename=field.filename or "", content=content)


def content_disposition(filename: str) -> str:
    quoted = quote(filename)
    if quoted != filename:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{filename}"'


router = APIRouter(prefix="/api/cats", tags=["cats"])


@router.post(
    "",
    status_code=201,
    response_model=CatPicReceiptModel,
    responses={400: {"model": ErrorModel}, 500: {"model": ErrorModel}},
    openapi_extra=_UPLOAD_BODY,
    summary="Uploads a cat pic.",
)
async def create_cat_pic(request: Request, cat_pics: ManageCatPics = Depends(get_cat_pics)):
    """Once uploaded, the cat pic can be downloaded at /api/cats/{id}."""
    upload = await read_upload(request)
    result = await run_in_threadpool(cat_pics.create, upload)
    if not result.ok:
        return _map_error(
            result.error,
            {NoFileProvided: (400, NO_FILE_UPLOADED), StorageFault: (500, "Error uploading file")},
            "Error uploading file",
        )
    assert result.value is not None
    return CatPicReceiptModel(id=result.value.id, message=result.value.message)


@router.get(
    "",
    response_model=list[CatPicModel],
    responses={500: {"model": ErrorModel}},
    summary="Fetches a list of the uploaded cat pics.",
)
async def list_cat_pics(cat_pics: ManageCatPics = Depends(get_cat_pics)):
    result = await run_in_threadpool(cat_pics.list_all)
    if not result.ok:
        return _error(500, "Error reading directory")
    assert result.value is not None
    return [CatPicModel(id=cat.id) for cat in result.value]


@router.get(
    "/{cat_id}",
    response_class=Response,
    responses={
        200: {"content": {"application/octet-stream": {}}, "description": "The cat pic file."},
        404: {"model": ErrorModel},
        500: {"model": ErrorModel},
    },
    summary="Fetches a particular cat image file by its ID.",
)
async def get_cat_pic(cat_id: str, cat_pics: ManageCatPics = Depends(get_cat_pics)):
    result = await run_in_threadpool(cat_pics.read, cat_id)
    if not result.ok:
        return _map_error(
            result.error,
            {NotFound: (404, FILE_NOT_FOUND), StorageFault: (500, "Error retrieving file")},
            "Error retrieving file",
        )
    assert result.value is not None
    media_type = mimetypes.guess_type(result.value.id)[0] or "application/octet-stream"
    return Response(
        content=result.value.content,
        media_type=media_type,
        headers={"Content-Disposition": content_disposition(result.value.id)},
    )


@router.put(
    "/{cat_id}",
    response_model=CatPicReceiptModel,
    responses={
        400: {"model": ErrorModel},
        404: {"model": ErrorModel},
        500: {"model": ErrorModel},
    },
    openapi_extra=_UPLOAD_BODY,
    summary="Updates a previously uploaded cat pic.",
)
async def update_cat_pic(
    cat_id: str, request: Request, cat_pics: ManageCatPics = Depends(get_cat_pics)
):
    """The updated pic is stored under a new id, returned in the response."""
    upload = await read_upload(request)
    result = await run_in_threadpool(cat_pics.update, cat_id, upload)
    if not result.ok:
        return _map_error(
            result.error,
            {
                NotFound: (404, FILE_NOT_FOUND),
                NoFileProvided: (400, NO_FILE_UPLOADED),
                StorageFault: (500, "Error updating file"),
            },
            "Error updating file",
        )
    assert result.value is not None
    return CatPicReceiptModel(id=result.value.id, message=result.value.message)


@router.delete(
    "/{cat_id}",
    response_model=MessageModel,
    responses={404: {"model": ErrorModel}, 500: {"model": ErrorModel}},
    summary="Deletes a cat pic.",
)
async def delete_cat_pic(cat_id: str, container: Container = Depends(get_container)):
    """Deleting an unknown id answers 500 unless DELETE_MISSING_AS_404 is set."""
    cat_pics = container.get_cat_pics_use_case()
    result = await run_in_threadpool(cat_pics.delete, cat_id)
    if not result.ok:
        if isinstance(result.error, NotFound) and container.settings.delete_missing_as_404:
            return _error(404, FILE_NOT_FOUND)
        return _error(500, "Error deleting file")
    assert result.value is not None
    return MessageModel(message=result.value)


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code, content={"error": str(exc.detail)}, headers=exc.headers
    )


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    log.exception("Unhandled error", path=request.url.path, method=request.method)
    return _error(500, "Internal server error")


def create_app(container: Container | None = None) -> FastAPI:
    """Create the FastAPI app.

    Args:
        container: Wired dependencies (default: built from environment on startup)

    Returns:
        FastAPI app with the cat pic routes, health check and docs at /api-docs
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.container is None:
            app.state.container = build_container()
        # create the upload directory once, before the first request
        app.state.container.get_blob_store()
        log.info("Cat pic store ready", upload_dir=app.state.container.settings.upload_dir)
        yield

    app = FastAPI(
        title="Meow API",
        version="1.0.0",
        description="Stores and serves cat pics.",
        docs_url="/api-docs",
        lifespan=lifespan,
    )
    app.state.container = container
    app.include_router(router)
    app.add_exception_handler(StarletteHTTPException, _http_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_error)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "service": "meow-api"}

    return app


app = create_app()
