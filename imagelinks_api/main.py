import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Optional

from fastapi import Body, Depends, FastAPI, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse, Response

from imagelinks_api import __version__
from imagelinks_api.core.store import close_key_value_store, get_key_value_store
from imagelinks_api.models.schemas import (
    ErrorResponse,
    HealthResponse,
    ImageInfo,
    ImageInfoResponse,
    LinkDocument,
    LinkListResponse,
    LoginRequest,
    OperationResponse,
    RootResponse,
    TagCount,
    TagsResponse,
)
from imagelinks_api.services.auth import SessionManager, get_session_manager, require_admin
from imagelinks_api.services.catalog import CatalogService, get_catalog_service, get_prober
from imagelinks_catalog.exceptions import (
    CatalogError,
    EmptyCatalogError,
    InvalidFormatError,
    NotFoundError,
    StorageUnavailableError,
    UnauthorizedError,
)
from imagelinks_catalog.interfaces import ProberInterface
from imagelinks_catalog.queries import describe
from imagelinks_core.config import Settings, get_settings
from imagelinks_core.constants import SESSION_COOKIE_NAME

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

SERVICE_NAME = "Random Image API"

NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}

ERROR_STATUS = {
    InvalidFormatError: status.HTTP_400_BAD_REQUEST,
    UnauthorizedError: status.HTTP_401_UNAUTHORIZED,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    EmptyCatalogError: status.HTTP_404_NOT_FOUND,
    StorageUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    #Startup
    logger.info("Starting imagelinks API...")
    try:
        _ = get_key_value_store()
        logger.info("Key-value store ready")
    except Exception as e:
        logger.error(f"Failed to open key-value store on startup: {e}")

    yield

    #Shutdown
    logger.info("Shutting down imagelinks API...")
    close_key_value_store()
    logger.info("Cleanup complete")


# Create FastAPI application
app = FastAPI(
    title="imagelinks API",
    description=(
        "Random image redirect service backed by a tagged link catalog. "
        "Administrative routes manage the catalog and prune dead links."
    ),
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(status_code: int, error: str, message: str, detail: Optional[str] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, message=message, detail=detail).model_dump(),
    )


@app.exception_handler(CatalogError)
async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    status_code = next(
        (code for exc_type, code in ERROR_STATUS.items() if isinstance(exc, exc_type)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    if status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc}")
        return _error_response(status_code, type(exc).__name__, "Storage error.", str(exc))
    return _error_response(status_code, type(exc).__name__, str(exc))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        "InvalidFormatError",
        "Invalid input format.",
        str(exc.errors()),
    )


# System
@app.get("/", response_model=RootResponse, tags=["System"], summary="API root")
def root(service: CatalogService = Depends(get_catalog_service)) -> RootResponse:
    return RootResponse(name=SERVICE_NAME, version=__version__, total_hits=service.total_hits())


@app.get("/health", response_model=HealthResponse, tags=["System"], summary="Health check endpoint")
def health_check(service: CatalogService = Depends(get_catalog_service)) -> HealthResponse:
    store_connected = False
    try:
        service.total_hits()
        store_connected = True
    except StorageUnavailableError as e:
        logger.warning(f"Health check could not reach the store: {e}")

    return HealthResponse(
        status="healthy" if store_connected else "degraded",
        version=__version__,
        store_connected=store_connected,
    )


@app.get(
    "/no-image",
    response_model=ErrorResponse,
    status_code=status.HTTP_404_NOT_FOUND,
    tags=["Images"],
    summary="Terminal page when the catalog is empty",
)
def no_image() -> JSONResponse:
    return _error_response(status.HTTP_404_NOT_FOUND, "EmptyCatalogError", "No image available.")


# Public API
@app.get(
    "/api",
    status_code=status.HTTP_302_FOUND,
    response_class=RedirectResponse,
    tags=["Images"],
    summary="Redirect to a random image",
    description="Optional `tag` and `ratio` (W:H) filters. Ratio falls back when nothing matches.",
)
def random_redirect(
    request: Request,
    tag: Optional[str] = Query(default=None),
    ratio: Optional[str] = Query(default=None, examples=["16:9"]),
    service: CatalogService = Depends(get_catalog_service),
) -> RedirectResponse:
    try:
        record = service.random_for_redirect(tag=tag, ratio=ratio)
    except EmptyCatalogError:
        return RedirectResponse(str(request.url_for("no_image")), status_code=status.HTTP_302_FOUND)

    headers = {
        **NO_CACHE_HEADERS,
        "X-Image-Tag": record.tag,
        "X-Image-Dimensions": record.dimensions_label,
    }
    return RedirectResponse(record.url, status_code=status.HTTP_302_FOUND, headers=headers)


@app.get("/api/info", response_model=ImageInfoResponse, tags=["Images"], summary="Random image as JSON")
def image_info(
    tag: Optional[str] = Query(default=None),
    ratio: Optional[str] = Query(default=None),
    service: CatalogService = Depends(get_catalog_service),
) -> ImageInfoResponse:
    record = service.random_info(tag=tag, ratio=ratio)
    return ImageInfoResponse(image=ImageInfo.model_validate(describe(record)))


@app.get("/api/tags", response_model=TagsResponse, tags=["Images"], summary="Tag statistics")
def list_tags(service: CatalogService = Depends(get_catalog_service)) -> TagsResponse:
    counts = service.tags()
    return TagsResponse(
        total_links=sum(count for _, count in counts),
        tags=[TagCount(tag=tag, count=count) for tag, count in counts],
    )


# Sessions
@app.post("/api/login", response_model=OperationResponse, tags=["Admin"], summary="Administrator login")
def login(
    credentials: LoginRequest,
    sessions: SessionManager = Depends(get_session_manager),
    config: Settings = Depends(get_settings),
) -> JSONResponse:
    token = sessions.login(credentials.username, credentials.password)

    response = JSONResponse(content=OperationResponse(message="Login successful").model_dump(exclude_none=True))
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=config.session_expiry_seconds,
        httponly=True,
        secure=config.cookie_secure,
        samesite="strict",
        path="/",
    )
    return response


@app.post("/api/logout", response_model=OperationResponse, tags=["Admin"], summary="End the session")
def logout(
    request: Request,
    sessions: SessionManager = Depends(get_session_manager),
    config: Settings = Depends(get_settings),
) -> JSONResponse:
    sessions.logout(request.cookies.get(SESSION_COOKIE_NAME))

    response = JSONResponse(content=OperationResponse(message="Logged out").model_dump(exclude_none=True))
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        httponly=True,
        secure=config.cookie_secure,
        samesite="strict",
        path="/",
    )
    return response


# Admin API
@app.post(
    "/api/upload",
    response_model=OperationResponse,
    response_model_exclude_none=True,
    tags=["Admin"],
    summary="Replace the whole catalog",
    dependencies=[Depends(require_admin)],
)
def upload_links(
    payload: Any = Body(...),
    service: CatalogService = Depends(get_catalog_service),
) -> OperationResponse:
    result = service.replace(payload)
    return OperationResponse(message=result.message, count=result.stored)


@app.post(
    "/api/append",
    response_model=OperationResponse,
    response_model_exclude_none=True,
    tags=["Admin"],
    summary="Append new links, skipping known URLs",
    dependencies=[Depends(require_admin)],
)
def append_links(
    payload: Any = Body(...),
    service: CatalogService = Depends(get_catalog_service),
) -> OperationResponse:
    result = service.append(payload)
    return OperationResponse(message=result.message, count=result.total)


@app.post(
    "/api/batch_delete",
    response_model=OperationResponse,
    response_model_exclude_none=True,
    tags=["Admin"],
    summary="Delete links by URL",
    dependencies=[Depends(require_admin)],
)
def batch_delete(
    payload: Any = Body(...),
    service: CatalogService = Depends(get_catalog_service),
) -> OperationResponse:
    urls = payload.get("urlsToDelete") if isinstance(payload, dict) else None
    result = service.delete(urls)
    return OperationResponse(message=result.message, count=result.remaining)


@app.get(
    "/api/list",
    response_model=LinkListResponse,
    tags=["Admin"],
    summary="All links with the total hit count",
    dependencies=[Depends(require_admin)],
)
def list_links(service: CatalogService = Depends(get_catalog_service)) -> LinkListResponse:
    records, hits = service.list_links()
    return LinkListResponse(
        links=[LinkDocument.model_validate(record.to_document()) for record in records],
        total_hits=hits,
    )


@app.post(
    "/api/maintenance",
    response_model=OperationResponse,
    response_model_exclude_none=True,
    tags=["Admin"],
    summary="Probe every link and drop the unreachable ones",
    dependencies=[Depends(require_admin)],
)
async def run_maintenance(
    service: CatalogService = Depends(get_catalog_service),
    prober: ProberInterface = Depends(get_prober),
) -> OperationResponse:
    result = await service.run_maintenance(prober)
    return OperationResponse(message=result.message, count=result.remaining)


@app.get(
    "/api/export",
    tags=["Admin"],
    summary="Download the catalog JSON",
    dependencies=[Depends(require_admin)],
)
def export_links(service: CatalogService = Depends(get_catalog_service)) -> Response:
    filename = f"image_links_backup_{datetime.now(timezone.utc).date().isoformat()}.json"
    return Response(
        content=service.export(),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "imagelinks_api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info",
    )
