import uuid
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.admin_routes import router as admin_router
from .api.chat_routes import router as chat_router
from .api.model_routes import router as model_router
from .api.session_routes import router as session_router
from .errors import ServiceError, ValidationError
from .log_sanitizer import sanitize_headers_for_log
from .logging_config import logger
from .settings import settings


async def handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:
    payload = exc.to_response()
    if exc.status_code >= 500:
        logger.error(
            "%s %s failed with %s: %s",
            request.method,
            request.url.path,
            exc.error,
            exc.message,
        )
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(payload))


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Malformed bodies and query strings map onto the ValidationError shape
    (400) instead of FastAPI's default 422.
    """
    err = ValidationError(
        "Invalid request",
        details={"errors": jsonable_encoder(exc.errors())},
    )
    return await handle_service_error(request, err)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """
    Global fallback: structured 500 with an error_id that can be matched
    against the logged traceback.
    """
    error_id = uuid.uuid4().hex
    logger.exception(
        "Unhandled error %s %s (error_id=%s)",
        request.method,
        request.url.path,
        error_id,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={
            "error_code": "internal_error",
            "message": "Internal server error, please try again later",
            "error_id": error_id,
        },
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    startup: create tables (SQLite) or run Alembic migrations (PostgreSQL).
    """
    from cyberguard.db.migration_runner import init_database

    init_database()
    yield


def _split_csv(raw: str) -> list[str]:
    if raw.strip() == "*":
        return ["*"]
    return [item.strip() for item in raw.split(",") if item.strip()]


def create_app() -> FastAPI:
    docs_url = "/docs" if settings.enable_api_docs else None
    redoc_url = "/redoc" if settings.enable_api_docs else None
    openapi_url = "/openapi.json" if settings.enable_api_docs else None

    app = FastAPI(
        title="CyberGuard Chat",
        version="0.1.0",
        docs_url=docs_url,
        redoc_url=redoc_url,
        openapi_url=openapi_url,
        lifespan=lifespan,
    )
    app.add_exception_handler(ServiceError, handle_service_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    if not settings.enable_api_docs:
        logger.info(
            "API docs routes are disabled (environment=%s); set ENABLE_API_DOCS=true to enable.",
            settings.environment,
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_split_csv(settings.cors_allow_origins),
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=_split_csv(settings.cors_allow_methods),
        allow_headers=_split_csv(settings.cors_allow_headers),
    )

    api = APIRouter(prefix=settings.api_prefix.rstrip("/"))
    api.include_router(session_router)
    api.include_router(chat_router)
    api.include_router(admin_router)
    api.include_router(model_router)
    app.include_router(api)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """
        Request/response logging; Authorization, cookies and other
        credential-like headers are masked.
        """
        client_host = request.client.host if request.client else "-"
        headers_for_log = sanitize_headers_for_log(request.headers)

        logger.info(
            "HTTP %s %s from %s, headers=%s",
            request.method,
            request.url.path,
            client_host,
            headers_for_log,
        )
        try:
            response = await call_next(request)
        except Exception as exc:
            response = await handle_unexpected_error(request, exc)
        logger.info(
            "HTTP %s %s -> %s",
            request.method,
            request.url.path,
            response.status_code,
        )
        return response

    return app


__all__ = ["create_app", "handle_unexpected_error", "lifespan"]
