import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from renova.api.errors import ApiError
from renova.api.routes import admin, health, projects, purchases, session, tools, workspace
from renova.db import dispose_engine
from renova.logging import configure_logging

configure_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("app_startup")
    yield
    await dispose_engine()
    logger.info("app_shutdown")


app = FastAPI(
    title="Renova IA API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url=None,
    lifespan=lifespan,
)


def _with_request_id(request: Request, response: JSONResponse) -> JSONResponse:
    response.headers["X-Request-ID"] = getattr(
        request.state, "request_id", request.headers.get("X-Request-ID", "")
    )
    return response


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Attach a request ID to every request for log correlation.

    Bound in structlog context vars (appears in every log entry for the
    request) and echoed in the X-Request-ID response header.
    """
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id)
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Return ErrorResponse JSON instead of FastAPI's {"detail": [...]}."""
    messages = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err["loc"])
        messages.append(f"{loc}: {err['msg']}")
    response = JSONResponse(
        status_code=422,
        content={
            "error": "validation_error",
            "message": "; ".join(messages),
            "retryable": False,
            "detail": None,
        },
    )
    return _with_request_id(request, response)


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    response = JSONResponse(
        status_code=exc.status,
        content={
            "error": exc.code,
            "message": exc.message,
            "retryable": exc.retryable,
            "detail": None,
        },
        headers=exc.headers,
    )
    return _with_request_id(request, response)


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(
        "store_error",
        path=request.url.path,
        method=request.method,
        error_type=type(exc).__name__,
        error=str(exc)[:300],
    )
    response = JSONResponse(
        status_code=503,
        content={
            "error": "store_error",
            "message": "The data store is unavailable. Please try again.",
            "retryable": True,
            "detail": None,
        },
    )
    return _with_request_id(request, response)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Consistent ErrorResponse JSON instead of a bare 500."""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    response = JSONResponse(
        status_code=500,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred",
            "retryable": True,
            "detail": None,
        },
    )
    return _with_request_id(request, response)


app.include_router(health.router)
app.include_router(session.router, prefix="/api/v1")
app.include_router(workspace.router, prefix="/api/v1")
app.include_router(projects.router, prefix="/api/v1")
app.include_router(purchases.router, prefix="/api/v1")
app.include_router(admin.router, prefix="/api/v1")
app.include_router(tools.router, prefix="/api/v1")
