from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Union

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError, ResponseValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .db import Database
from .errors import NotFoundError, PersistenceError
from .logger import configure_logging, get_logger
from .routers import todos as todos_router
from .service import TodoService
from .settings import Settings, get_settings

logger = get_logger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "todos",
        "description": "Create, cursor-paginated read, update and delete of todos.",
    },
]

_INTERNAL_ERROR = {"detail": "Internal Server Error"}


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Malformed bodies, failed field validators and bad query values are client errors.

    Response format:
        {
            "error": "ValidationError",
            "detail": [... pydantic/fastapi error details ...],
            "message": "Request validation failed"
        }
    """
    logger.debug("request.invalid", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(
        status_code=400,
        content={
            "error": "ValidationError",
            "message": "Request validation failed",
            "detail": jsonable_encoder(exc.errors()),
        },
    )


async def not_found_exception_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": "Todo not found"})


async def persistence_exception_handler(request: Request, exc: PersistenceError) -> JSONResponse:
    logger.error(
        "todo.persistence_failed",
        method=request.method,
        path=request.url.path,
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content=_INTERNAL_ERROR)


async def serialization_exception_handler(
    request: Request, exc: Union[ResponseValidationError, ValidationError]
) -> JSONResponse:
    logger.error(
        "response.serialization_failed",
        method=request.method,
        path=request.url.path,
        errors=len(exc.errors()),
    )
    return JSONResponse(status_code=500, content=_INTERNAL_ERROR)


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    The Database and TodoService are constructed once when the app starts and
    shared by every request through app.state.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_format)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        db = Database(
            settings.db_path,
            timeout=settings.db_timeout,
            operation_timeout=settings.db_operation_timeout,
        )
        app.state.todo_service = TodoService(db)
        logger.info("app.started", db_path=db.path)
        yield
        logger.info("app.stopped")

    app = FastAPI(
        title="Todo API",
        description="CRUD service for todos backed by SQLite.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )
    app.state.settings = settings

    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(NotFoundError, not_found_exception_handler)
    app.add_exception_handler(PersistenceError, persistence_exception_handler)
    app.add_exception_handler(ResponseValidationError, serialization_exception_handler)
    app.add_exception_handler(ValidationError, serialization_exception_handler)

    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.
        """
        return {"message": "Healthy"}

    app.include_router(todos_router.router)
    return app


app = create_app()
