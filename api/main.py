"""FastAPI application: container wiring, startup checks and error mapping."""
import logging
import sys
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic_core import _pydantic_core
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request

from api.shared.db import get_db_session
from api.shared.dtos import HealthCheckResponse
from api.shared.entities.registry import BaseEntity
from api.shared.exceptions import AppException, ExternalServiceError, NotFoundError
from core.logger import configure_logging
from core.settings import SETTINGS
from di.container import ApplicationContainer as DependencyContainer

configure_logging()

logger = logging.getLogger("rag")


class CustomFastAPI(FastAPI):
    container: DependencyContainer


async def _start_database(container: DependencyContainer) -> None:
    started = time.time()
    database = container.infrastructure.database()
    await database.init()
    if SETTINGS.DATABASE.CREATE_TABLES:
        await database.create_tables(BaseEntity.metadata)
    async with database.engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    logger.info(f"Database ready in {time.time() - started:.2f}s")


async def _start_pinecone(container: DependencyContainer) -> None:
    try:
        await container.infrastructure.pinecone().init()
        logger.info(
            f"Pinecone ready (index={SETTINGS.PINECONE.PINECONE_INDEX}, "
            f"assistant={SETTINGS.PINECONE.ASSISTANT_NAME}, mode={SETTINGS.CHAT.MODE})"
        )
    except Exception as e:
        # Conversation routes keep working; chat answers fail until configured
        logger.warning(f"Pinecone unavailable, chat answers will fail: {e}")


@asynccontextmanager
async def lifespan(_app: CustomFastAPI):
    started = time.time()
    try:
        await _start_database(_app.container)
    except Exception:
        logger.exception("Database initialization failed")
        raise
    await _start_pinecone(_app.container)
    logger.info(f"Application startup completed in {time.time() - started:.2f}s")

    yield

    for name in ("pinecone", "database"):
        try:
            await getattr(_app.container.infrastructure, name)().shutdown()
        except Exception:
            logger.exception(f"Error shutting down {name}")
    logger.info("Application shutdown complete")


def _error_body(error: str, detail, status_code: int) -> dict:
    return {"error": error, "detail": detail, "status_code": status_code}


def register_exception_handlers(_app: FastAPI) -> None:
    @_app.exception_handler(404)
    async def not_found_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=404,
            content=_error_body("Not Found", getattr(exc, "detail", "Not Found"), 404),
        )

    @_app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=422, content=_error_body("Validation Error", str(exc), 422)
        )

    @_app.exception_handler(_pydantic_core.ValidationError)
    async def pydantic_validation_handler(
        request: Request, exc: _pydantic_core.ValidationError
    ):
        return JSONResponse(
            status_code=422, content=_error_body("Validation Error", str(exc), 422)
        )

    @_app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        if isinstance(exc, NotFoundError):
            status_code = 404
        elif isinstance(exc, ExternalServiceError):
            status_code = 502
        else:
            status_code = 500
        logger.warning(f"{exc.error_code} on {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=status_code,
            content=_error_body(exc.error_code, exc.message, status_code),
        )

    @_app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception on {request.url.path}")
        return JSONResponse(
            status_code=500,
            content=_error_body("Internal Server Error", "An unexpected error occurred", 500),
        )


def create_fastapi_app() -> CustomFastAPI:
    _app = CustomFastAPI(
        title="Article Chat API",
        description="Chat over scientific articles with stored conversations and reports",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    _app.container = DependencyContainer()
    _app.container.wire(modules=[sys.modules[__name__]])
    _app.container.init_resources()

    _app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from api.features.chat.router import router as chat_router
    from api.features.conversation.router import router as conversation_router

    _app.include_router(
        conversation_router, prefix="/api/conversations", tags=["Conversations"]
    )
    _app.include_router(chat_router, prefix="/api/chat", tags=["Chat"])
    register_exception_handlers(_app)

    @_app.get("/")
    async def root():
        return {"message": "Article Chat API is running", "status": "ok"}

    @_app.get("/health")
    async def health():
        return {"status": "ok"}

    @_app.get("/ready", response_model=HealthCheckResponse)
    async def ready(db_session: AsyncSession = Depends(get_db_session)):
        try:
            await db_session.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.error(f"Readiness check failed: {e}")
            return JSONResponse(
                status_code=503,
                content=_error_body("Service Unavailable", "Database unreachable", 503),
            )
        return HealthCheckResponse(
            status="ready",
            dependencies={"database": "ok", "chat_mode": SETTINGS.CHAT.MODE},
        )

    return _app


app = create_fastapi_app()
