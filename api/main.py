import sys
import time
from contextlib import asynccontextmanager

import structlog
from fastapi import APIRouter, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request

from api.di.container import ApplicationContainer as DependencyContainer
from api.features.chat.router import CONVERSATION_ID_HEADER
from api.features.chat.service import wait_for_pending_turns
from api.shared.exceptions import ChatAPIException
from api.shared.response import ErrorResponse
from api.shared.utils import format_validation_errors
from core.logging import configure_logging
from core.settings import SETTINGS

logger = structlog.get_logger("chat")
access_logger = structlog.get_logger("chat.access")


class CustomFastAPI(FastAPI):
    container: DependencyContainer


@asynccontextmanager
async def lifespan(_app: CustomFastAPI):
    logger.info("startup_begin")
    start_time = time.time()

    db_resource = _app.container.infrastructure.database()
    try:
        await db_resource.init()
        async with db_resource.engine.connect() as _conn:
            # Verify database connection
            await _conn.execute(text("SELECT 1"))
        logger.info("startup_complete", duration_s=round(time.time() - start_time, 2))
    except Exception:
        logger.exception("startup_failed")
        raise

    yield

    # Let in-flight turns finish persisting before the engine goes away
    await wait_for_pending_turns()
    await db_resource.shutdown()
    logger.info("shutdown_complete")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content=ErrorResponse.of(message).model_dump()
    )


async def chat_api_exception_handler(request: Request, exc: ChatAPIException):
    if exc.status_code >= 500:
        # The failing component has already logged the cause
        logger.warning(
            "request_failed",
            path=request.url.path,
            error_code=exc.error_code,
            details=exc.details,
        )
    return _error(exc.status_code, exc.message)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return _error(400, format_validation_errors(exc.errors()))


async def pydantic_validation_handler(request: Request, exc: PydanticValidationError):
    return _error(400, format_validation_errors(exc.errors()))


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return _error(404, "Requested endpoint not found!")
    return _error(exc.status_code, str(exc.detail))


async def general_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled_exception", path=request.url.path, error=str(exc))
    return _error(500, "Internal Server Error!")


system_router = APIRouter()


@system_router.get("/")
async def root():
    return {"message": "Chat API is running", "status": "ok"}


@system_router.get("/health")
async def health():
    return {"status": "ok"}


def create_fastapi_app() -> CustomFastAPI:
    configure_logging(SETTINGS)

    _app = CustomFastAPI(
        title="Chat API",
        description="Conversation CRUD and streaming chat completions",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Initialize dependency container
    _app.container = DependencyContainer()
    _app.container.wire(modules=[sys.modules[__name__]])
    _app.container.init_resources()

    _app.add_middleware(
        CORSMiddleware,
        allow_origins=SETTINGS.APP.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[CONVERSATION_ID_HEADER],
    )

    @_app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.time()
        response = await call_next(request)
        access_logger.info(
            "http_request",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=int((time.time() - start) * 1000),
        )
        return response

    _app.add_exception_handler(ChatAPIException, chat_api_exception_handler)
    _app.add_exception_handler(RequestValidationError, validation_exception_handler)
    _app.add_exception_handler(PydanticValidationError, pydantic_validation_handler)
    _app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    _app.add_exception_handler(Exception, general_exception_handler)

    # Include feature routers
    from api.features.chat.router import router as chat_router

    _app.include_router(system_router, tags=["System"])
    _app.include_router(chat_router, prefix="/api/chat", tags=["Chat"])

    return _app


app = create_fastapi_app()
