"""FastAPI application entry point.

``asgi_app`` serves both the HTTP API and the Socket.IO endpoint and is the
target for uvicorn (``uvicorn chatbot_service.main:asgi_app``).
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import socketio
import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from chatbot_service.api.common.health_router import router as health_router
from chatbot_service.api.routes.conversation_router import router as conversation_router
from chatbot_service.api.routes.practitioner_router import router as practitioner_router
from chatbot_service.api.routes.user_patient_router import (
    patients_router,
    users_router,
)
from chatbot_service.core.config import settings
from chatbot_service.core.database import Base, async_session_factory, engine
from chatbot_service.core.exceptions import (
    AppException,
    app_exception_handler,
    error_body,
    unhandled_exception_handler,
    validation_exception_handler,
)
from chatbot_service.core.middleware import RequestLoggingMiddleware
from chatbot_service.services.ai_provider import get_ai_provider
from chatbot_service.services.chat_service import ChatService
from chatbot_service.services.session_service import SessionService
from chatbot_service.services.session_sweeper import SessionSweeper
from chatbot_service.websocket.socket_handler import (
    ChatSocketHandler,
    create_socket_server,
)

logger = structlog.get_logger()

session_service = SessionService(async_session_factory)
chat_service = ChatService(
    session_factory=async_session_factory,
    session_service=session_service,
    ai_provider=get_ai_provider(),
    session_ttl_seconds=settings.session.ttl_seconds,
    history_limit=settings.session.history_limit,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info(
        "Starting application",
        app_name=settings.app.name,
        environment=settings.app.env,
        port=settings.server.port,
        **get_ai_provider().provider_info(),
    )
    if settings.app.auto_create_tables:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    sweeper = SessionSweeper(session_service, settings.session.cleanup_interval_seconds)
    sweeper.start()
    yield
    await sweeper.stop()
    await engine.dispose()
    logger.info("Shutting down application")


app = FastAPI(
    title=settings.app.name,
    description="Healthcare chatbot service: real-time AI chat with conversation history",
    version=settings.app.version,
    lifespan=lifespan,
    debug=settings.app.debug,
)

# Rate limiter
limiter = Limiter(key_func=get_remote_address, default_limits=[settings.server.rate_limit])
app.state.limiter = limiter


async def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """Custom handler for rate limit exceeded errors."""
    return JSONResponse(
        status_code=429,
        content=error_body("RateLimitExceeded", "Too many requests, please try again later"),
    )


# Exception handlers
app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]
app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
app.add_exception_handler(Exception, unhandled_exception_handler)

# Middleware (registration order: inner→outer, execution order: outer→inner)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.server.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(health_router)
app.include_router(conversation_router)
app.include_router(users_router)
app.include_router(patients_router)
app.include_router(practitioner_router)

# Socket.IO shares the process with the HTTP API
sio = create_socket_server(settings.server.cors_origins)
ChatSocketHandler(sio, chat_service).register()

asgi_app = socketio.ASGIApp(sio, other_asgi_app=app)
