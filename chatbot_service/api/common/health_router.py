"""Liveness and database health API router."""

from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import func, select

from chatbot_service.core.config import settings
from chatbot_service.dependencies import DbSessionDep, get_session_service
from chatbot_service.services.ai_provider import AIProvider, get_ai_provider
from chatbot_service.services.session_service import SessionService

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_check(
    session_service: Annotated[SessionService, Depends(get_session_service)],
    ai_provider: Annotated[AIProvider, Depends(get_ai_provider)],
) -> dict:
    """Service status with the active session count."""
    return {
        "status": "ok",
        "service": settings.app.name,
        "version": settings.app.version,
        "database": "postgresql",
        "aiProvider": ai_provider.name,
        "activeSessions": await session_service.get_active_count(),
        "timestamp": datetime.now(UTC).isoformat(),
    }


@router.get("/db")
async def database_health(session: DbSessionDep) -> dict:
    """Round-trip to the database."""
    result = await session.execute(select(func.now()))
    now = result.scalar_one()
    bind_url = session.get_bind().url
    return {
        "status": "ok",
        "database": bind_url.database or bind_url.get_backend_name(),
        "timestamp": now.isoformat() if isinstance(now, datetime) else str(now),
    }
