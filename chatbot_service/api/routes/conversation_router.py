"""Conversation history API router."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from chatbot_service.dependencies import get_chat_service
from chatbot_service.schemas.response_schema import success_response
from chatbot_service.services.chat_service import ChatService

router = APIRouter(prefix="/api/conversations", tags=["conversations"])

ChatServiceDep = Annotated[ChatService, Depends(get_chat_service)]


# Declared before /{session_id} so "stats" is not taken as a session id
@router.get("/stats")
async def get_stats(service: ChatServiceDep) -> dict:
    """Active session statistics."""
    return success_response(**await service.get_stats())


@router.get("/patients/{patient_id}")
async def get_patient_history(
    patient_id: str,
    service: ChatServiceDep,
    limit: int = Query(default=10, ge=1, le=100),
) -> dict:
    """Most recent conversations of a patient."""
    return success_response(**await service.get_patient_history(patient_id, limit))


@router.get("/{session_id}")
async def get_conversation(session_id: str, service: ChatServiceDep) -> dict:
    """Conversation and messages of a session."""
    history = await service.get_conversation_history(session_id)
    return success_response(**history.to_payload())


@router.delete("/{session_id}")
async def end_conversation(session_id: str, service: ChatServiceDep) -> dict:
    """End a conversation and drop its session state."""
    return success_response(**await service.end_conversation(session_id))
