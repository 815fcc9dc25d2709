"""Socket.IO event handlers for real-time chat."""

from datetime import UTC, datetime
from typing import Any
from urllib.parse import parse_qs

import socketio
import structlog

from chatbot_service.core.exceptions import AppException
from chatbot_service.schemas.chat_schema import ChatMessageIn
from chatbot_service.services.chat_service import ChatService

logger = structlog.get_logger()

CONNECTED_MESSAGE = "Connected to AI Medical Assistant"
CONNECTION_ERROR_MESSAGE = "Connection error. Please refresh and try again."
PROCESSING_ERROR_MESSAGE = "Failed to process your message. Please try again."
HISTORY_ERROR_MESSAGE = "Failed to load conversation history"
WARNING_PREFIX = "⚠️ "


def create_socket_server(cors_origins: list[str]) -> socketio.AsyncServer:
    """Create the ASGI Socket.IO server accepting each of ``cors_origins``."""
    # engineio only treats the bare string "*" as allow-all
    allowed: str | list[str] = "*" if "*" in cors_origins else list(cors_origins)
    return socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins=allowed,
        logger=False,
        engineio_logger=False,
    )


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


def _query_params(environ: dict[str, Any]) -> dict[str, str]:
    parsed = parse_qs(environ.get("QUERY_STRING", ""))
    return {key: values[0] for key, values in parsed.items() if values}


def _preview(text: str, length: int = 100) -> str:
    return text if len(text) <= length else f"{text[:length]}..."


class ChatSocketHandler:
    """Binds chat events on a Socket.IO server to ``ChatService``.

    The client's ``sessionId`` and ``patientId`` come from the connection
    query string and are kept in the socket session for later events.
    """

    def __init__(self, sio: socketio.AsyncServer, chat_service: ChatService) -> None:
        self._sio = sio
        self._chat_service = chat_service

    def register(self) -> None:
        """Attach every handler to the server."""
        self._sio.on("connect", self.on_connect)
        self._sio.on("message", self.on_message)
        self._sio.on("typing", self.on_typing)
        self._sio.on("getHistory", self.on_get_history)
        self._sio.on("disconnect", self.on_disconnect)

    async def on_connect(
        self, sid: str, environ: dict[str, Any], auth: Any = None
    ) -> None:
        params = _query_params(environ)
        session_id = params.get("sessionId") or sid
        patient_id = params.get("patientId") or None
        await self._sio.save_session(
            sid, {"session_id": session_id, "patient_id": patient_id}
        )
        logger.info("WebSocket connected", sid=sid, session_id=session_id)

        try:
            opened = await self._chat_service.open_session(session_id, patient_id)
        except Exception:
            logger.exception("WebSocket connection setup failed", session_id=session_id)
            await self._emit_error(sid, CONNECTION_ERROR_MESSAGE)
            return

        logger.info(
            "Resumed conversation" if opened.resumed else "Created conversation",
            session_id=session_id,
            conversation_id=opened.conversation_id,
        )
        await self._sio.emit(
            "connected",
            {
                "sessionId": session_id,
                "conversationId": opened.conversation_id,
                "message": CONNECTED_MESSAGE,
                "timestamp": _now_iso(),
            },
            to=sid,
        )

    async def on_message(self, sid: str, data: Any) -> None:
        session_id, patient_id = await self._identity(sid)
        payload = data if isinstance(data, dict) else {}
        content = payload.get("content")
        if not isinstance(content, str):
            content = ""

        await self._sio.emit("typing", {"isTyping": True}, to=sid)
        try:
            logger.info(
                "Message received", session_id=session_id, content=_preview(content)
            )
            message = ChatMessageIn(content=content, metadata=payload.get("metadata"))
            reply = await self._chat_service.process_message(
                session_id, message, patient_id
            )
        except AppException as exc:
            logger.warning(
                "Message processing failed",
                session_id=session_id,
                code=exc.code,
                error=exc.message,
            )
            await self._sio.emit("typing", {"isTyping": False}, to=sid)
            await self._emit_error(sid, f"{WARNING_PREFIX}{exc.message}")
            return
        except Exception:
            logger.exception("Message processing failed", session_id=session_id)
            await self._sio.emit("typing", {"isTyping": False}, to=sid)
            await self._emit_error(sid, f"{WARNING_PREFIX}{PROCESSING_ERROR_MESSAGE}")
            return

        await self._sio.emit("typing", {"isTyping": False}, to=sid)
        logger.info("Reply sent", session_id=session_id, content=_preview(reply.message))
        await self._sio.emit("response", reply.to_event(), to=sid)

    async def on_typing(self, sid: str, data: Any = None) -> None:
        session_id, _ = await self._identity(sid)
        is_typing = data.get("isTyping") if isinstance(data, dict) else None
        logger.debug("User typing", session_id=session_id, is_typing=is_typing)

    async def on_get_history(self, sid: str, data: Any = None) -> None:
        session_id, _ = await self._identity(sid)
        try:
            history = await self._chat_service.get_conversation_history(session_id)
        except Exception as exc:
            logger.warning(
                "Failed to load conversation history",
                session_id=session_id,
                error=str(exc),
            )
            await self._emit_error(sid, HISTORY_ERROR_MESSAGE)
            return
        await self._sio.emit(
            "history", {"success": True, **history.to_payload()}, to=sid
        )

    async def on_disconnect(self, sid: str, reason: Any = None) -> None:
        session_id, _ = await self._identity(sid)
        logger.info("WebSocket disconnected", sid=sid, session_id=session_id)

    async def _identity(self, sid: str) -> tuple[str, str | None]:
        try:
            stored = await self._sio.get_session(sid)
        except KeyError:
            return sid, None
        return stored.get("session_id") or sid, stored.get("patient_id")

    async def _emit_error(self, sid: str, message: str) -> None:
        await self._sio.emit(
            "error", {"message": message, "timestamp": _now_iso()}, to=sid
        )
