"""
WebSocket Handler for SlideCraft

One connection drives one DeckSession. Generation runs as a background task
so editor and navigation messages keep being processed while the model call
is pending; every change to the session is answered with a deck_update
snapshot.

Client message format: {"type": "<action>", "payload": {...}}
"""

import asyncio
import json
from datetime import datetime
from typing import Any, Dict, Optional

import pydantic
from fastapi import WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from config.settings import get_settings
from slidecraft.core.deck_editor import DeckEditor
from slidecraft.core.deck_pipeline import DeckPipeline
from slidecraft.core.errors import SlideCraftError
from slidecraft.models.session import DeckSession, SessionState
from slidecraft.models.slide import Slide
from slidecraft.models.websocket_messages import (
    ClientMessageType,
    StatusLevel,
    create_chat_message,
    create_deck_update,
    create_status_update,
)
from slidecraft.renderers.html import render_presentation_html
from slidecraft.utils.logger import setup_logger
from slidecraft.utils.session_manager import SessionManager

logger = setup_logger(__name__)


class WebSocketHandler:
    """
    WebSocket handler for deck sessions.

    Holds the in-memory session store, the editor and the generation
    pipeline; one instance is shared by all connections.
    """

    def __init__(
        self,
        pipeline: Optional[DeckPipeline] = None,
        session_manager: Optional[SessionManager] = None
    ):
        """Initialize handler components."""
        logger.info("Initializing WebSocketHandler...")

        self.settings = get_settings()
        self.session_manager = session_manager or SessionManager()
        self.editor = DeckEditor()
        self.pipeline = pipeline or DeckPipeline()

        # Connection tracking
        self.active_connections: Dict[str, WebSocket] = {}
        self.connection_lock = asyncio.Lock()

        # One in-flight generation task per session
        self.generation_tasks: Dict[str, asyncio.Task] = {}

        self._handlers = {
            ClientMessageType.GENERATE: self._handle_generate,
            ClientMessageType.EDIT_FIELD: self._handle_edit_field,
            ClientMessageType.ADD_SLIDE: self._handle_add_slide,
            ClientMessageType.ADD_IMAGE_SLIDE: self._handle_add_image_slide,
            ClientMessageType.INSERT_SLIDE: self._handle_insert_slide,
            ClientMessageType.DELETE_SLIDE: self._handle_delete_slide,
            ClientMessageType.SET_CUSTOMIZATION: self._handle_set_customization,
            ClientMessageType.NAVIGATE: self._handle_navigate,
            ClientMessageType.RENAME_DECK: self._handle_rename_deck,
            ClientMessageType.SET_THEME: self._handle_set_theme,
            ClientMessageType.DISMISS_ERROR: self._handle_dismiss_error,
            ClientMessageType.RESET: self._handle_reset,
        }

        logger.info("WebSocketHandler initialized successfully")

    async def handle_connection(self, websocket: WebSocket, session_id: str):
        """
        Handle a WebSocket connection.

        Args:
            websocket: FastAPI WebSocket
            session_id: Session identifier
        """
        # Handle duplicate connections
        async with self.connection_lock:
            existing = self.active_connections.get(session_id)
            if existing and existing.client_state == WebSocketState.CONNECTED:
                logger.warning(f"Duplicate connection for session {session_id}, closing old")
                try:
                    await existing.close(code=4000, reason="New connection opened")
                except Exception as e:
                    logger.warning(f"Error closing old connection: {e}")

            self.active_connections[session_id] = websocket

        await websocket.accept()
        logger.info(f"Connected: session={session_id}")

        self.session_manager.purge_idle()
        session = self.session_manager.get_or_create(session_id)
        await self._send_deck_update(websocket, session)

        try:
            while True:
                raw_data = await websocket.receive_text()

                if raw_data.strip() == "ping":
                    await websocket.send_text("pong")
                    continue

                try:
                    data = json.loads(raw_data)
                except json.JSONDecodeError:
                    logger.warning(f"Ignoring non-JSON message on session {session_id}")
                    continue
                if not isinstance(data, dict):
                    logger.warning(f"Ignoring non-object message on session {session_id}")
                    continue

                if data.get('type') == ClientMessageType.PING.value:
                    await websocket.send_json({'type': 'pong', 'timestamp': datetime.utcnow().isoformat()})
                    continue

                await self._process_message(websocket, session, data)

        except WebSocketDisconnect:
            logger.info(f"Client disconnected: session={session_id}")

        finally:
            async with self.connection_lock:
                if self.active_connections.get(session_id) is websocket:
                    del self.active_connections[session_id]
            logger.info(f"WebSocket disconnected: session={session_id}")

    async def _process_message(
        self,
        websocket: WebSocket,
        session: DeckSession,
        data: Dict[str, Any]
    ):
        """
        Dispatch one client message.

        Args:
            websocket: WebSocket connection
            session: Current session
            data: Incoming message data
        """
        message_type = data.get('type', '')
        payload = data.get('payload') or {}

        try:
            handler = self._handlers[ClientMessageType(message_type)]
        except (ValueError, KeyError):
            logger.warning(f"Unknown message type: {message_type}")
            return

        if not isinstance(payload, dict):
            logger.warning(f"Ignoring {message_type}: payload is not an object")
            return

        await handler(websocket, session, payload)

    # ========== Generation ==========

    async def _handle_generate(self, websocket: WebSocket, session: DeckSession, payload: Dict[str, Any]):
        """Start a generation task, superseding any request still in flight."""
        previous = self.generation_tasks.pop(session.id, None)
        if previous is not None and not previous.done():
            logger.info(f"Session {session.id}: superseding in-flight generation")
            previous.cancel()

        await self._send_status(websocket, session, "Reading your content...", StatusLevel.THINKING, progress=0)

        task = asyncio.create_task(self._run_generation(websocket, session, payload))
        self.generation_tasks[session.id] = task
        task.add_done_callback(lambda t, sid=session.id: self._forget_task(sid, t))

    def _forget_task(self, session_id: str, task: asyncio.Task):
        # A superseding request may already have replaced the entry
        if self.generation_tasks.get(session_id) is task:
            del self.generation_tasks[session_id]

    async def _run_generation(self, websocket: WebSocket, session: DeckSession, payload: Dict[str, Any]):
        async def report_progress(progress: int):
            await self._send_status(
                websocket, session, "Generating your presentation...",
                StatusLevel.GENERATING, progress=progress
            )

        try:
            installed = await self.pipeline.run(
                session,
                url=payload.get('url'),
                text=payload.get('text'),
                title=payload.get('title') or "",
                notes=payload.get('notes') or "",
                images=payload.get('images'),
                on_progress=report_progress
            )
        except SlideCraftError as e:
            await self._send_status(websocket, session, e.message, StatusLevel.ERROR)
            await self._send_error(websocket, session, e.message)
            await self._send_deck_update(websocket, session)
            return
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Generation task crashed for session {session.id}: {e}", exc_info=True)
            await self._send_error(websocket, session, "Failed to generate presentation")
            await self._send_deck_update(websocket, session)
            return

        if not installed:
            return

        await self._send_status(websocket, session, "Presentation ready", StatusLevel.COMPLETE, progress=100)
        await self._send_deck_update(websocket, session)
        await self._send_chat(
            websocket, session,
            f"Your presentation **{session.presentation.title}** is ready "
            f"with {session.slide_count} slides."
        )

    async def _handle_dismiss_error(self, websocket: WebSocket, session: DeckSession, payload: Dict[str, Any]):
        if session.state == SessionState.FAILED:
            session.acknowledge_failure()
            await self._send_deck_update(websocket, session)

    async def _handle_reset(self, websocket: WebSocket, session: DeckSession, payload: Dict[str, Any]):
        task = self.generation_tasks.pop(session.id, None)
        if task is not None and not task.done():
            task.cancel()
        session.reset()
        logger.info(f"Session {session.id} reset")
        await self._send_deck_update(websocket, session)

    # ========== Editor ==========

    async def _apply(self, websocket: WebSocket, session: DeckSession, applied: bool):
        if applied:
            await self._send_deck_update(websocket, session)

    async def _handle_edit_field(self, websocket: WebSocket, session: DeckSession, payload: Dict[str, Any]):
        applied = self.editor.edit_field(
            session, payload.get('slide_index'), payload.get('field', ''), payload.get('value')
        )
        await self._apply(websocket, session, applied)

    async def _handle_add_slide(self, websocket: WebSocket, session: DeckSession, payload: Dict[str, Any]):
        after = payload.get('after_index', session.current_index)
        await self._apply(websocket, session, self.editor.add_slide(session, after))

    async def _handle_add_image_slide(self, websocket: WebSocket, session: DeckSession, payload: Dict[str, Any]):
        after = payload.get('after_index', session.current_index)
        applied = self.editor.add_image_slide(session, after, payload.get('image', ''))
        await self._apply(websocket, session, applied)

    async def _handle_insert_slide(self, websocket: WebSocket, session: DeckSession, payload: Dict[str, Any]):
        slide = None
        if payload.get('slide') is not None:
            try:
                slide = Slide.model_validate(payload['slide'])
            except pydantic.ValidationError as e:
                logger.warning(f"insert_slide ignored: invalid slide ({e.error_count()} error(s))")
                return
        after = payload.get('after_index', session.current_index)
        await self._apply(websocket, session, self.editor.insert_slide(session, after, slide))

    async def _handle_delete_slide(self, websocket: WebSocket, session: DeckSession, payload: Dict[str, Any]):
        index = payload.get('index', session.current_index)
        await self._apply(websocket, session, self.editor.delete_slide(session, index))

    async def _handle_set_customization(self, websocket: WebSocket, session: DeckSession, payload: Dict[str, Any]):
        applied = self.editor.set_field_customization(
            session,
            payload.get('slide_index'),
            payload.get('kind', ''),
            payload.get('field_key', ''),
            payload.get('value')
        )
        await self._apply(websocket, session, applied)

    async def _handle_navigate(self, websocket: WebSocket, session: DeckSession, payload: Dict[str, Any]):
        applied = self.editor.navigate(
            session, direction=payload.get('direction'), index=payload.get('index')
        )
        await self._apply(websocket, session, applied)

    async def _handle_rename_deck(self, websocket: WebSocket, session: DeckSession, payload: Dict[str, Any]):
        await self._apply(websocket, session, self.editor.rename_deck(session, payload.get('title', '')))

    async def _handle_set_theme(self, websocket: WebSocket, session: DeckSession, payload: Dict[str, Any]):
        applied = self.editor.set_theme(
            session,
            theme=payload.get('template') or payload.get('theme'),
            accent_color=payload.get('accent_color') or payload.get('accentColor')
        )
        await self._apply(websocket, session, applied)

    # ========== Outbound ==========

    async def _send(self, websocket: WebSocket, message: Dict[str, Any]) -> bool:
        """Send JSON unless the socket is already gone (background tasks may outlive it)."""
        if websocket.client_state != WebSocketState.CONNECTED:
            return False
        try:
            await websocket.send_json(message)
            return True
        except (WebSocketDisconnect, RuntimeError) as e:
            logger.debug(f"Dropped outbound message: {e}")
            return False

    async def _send_chat(self, websocket: WebSocket, session: DeckSession, message: str):
        """Send chat message."""
        chat_msg = create_chat_message(session.id, message)
        await self._send(websocket, chat_msg.model_dump(mode='json'))

    async def _send_status(
        self,
        websocket: WebSocket,
        session: DeckSession,
        message: str,
        status: StatusLevel = StatusLevel.THINKING,
        progress: Optional[int] = None
    ):
        """Send status update."""
        status_msg = create_status_update(session.id, status, message, progress=progress)
        await self._send(websocket, status_msg.model_dump(mode='json'))

    async def _send_deck_update(self, websocket: WebSocket, session: DeckSession):
        """Send the full session snapshot, with rendered HTML when a deck exists."""
        html = None
        if session.presentation is not None:
            html = render_presentation_html(session.presentation, session.theme, session.accent_color)
        deck_msg = create_deck_update(session.id, self.editor.snapshot(session), html=html)
        await self._send(websocket, deck_msg.model_dump(mode='json'))

    async def _send_error(self, websocket: WebSocket, session: DeckSession, error: str):
        """Send error message."""
        await self._send_chat(
            websocket, session,
            f"I encountered an issue: {error}. Please try again."
        )
