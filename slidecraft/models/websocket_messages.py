"""
WebSocket Message Protocol Models

Server -> client messages for a deck session. Each message type has a single
responsibility and maps directly to a frontend UI component:

- chat_message:  user-visible text (errors, confirmations)
- status_update: generation progress
- deck_update:   full snapshot of the session's deck after any change

Client -> server messages are plain JSON objects with a `type` field and are
dispatched by the WebSocket handler.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field
from enum import Enum


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def format_timestamp(dt: datetime) -> str:
    """
    Format datetime to ISO 8601 with 'Z' suffix for UTC.

    Frontend JavaScript requires 'Z' suffix to correctly parse as UTC.
    """
    if dt.tzinfo is None:
        return dt.isoformat() + 'Z'
    return dt.astimezone(timezone.utc).isoformat().replace('+00:00', 'Z')


class MessageType(str, Enum):
    """Enum for all server message types"""
    CHAT_MESSAGE = "chat_message"
    STATUS_UPDATE = "status_update"
    DECK_UPDATE = "deck_update"


class ClientMessageType(str, Enum):
    """Message types accepted from the client"""
    GENERATE = "generate"
    EDIT_FIELD = "edit_field"
    ADD_SLIDE = "add_slide"
    ADD_IMAGE_SLIDE = "add_image_slide"
    INSERT_SLIDE = "insert_slide"
    DELETE_SLIDE = "delete_slide"
    SET_CUSTOMIZATION = "set_customization"
    NAVIGATE = "navigate"
    RENAME_DECK = "rename_deck"
    SET_THEME = "set_theme"
    DISMISS_ERROR = "dismiss_error"
    RESET = "reset"
    PING = "ping"


class ChatPayload(BaseModel):
    """Payload for chat messages displayed in the chat interface"""
    text: str = Field(..., description="Main message text")
    sub_title: Optional[str] = Field(None, description="Optional subtitle")
    list_items: Optional[List[str]] = Field(None, description="Optional list of items")
    format: Literal["markdown", "plain"] = Field("markdown", description="Text format type")


class StatusLevel(str, Enum):
    """Status levels for status updates"""
    IDLE = "idle"
    THINKING = "thinking"
    GENERATING = "generating"
    COMPLETE = "complete"
    ERROR = "error"


class StatusPayload(BaseModel):
    """Payload for status update messages"""
    status: StatusLevel = Field(..., description="Current status level")
    text: str = Field(..., description="Status message text")
    progress: Optional[int] = Field(None, description="Progress percentage (0-100)")


class DeckUpdatePayload(BaseModel):
    """Snapshot of a session's deck"""
    state: str = Field(..., description="empty, synthesizing, ready or failed")
    presentation: Optional[Dict[str, Any]] = Field(None, description="Deck in wire format")
    current_index: int = Field(0, description="Displayed slide")
    slide_count: int = Field(0)
    theme: str = Field(..., description="Theme id used for rendering")
    accent_color: str = Field(..., description="Accent colour (hybrid theme)")
    error: Optional[str] = Field(None, description="Error of the last failed generation")
    html: Optional[str] = Field(None, description="Rendered deck, when one is present")


class BaseMessage(BaseModel):
    """Base message envelope for all message types"""
    message_id: str = Field(..., description="Unique message identifier")
    session_id: str = Field(..., description="Session identifier")
    timestamp: datetime = Field(default_factory=utc_now, description="Message timestamp (UTC)")
    type: MessageType = Field(..., description="Message type discriminator")
    role: Literal["user", "assistant"] = Field("assistant", description="Message sender role")

    class Config:
        use_enum_values = True
        json_encoders = {
            datetime: lambda v: format_timestamp(v)
        }


class ChatMessage(BaseMessage):
    """Chat message for conversational content"""
    type: Literal[MessageType.CHAT_MESSAGE] = MessageType.CHAT_MESSAGE
    payload: ChatPayload


class StatusUpdate(BaseMessage):
    """Status update message for progress indication"""
    type: Literal[MessageType.STATUS_UPDATE] = MessageType.STATUS_UPDATE
    payload: StatusPayload


class DeckUpdate(BaseMessage):
    """Deck update message carrying the full session snapshot"""
    type: Literal[MessageType.DECK_UPDATE] = MessageType.DECK_UPDATE
    payload: DeckUpdatePayload


def _message_id() -> str:
    import uuid
    return f"msg_{uuid.uuid4().hex[:8]}"


def create_chat_message(
    session_id: str,
    text: str,
    message_id: Optional[str] = None,
    sub_title: Optional[str] = None,
    list_items: Optional[List[str]] = None,
    format: Literal["markdown", "plain"] = "markdown",
    role: Literal["user", "assistant"] = "assistant"
) -> ChatMessage:
    """Helper function to create a chat message."""
    return ChatMessage(
        message_id=message_id or _message_id(),
        session_id=session_id,
        role=role,
        payload=ChatPayload(
            text=text,
            sub_title=sub_title,
            list_items=list_items,
            format=format
        )
    )


def create_status_update(
    session_id: str,
    status: StatusLevel,
    text: str,
    message_id: Optional[str] = None,
    progress: Optional[int] = None
) -> StatusUpdate:
    """Helper function to create a status update"""
    return StatusUpdate(
        message_id=message_id or _message_id(),
        session_id=session_id,
        payload=StatusPayload(
            status=status,
            text=text,
            progress=progress
        )
    )


def create_deck_update(
    session_id: str,
    snapshot: Dict[str, Any],
    html: Optional[str] = None,
    message_id: Optional[str] = None
) -> DeckUpdate:
    """
    Helper function to create a deck update.

    Args:
        snapshot: Output of DeckEditor.snapshot()
        html: Rendered deck for the session's theme
    """
    return DeckUpdate(
        message_id=message_id or _message_id(),
        session_id=session_id,
        payload=DeckUpdatePayload(html=html, **snapshot)
    )
