"""
Models Package for SlideCraft

Contains all Pydantic models for decks, sessions, content and messages.
"""

from .slide import (
    SlideType,
    CustomizationKind,
    StatCard,
    GridItem,
    FieldOffset,
    Slide,
    Presentation,
    new_content_slide,
    new_image_slide
)

from .session import SessionState, DeckSession

from .content import (
    ScrapeRequest,
    ScrapedContent,
    DocumentText,
    SynthesisRequest,
    GenerateResponse,
    ExportRequest,
    SlidesExportResponse
)

from .websocket_messages import (
    ChatMessage,
    StatusUpdate,
    DeckUpdate,
    StatusLevel,
    ClientMessageType
)

__all__ = [
    # Deck models
    'SlideType',
    'CustomizationKind',
    'StatCard',
    'GridItem',
    'FieldOffset',
    'Slide',
    'Presentation',
    'new_content_slide',
    'new_image_slide',

    # Session model
    'SessionState',
    'DeckSession',

    # Content pipeline models
    'ScrapeRequest',
    'ScrapedContent',
    'DocumentText',
    'SynthesisRequest',
    'GenerateResponse',
    'ExportRequest',
    'SlidesExportResponse',

    # WebSocket messages
    'ChatMessage',
    'StatusUpdate',
    'DeckUpdate',
    'StatusLevel',
    'ClientMessageType'
]
