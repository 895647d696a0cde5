"""
Core Module for SlideCraft

Deck parsing, placeholder resolution and editing.
The generation pipeline lives in slidecraft.core.deck_pipeline.
"""

from .errors import (
    SlideCraftError,
    ValidationError,
    DocumentParseError,
    UpstreamError,
    CredentialError,
    GenerationFormatError,
    FormatError,
    SlideIndexError
)
from .deck_parser import parse_presentation, strip_code_fence
from .placeholder_resolver import resolve_placeholders, find_placeholders
from .deck_editor import DeckEditor

__all__ = [
    # Errors
    'SlideCraftError',
    'ValidationError',
    'DocumentParseError',
    'UpstreamError',
    'CredentialError',
    'GenerationFormatError',
    'FormatError',
    'SlideIndexError',

    # Parsing & resolution
    'parse_presentation',
    'strip_code_fence',
    'resolve_placeholders',
    'find_placeholders',

    # Editing
    'DeckEditor',
]
