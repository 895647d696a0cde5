"""
Session Model for SlideCraft

One DeckSession holds everything a single user session needs: the lifecycle
state, the live Presentation, the displayed slide index, the chosen theme and
the local images supplied for placeholder resolution.

Lifecycle:
    EMPTY -> SYNTHESIZING -> READY
    EMPTY -> SYNTHESIZING -> FAILED -> EMPTY

Editor operations are self-loops on READY. Each synthesis request is tagged
with a generation number; results for anything but the latest request are
discarded.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field

from slidecraft.models.slide import Presentation


class SessionState(str, Enum):
    """Deck lifecycle states."""
    EMPTY = "empty"
    SYNTHESIZING = "synthesizing"
    READY = "ready"
    FAILED = "failed"


class DeckSession(BaseModel):
    """
    Explicit finite-state session record.

    The editor receives this record and applies one logical mutation per
    user action; nothing else writes to `presentation`.
    """

    id: str
    state: SessionState = Field(default=SessionState.EMPTY)

    presentation: Optional[Presentation] = Field(None, description="Live deck")
    current_index: int = Field(0, description="Index of the displayed slide")

    # Incremented for every synthesis request; stale results are dropped
    request_generation: int = Field(0)

    # Local image references (blob/object URLs) for placeholder resolution
    images: List[str] = Field(default_factory=list)

    theme: str = Field("minimalist")
    accent_color: str = Field("#0052CC")

    last_error: Optional[str] = Field(None, description="User-visible error of the last attempt")

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def touch(self) -> None:
        self.updated_at = datetime.utcnow()

    @property
    def is_ready(self) -> bool:
        return self.state == SessionState.READY and self.presentation is not None

    @property
    def slide_count(self) -> int:
        return len(self.presentation.slides) if self.presentation else 0

    def begin_synthesis(self, images: Optional[List[str]] = None) -> int:
        """
        Enter SYNTHESIZING and return the generation token of this request.

        The current deck (if any) is left in place so a failed attempt does
        not destroy it.
        """
        self.request_generation += 1
        self.state = SessionState.SYNTHESIZING
        self.images = list(images or [])
        self.last_error = None
        self.touch()
        return self.request_generation

    def is_current(self, generation: int) -> bool:
        """True if `generation` belongs to the most recent request."""
        return generation == self.request_generation and self.state == SessionState.SYNTHESIZING

    def complete_synthesis(self, generation: int, presentation: Presentation) -> bool:
        """
        Install a freshly synthesized deck.

        Returns False (and changes nothing) when the result is stale.
        """
        if not self.is_current(generation):
            return False
        self.presentation = presentation
        self.current_index = 0
        self.state = SessionState.READY
        self.touch()
        return True

    def fail_synthesis(self, generation: int, message: str) -> bool:
        """Record a failed request; stale failures are ignored."""
        if not self.is_current(generation):
            return False
        self.state = SessionState.FAILED
        self.last_error = message
        self.touch()
        return True

    def acknowledge_failure(self) -> None:
        """
        Leave FAILED for the input step.

        When a previous deck is still held the session goes back to READY
        with that deck unchanged.
        """
        if self.state != SessionState.FAILED:
            return
        self.state = SessionState.READY if self.presentation is not None else SessionState.EMPTY
        self.touch()

    def reset(self) -> None:
        """Discard the deck and any in-flight request (user started over)."""
        self.request_generation += 1
        self.state = SessionState.EMPTY
        self.presentation = None
        self.current_index = 0
        self.images = []
        self.last_error = None
        self.touch()
