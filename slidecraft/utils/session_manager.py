"""
Session Management for SlideCraft

Keeps DeckSession records in process memory, keyed by session id. Decks do
not outlive the process; idle sessions are purged after
SESSION_IDLE_TTL_MINUTES.
"""

from datetime import datetime, timedelta
from typing import Dict, List, Optional

from config.settings import get_settings
from slidecraft.models.session import DeckSession
from slidecraft.utils.logger import setup_logger

logger = setup_logger(__name__)


class SessionManager:
    """
    In-memory session store.

    Only one event loop touches the store, so no locking is needed.
    """

    def __init__(self, idle_ttl_minutes: Optional[int] = None):
        settings = get_settings()
        self.idle_ttl = timedelta(minutes=idle_ttl_minutes or settings.SESSION_IDLE_TTL_MINUTES)
        self.default_theme = settings.DEFAULT_THEME
        self.default_accent_color = settings.DEFAULT_ACCENT_COLOR
        self.cache: Dict[str, DeckSession] = {}

        logger.info(f"SessionManager initialized (idle ttl: {self.idle_ttl})")

    def get(self, session_id: str) -> Optional[DeckSession]:
        return self.cache.get(session_id)

    def get_or_create(self, session_id: str) -> DeckSession:
        """
        Get existing session or create new one.

        Args:
            session_id: Session ID

        Returns:
            DeckSession object
        """
        session = self.cache.get(session_id)
        if session is not None:
            logger.debug(f"Cache hit for session {session_id}")
            return session

        session = DeckSession(
            id=session_id,
            theme=self.default_theme,
            accent_color=self.default_accent_color,
        )
        self.cache[session_id] = session
        logger.info(f"Created new session {session_id}")
        return session

    def drop(self, session_id: str) -> bool:
        """Forget a session. Returns True if it existed."""
        return self.cache.pop(session_id, None) is not None

    def purge_idle(self, now: Optional[datetime] = None) -> List[str]:
        """
        Remove sessions not touched within the idle TTL.

        Returns:
            IDs of the purged sessions
        """
        cutoff = (now or datetime.utcnow()) - self.idle_ttl
        expired = [sid for sid, s in self.cache.items() if s.updated_at < cutoff]
        for session_id in expired:
            del self.cache[session_id]

        if expired:
            logger.info(f"Purged {len(expired)} idle session(s)")
        return expired

    @property
    def active_count(self) -> int:
        return len(self.cache)
