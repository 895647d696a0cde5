"""
Deck Editor

The only component allowed to mutate a session's live Presentation. Each
public method is one logical user action and leaves the deck invariants
intact:

- slide order is presentation order and indices are renumbered implicitly
  by list insertion/removal;
- customization maps are merged one entry at a time;
- left/right columns never mix lists and records.

Invalid indices come from UI bugs, not user input: they are logged and the
operation is ignored. No editor method raises.
"""

import re
from typing import Any, Dict, Optional

import pydantic

from slidecraft.core.errors import SlideIndexError
from slidecraft.models.session import DeckSession
from slidecraft.models.slide import (
    SEMANTIC_FIELDS,
    CustomizationKind,
    FieldOffset,
    Slide,
    new_content_slide,
    new_image_slide,
)
from slidecraft.renderers.themes import is_known_theme
from slidecraft.utils.logger import setup_logger

logger = setup_logger(__name__)

# Accent colours end up in inline CSS and PDF fills
ACCENT_COLOR_PATTERN = re.compile(r"#(?:[0-9A-Fa-f]{3}|[0-9A-Fa-f]{6})")

# CustomizationKind -> Slide attribute holding that map
_CUSTOMIZATION_MAPS = {
    CustomizationKind.POSITION: "positions",
    CustomizationKind.FONT_SIZE: "font_sizes",
    CustomizationKind.ROTATION: "rotations",
}


class DeckEditor:
    """
    Apply editing operations to a DeckSession.

    Usage:
        editor = DeckEditor()
        editor.insert_slide(session, after_index=0)
        editor.set_field_customization(session, 1, "fontSize", "title", 48)
    """

    # ========== Guards ==========

    def _require_ready(self, session: DeckSession, operation: str) -> bool:
        if not session.is_ready:
            logger.warning(
                f"Ignoring {operation} on session {session.id}: state={session.state.value}"
            )
            return False
        return True

    def _check_index(self, session: DeckSession, index: int) -> None:
        count = session.slide_count
        if not isinstance(index, int) or index < 0 or index >= count:
            raise SlideIndexError(index, count)

    def _replace_slide(self, session: DeckSession, index: int, slide: Slide) -> None:
        session.presentation.slides[index] = slide
        session.touch()

    # ========== Field edits ==========

    def edit_field(self, session: DeckSession, slide_index: int, field: str, value: Any) -> bool:
        """
        Replace exactly one semantic field of one slide.

        Array fields are replaced whole: callers pass the full new list even
        when a single bullet changed.

        Returns:
            True if the edit was applied
        """
        if not self._require_ready(session, "edit_field"):
            return False

        try:
            self._check_index(session, slide_index)
        except SlideIndexError as e:
            logger.warning(f"edit_field ignored: {e}")
            return False

        if field not in SEMANTIC_FIELDS:
            logger.warning(f"edit_field ignored: '{field}' is not an editable field")
            return False

        current = session.presentation.slides[slide_index]
        data = current.model_dump(by_alias=True, exclude_none=True)
        if value is None:
            data.pop(field, None)
        else:
            data[field] = value

        try:
            updated = Slide.model_validate(data)
        except pydantic.ValidationError as e:
            logger.warning(
                f"edit_field ignored: '{field}' on slide {slide_index} would be invalid "
                f"({e.errors()[0]['msg']})"
            )
            return False

        self._replace_slide(session, slide_index, updated)
        logger.debug(f"Edited '{field}' on slide {slide_index}")
        return True

    def set_field_customization(
        self,
        session: DeckSession,
        slide_index: int,
        kind: str,
        field_key: str,
        value: Any
    ) -> bool:
        """
        Merge one customization entry into a slide's position/fontSize/rotation map.

        Other keys of the same map are preserved.

        Args:
            kind: "position", "fontSize" or "rotation"
            field_key: Stable field identifier, e.g. "title" or "left_0"
            value: {"x", "y"} for position, a number otherwise
        """
        if not self._require_ready(session, "set_field_customization"):
            return False

        try:
            self._check_index(session, slide_index)
            kind = CustomizationKind(kind)
        except SlideIndexError as e:
            logger.warning(f"set_field_customization ignored: {e}")
            return False
        except ValueError:
            logger.warning(f"set_field_customization ignored: unknown kind '{kind}'")
            return False

        if not field_key:
            logger.warning("set_field_customization ignored: empty field key")
            return False

        slide = session.presentation.slides[slide_index]
        if field_key not in slide.field_keys():
            logger.warning(
                f"set_field_customization ignored: slide {slide_index} has no field '{field_key}'"
            )
            return False

        try:
            entry = self._coerce_customization(kind, value)
        except (TypeError, ValueError, pydantic.ValidationError):
            logger.warning(f"set_field_customization ignored: bad {kind.value} value {value!r}")
            return False

        attr = _CUSTOMIZATION_MAPS[kind]
        merged = dict(getattr(slide, attr) or {})
        merged[field_key] = entry

        self._replace_slide(session, slide_index, slide.model_copy(update={attr: merged}))
        return True

    @staticmethod
    def _coerce_customization(kind: CustomizationKind, value: Any):
        if kind == CustomizationKind.POSITION:
            if isinstance(value, FieldOffset):
                return value
            return FieldOffset.model_validate(value)
        if isinstance(value, bool):
            raise TypeError("boolean is not a size or angle")
        return float(value)

    # ========== Structure ==========

    def insert_slide(
        self,
        session: DeckSession,
        after_index: int,
        slide: Optional[Slide] = None
    ) -> bool:
        """
        Insert a slide right after `after_index` (-1 inserts at the front).

        Out-of-range positions are clamped. The displayed index moves to
        the new slide.
        """
        if not self._require_ready(session, "insert_slide"):
            return False

        slides = session.presentation.slides
        if not isinstance(after_index, int):
            logger.warning(f"insert_slide ignored: bad position {after_index!r}")
            return False

        clamped = max(-1, min(after_index, len(slides) - 1))
        if clamped != after_index:
            logger.warning(f"insert_slide position {after_index} clamped to {clamped}")

        position = clamped + 1
        slides.insert(position, slide if slide is not None else new_content_slide())
        session.current_index = position
        session.touch()

        logger.info(f"Inserted slide at {position} (deck now has {len(slides)} slides)")
        return True

    def add_slide(self, session: DeckSession, after_index: int) -> bool:
        """'Add slide' action: insert the default content slide."""
        return self.insert_slide(session, after_index, new_content_slide())

    def add_image_slide(self, session: DeckSession, after_index: int, image_ref: str) -> bool:
        """'Add image' action: insert an image slide for a local image reference."""
        if not image_ref:
            logger.warning("add_image_slide ignored: empty image reference")
            return False
        return self.insert_slide(session, after_index, new_image_slide(image_ref))

    def delete_slide(self, session: DeckSession, index: int) -> bool:
        """
        Remove one slide and clamp the displayed index.

        Deleting the last remaining slide leaves a valid, empty deck.
        """
        if not self._require_ready(session, "delete_slide"):
            return False

        try:
            self._check_index(session, index)
        except SlideIndexError as e:
            logger.warning(f"delete_slide ignored: {e}")
            return False

        slides = session.presentation.slides
        del slides[index]

        if session.current_index >= len(slides):
            session.current_index = max(len(slides) - 1, 0)
        session.touch()

        logger.info(f"Deleted slide {index} (deck now has {len(slides)} slides)")
        return True

    # ========== Navigation & deck-level settings ==========

    def navigate(self, session: DeckSession, direction: Optional[str] = None, index: Optional[int] = None) -> bool:
        """
        Move the displayed slide.

        `direction` is "next" or "previous" and wraps around; `index` jumps
        directly and is clamped.
        """
        if not self._require_ready(session, "navigate"):
            return False

        count = session.slide_count
        if count == 0:
            return False

        if index is not None:
            if not isinstance(index, int):
                logger.warning(f"navigate ignored: bad index {index!r}")
                return False
            session.current_index = max(0, min(index, count - 1))
        elif direction == "next":
            session.current_index = (session.current_index + 1) % count
        elif direction == "previous":
            session.current_index = (session.current_index - 1 + count) % count
        else:
            logger.warning(f"navigate ignored: unknown direction {direction!r}")
            return False

        session.touch()
        return True

    def rename_deck(self, session: DeckSession, title: str) -> bool:
        """Change the deck title."""
        if not self._require_ready(session, "rename_deck"):
            return False
        session.presentation.title = title or ""
        session.touch()
        return True

    def set_theme(
        self,
        session: DeckSession,
        theme: Optional[str] = None,
        accent_color: Optional[str] = None
    ) -> bool:
        """Choose the theme and/or accent colour used to render the deck."""
        if accent_color and not ACCENT_COLOR_PATTERN.fullmatch(accent_color):
            logger.warning(f"set_theme ignored: invalid accent colour {accent_color!r}")
            return False

        changed = False
        if theme is not None:
            if not is_known_theme(theme):
                logger.warning(f"set_theme ignored: unknown theme '{theme}'")
                return False
            session.theme = theme
            changed = True
        if accent_color:
            session.accent_color = accent_color
            changed = True
        if changed:
            session.touch()
        return changed

    def snapshot(self, session: DeckSession) -> Dict[str, Any]:
        """Read-only view of the session sent to clients."""
        return {
            "state": session.state.value,
            "presentation": session.presentation.to_dict() if session.presentation else None,
            "current_index": session.current_index,
            "slide_count": session.slide_count,
            "theme": session.theme,
            "accent_color": session.accent_color,
            "error": session.last_error,
        }
