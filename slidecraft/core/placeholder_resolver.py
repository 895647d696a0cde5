"""
Placeholder Resolver

Replaces `{{USER_IMAGE_<N>}}` tokens emitted by the model with the user's
local image references. Works on a JSON-like copy of the slide tree through a
single generic visitor, so new slide variants need no changes here.

Rules:
- Only the first token in a string is resolved.
- N is 1-based; a token whose image does not exist is left verbatim.
- Malformed tokens (N not a number, broken braces) are not placeholders.
- The input Presentation is never mutated.
"""

import re
from typing import Any, Callable, List, Sequence

from slidecraft.models.slide import Presentation, Slide
from slidecraft.utils.logger import setup_logger

logger = setup_logger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\{\{USER_IMAGE_(\d+)\}\}")


def placeholder_token(n: int) -> str:
    """Token the model is told to use for the n-th (1-based) user image."""
    return "{{USER_IMAGE_%d}}" % n


def map_strings(value: Any, transform: Callable[[str], str]) -> Any:
    """
    Rebuild a JSON-like value, applying `transform` to every string leaf.

    dicts and lists are copied; other scalars are returned unchanged.
    """
    if isinstance(value, str):
        return transform(value)
    if isinstance(value, dict):
        return {key: map_strings(item, transform) for key, item in value.items()}
    if isinstance(value, list):
        return [map_strings(item, transform) for item in value]
    return value


def resolve_string(value: str, images: Sequence[str]) -> str:
    """Resolve the first placeholder in `value` if its image exists."""
    match = PLACEHOLDER_PATTERN.search(value)
    if not match:
        return value

    index = int(match.group(1)) - 1
    if index < 0 or index >= len(images):
        logger.debug(f"Placeholder {match.group(0)} has no image ({len(images)} available)")
        return value

    return value[:match.start()] + images[index] + value[match.end():]


def resolve_slide(slide: Slide, images: Sequence[str]) -> Slide:
    """Return a resolved copy of one slide."""
    data = slide.model_dump(mode="json", by_alias=True, exclude_none=True)
    return Slide.model_validate(map_strings(data, lambda s: resolve_string(s, images)))


def resolve_placeholders(presentation: Presentation, images: Sequence[str]) -> Presentation:
    """
    Produce a new Presentation with image placeholders substituted.

    Args:
        presentation: Deck as parsed from the model output
        images: Ordered local image references (0-5 entries)

    Returns:
        A deep copy of `presentation` with resolvable tokens replaced
    """
    images = list(images)
    slides: List[Slide] = [resolve_slide(slide, images) for slide in presentation.slides]

    resolved = Presentation(title=presentation.title, slides=slides)

    unresolved = len(find_placeholders(resolved))
    if unresolved:
        logger.warning(
            f"{unresolved} image placeholder(s) left unresolved "
            f"({len(images)} image(s) supplied)"
        )

    return resolved


def find_placeholders(presentation: Presentation) -> List[int]:
    """1-based image numbers referenced anywhere in the deck, in order of appearance."""
    found: List[int] = []

    def collect(value: str) -> str:
        found.extend(int(n) for n in PLACEHOLDER_PATTERN.findall(value))
        return value

    for slide in presentation.slides:
        map_strings(slide.to_dict(), collect)
    return found
