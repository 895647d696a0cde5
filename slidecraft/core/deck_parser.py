"""
Deck Parser

Turns the raw text returned by the generation service into a Presentation.
The model output is untrusted: anything that is not a JSON object of the
shape {"presentation": {...}} with valid slides raises GenerationFormatError.
"""

import json
import re
from typing import Any, Dict

import pydantic

from slidecraft.core.errors import GenerationFormatError
from slidecraft.models.slide import Presentation
from slidecraft.utils.logger import setup_logger

logger = setup_logger(__name__)

_FENCE_OPEN_JSON = re.compile(r"^```json\n")
_FENCE_OPEN = re.compile(r"^```\n")
_FENCE_CLOSE = re.compile(r"\n```$")


def strip_code_fence(text: str) -> str:
    """
    Remove a markdown code fence the model may have wrapped around its JSON.

    Recognizes "```json\\n...\\n```" and "```\\n...\\n```"; anything else is
    returned trimmed but otherwise unchanged.
    """
    text = text.strip()
    if text.startswith("```json"):
        text = _FENCE_CLOSE.sub("", _FENCE_OPEN_JSON.sub("", text))
    elif text.startswith("```"):
        text = _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", text))
    return text


def parse_generation_output(raw: str) -> Dict[str, Any]:
    """Parse model output into a JSON object, stripping any code fence."""
    if raw is None or not raw.strip():
        raise GenerationFormatError("Model returned an empty response", raw_output=raw)

    cleaned = strip_code_fence(raw)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse JSON from model output: {e}")
        logger.debug(f"Raw model output: {raw[:500]}")
        raise GenerationFormatError(
            "Failed to generate valid presentation data",
            raw_output=raw
        ) from e

    if not isinstance(data, dict):
        raise GenerationFormatError(
            f"Expected a JSON object, got {type(data).__name__}",
            raw_output=raw
        )
    return data


def parse_presentation(raw: str) -> Presentation:
    """
    Parse and validate model output into a Presentation.

    Raises:
        GenerationFormatError: output is not JSON, lacks `presentation`,
            or violates the slide schema
    """
    data = parse_generation_output(raw)

    payload = data.get("presentation")
    if not isinstance(payload, dict):
        raise GenerationFormatError("Invalid response format: missing 'presentation'", raw_output=raw)

    try:
        presentation = Presentation.model_validate(payload)
    except pydantic.ValidationError as e:
        logger.error(f"Model output violates slide schema: {e.error_count()} error(s)")
        raise GenerationFormatError(
            f"Presentation data failed validation: {e.errors()[0]['msg']}",
            raw_output=raw
        ) from e

    logger.info(f"Parsed presentation '{presentation.title}' with {presentation.slide_count} slides")
    return presentation
