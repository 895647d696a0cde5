"""
External Slide Service Export

Direct upload to an external slide service is not integrated yet. The export
endpoint answers with a static instructional message plus a plain-text
outline of the deck that can be pasted into any slide tool.
"""

from typing import List, Optional

from slidecraft.core.errors import ValidationError
from slidecraft.models.content import SlidesExportResponse
from slidecraft.models.slide import Presentation, StatCard

EXPORT_MESSAGE = "Google Slides export is coming soon! For now, you can use the PDF export."

EXPORT_INSTRUCTIONS = [
    "1. Download the PDF version",
    "2. Go to Google Slides and create a new presentation",
    "3. Use File > Import slides to import from the PDF",
    "Or use a third-party tool to convert PDF to Google Slides",
]


def _column_lines(side: str, value) -> List[str]:
    if isinstance(value, StatCard):
        return [f"{side}: {value.title} | {value.value} | {value.label}"]
    return [f"{side}:"] + [f"  - {bullet}" for bullet in value]


def format_presentation_outline(
    presentation: Presentation,
    template: Optional[str] = None,
    accent_color: Optional[str] = None
) -> str:
    """Markdown-ish outline: a header block, then one section per slide."""
    lines = [
        f"# {presentation.title}",
        "",
        f"Template: {template}",
        f"Accent Color: {accent_color}",
        "",
        "---",
        "",
    ]

    for index, slide in enumerate(presentation.slides, start=1):
        lines.append(f"## Slide {index}")
        lines.append(f"Type: {slide.type.value}")
        lines.append(f"Title: {slide.title or 'Untitled'}")
        if slide.subtitle:
            lines.append(f"Subtitle: {slide.subtitle}")
        if slide.text:
            lines.append(f"Text: {slide.text}")
        for side in ("left", "right"):
            value = getattr(slide, side)
            if value is not None:
                lines.extend(_column_lines(side.capitalize(), value))
        if slide.items:
            lines.append("Items:")
            lines.extend(f"  - {f'{item.icon} {item.label}'.strip()}" for item in slide.items)
        lines.extend(["", "---", ""])

    return "\n".join(lines) + "\n"


def export_to_slide_service(
    presentation: Optional[Presentation],
    template: Optional[str] = None,
    accent_color: Optional[str] = None
) -> SlidesExportResponse:
    """Build the instructional response for an external slide service export."""
    if presentation is None:
        raise ValidationError("Invalid presentation data")

    return SlidesExportResponse(
        success=True,
        message=EXPORT_MESSAGE,
        text_content=format_presentation_outline(presentation, template, accent_color),
        presentation_url=None,
        instructions=list(EXPORT_INSTRUCTIONS),
    )
