"""
PDF Export

Rasterizes each slide to an image at 2x the 960x540 logical size and
assembles the pages into a single PDF with Pillow. Pages are pictures of the
slides: there is no selectable text layer.

Layout is an approximation of the HTML themes (colours, sizes, alignment);
user font-size and position overrides are honoured, rotations are not.
"""

import io
from pathlib import Path
from typing import List, NamedTuple, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from slidecraft.core.errors import ValidationError
from slidecraft.models.slide import Presentation, Slide, SlideType
from slidecraft.renderers.themes import (
    SLIDE_HEIGHT,
    SLIDE_WIDTH,
    ThemeColors,
    get_theme_config,
)
from slidecraft.utils.logger import setup_logger

logger = setup_logger(__name__)

SCALE = 2
PAGE_SIZE = (SLIDE_WIDTH * SCALE, SLIDE_HEIGHT * SCALE)
PADDING = 64 * SCALE
LINE_SPACING = 1.25
BLOCK_GAP = 18 * SCALE

FONT_CANDIDATES = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
    "/Library/Fonts/Arial.ttf",
]
BOLD_FONT_CANDIDATES = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
    "/Library/Fonts/Arial Bold.ttf",
]

# Slide types laid out centred on the page
CENTERED_TYPES = {
    SlideType.TITLE, SlideType.STATEMENT, SlideType.QUOTE,
    SlideType.BIG_NUMBER, SlideType.IMAGE, SlideType.END,
}


class TextBlock(NamedTuple):
    key: str
    text: str
    size: float
    color: str
    bold: bool = False
    column: int = 0  # 0 = full width, 1 = left, 2 = right


def _load_font(size: int, bold: bool = False) -> ImageFont.ImageFont:
    for path in (BOLD_FONT_CANDIDATES if bold else FONT_CANDIDATES):
        if Path(path).exists():
            try:
                return ImageFont.truetype(path, size=size)
            except OSError:
                continue
    return ImageFont.load_default(size=size)


def _hex_to_rgb(value: str) -> Tuple[int, int, int]:
    value = value.lstrip("#")
    if len(value) == 3:
        value = "".join(c * 2 for c in value)
    try:
        return tuple(int(value[i:i + 2], 16) for i in (0, 2, 4))
    except ValueError:
        return (0, 0, 0)


class PdfExporter:
    """
    Render a Presentation to PDF bytes for one theme.

    Usage:
        pdf_bytes = PdfExporter("maximalist").export(presentation)
    """

    def __init__(self, theme: Optional[str] = None, accent_color: Optional[str] = None):
        self.theme = get_theme_config(theme)
        self.colors: ThemeColors = self.theme.palette(accent_color)
        self.typography = self.theme.typography

    def export(self, presentation: Presentation) -> bytes:
        """One page per slide, in deck order."""
        if not presentation.slides:
            raise ValidationError("Invalid presentation data: no slides to export")

        pages = [self.render_slide(slide) for slide in presentation.slides]
        buffer = io.BytesIO()
        pages[0].save(
            buffer,
            format="PDF",
            save_all=True,
            append_images=pages[1:],
            resolution=72.0 * SCALE,
        )
        logger.info(
            f"Exported '{presentation.title}' to PDF: {len(pages)} pages, "
            f"theme={self.theme.theme_id}"
        )
        return buffer.getvalue()

    def render_slide(self, slide: Slide) -> Image.Image:
        """Rasterize a single slide."""
        image = Image.new("RGB", PAGE_SIZE, _hex_to_rgb(self.colors.background))
        draw = ImageDraw.Draw(image)

        if slide.type == SlideType.IMAGE:
            self._draw_image_frame(draw)

        blocks = self._blocks(slide)
        if slide.type in CENTERED_TYPES:
            self._draw_centered(draw, slide, blocks)
        else:
            self._draw_flow(draw, slide, blocks)
        return image

    # ========== Content ==========

    def _blocks(self, slide: Slide) -> List[TextBlock]:
        t = self.typography
        c = self.colors

        def heading(key, value, color=c.text):
            return TextBlock(key, self._case(value), t.heading, color, True)

        blocks: List[TextBlock] = []

        if slide.type == SlideType.TITLE:
            blocks.append(TextBlock("title", self._case(slide.title or ""), t.hero, c.text, True))
            if slide.subtitle:
                blocks.append(TextBlock("subtitle", slide.subtitle, t.body, c.muted))
            if slide.keywords:
                blocks.append(TextBlock("keywords", "  /  ".join(slide.keywords), t.small, c.accent))
        elif slide.type == SlideType.STATEMENT:
            blocks.append(TextBlock("text", slide.text or slide.detail or "", t.heading, c.text, True))
        elif slide.type == SlideType.QUOTE:
            blocks.append(TextBlock("text", f'"{slide.text or ""}"', t.heading, c.text))
            if slide.author:
                blocks.append(TextBlock("author", f"- {slide.author}", t.body, c.accent))
        elif slide.type == SlideType.BIG_NUMBER:
            blocks.append(TextBlock("number", slide.number or "", t.hero * 2, c.accent, True))
            if slide.label:
                blocks.append(TextBlock("label", slide.label, t.heading, c.text, True))
            if slide.detail:
                blocks.append(TextBlock("detail", slide.detail, t.body, c.muted))
        elif slide.type in (SlideType.TWO_COLUMN, SlideType.SPLIT):
            if slide.title:
                blocks.append(heading("title", slide.title, c.accent))
            for column, side in ((1, "left"), (2, "right")):
                value = getattr(slide, side)
                if isinstance(value, list):
                    blocks.extend(
                        TextBlock(f"{side}_{i}", f"- {bullet}", t.body, c.text, column=column)
                        for i, bullet in enumerate(value)
                    )
                elif value is not None:
                    blocks.append(TextBlock(f"{side}_title", value.title, t.body, c.muted, column=column))
                    blocks.append(TextBlock(f"{side}_value", value.value, t.hero, c.accent, True, column))
                    blocks.append(TextBlock(f"{side}_label", value.label, t.small, c.text, column=column))
        elif slide.type == SlideType.GRID:
            if slide.title:
                blocks.append(heading("title", slide.title))
            for i, item in enumerate(slide.items or []):
                blocks.append(TextBlock(
                    f"grid_{i}", f"{item.icon} {item.label}".strip(), t.body, c.text,
                    column=1 if i % 2 == 0 else 2
                ))
        elif slide.type == SlideType.IMAGE:
            if slide.caption:
                blocks.append(TextBlock("caption", slide.caption, t.body, c.accent))
        elif slide.type == SlideType.END:
            blocks.append(TextBlock("title", self._case(slide.title or ""), t.hero, c.text, True))
            if slide.cta:
                blocks.append(TextBlock("cta", slide.cta, t.body, c.accent))
        else:
            if slide.title:
                blocks.append(heading("title", slide.title, c.accent))
            if slide.text:
                blocks.append(TextBlock("text", slide.text, t.body, c.text))

        return [b for b in blocks if b.text]

    def _case(self, text: str) -> str:
        return text.upper() if self.typography.uppercase_headings else text

    # ========== Drawing ==========

    def _font_for(self, slide: Slide, block: TextBlock) -> ImageFont.ImageFont:
        size = (slide.font_sizes or {}).get(block.key, block.size)
        return _load_font(max(int(size * SCALE), 6), block.bold)

    def _offset(self, slide: Slide, key: str) -> Tuple[float, float]:
        offset = (slide.positions or {}).get(key)
        if offset is None:
            return 0.0, 0.0
        return offset.x * SCALE, offset.y * SCALE

    @staticmethod
    def _wrap(draw: ImageDraw.ImageDraw, text: str, font, max_width: float) -> List[str]:
        lines: List[str] = []
        for paragraph in text.split("\n"):
            current = ""
            for word in paragraph.split():
                candidate = f"{current} {word}".strip()
                if current and draw.textlength(candidate, font=font) > max_width:
                    lines.append(current)
                    current = word
                else:
                    current = candidate
            lines.append(current)
        return lines

    @staticmethod
    def _line_height(font) -> float:
        if hasattr(font, "getmetrics"):
            ascent, descent = font.getmetrics()
        else:
            _, top, _, bottom = font.getbbox("Ag")
            ascent, descent = bottom - top, 0
        return (ascent + descent) * LINE_SPACING

    def _measure(self, draw, slide, block, max_width):
        font = self._font_for(slide, block)
        lines = self._wrap(draw, block.text, font, max_width)
        return font, lines, len(lines) * self._line_height(font)

    def _draw_block(self, draw, slide, block, font, lines, x, y, width, align="left") -> None:
        dx, dy = self._offset(slide, block.key)
        fill = _hex_to_rgb(block.color)
        line_height = self._line_height(font)
        for i, line in enumerate(lines):
            line_x = x
            if align == "center":
                line_x = x + (width - draw.textlength(line, font=font)) / 2
            draw.text((line_x + dx, y + dy + i * line_height), line, font=font, fill=fill)

    def _draw_centered(self, draw, slide: Slide, blocks: List[TextBlock]) -> None:
        width = PAGE_SIZE[0] - 2 * PADDING
        measured = [(b, *self._measure(draw, slide, b, width)) for b in blocks]
        total = sum(height for *_, height in measured) + BLOCK_GAP * max(len(measured) - 1, 0)

        if slide.type == SlideType.IMAGE:
            y = PAGE_SIZE[1] - PADDING - total
        else:
            y = (PAGE_SIZE[1] - total) / 2

        for block, font, lines, height in measured:
            self._draw_block(draw, slide, block, font, lines, PADDING, y, width, align="center")
            y += height + BLOCK_GAP

    def _draw_flow(self, draw, slide: Slide, blocks: List[TextBlock]) -> None:
        full_width = PAGE_SIZE[0] - 2 * PADDING
        column_gap = 48 * SCALE
        column_width = (full_width - column_gap) / 2

        y = PADDING
        for block in (b for b in blocks if b.column == 0):
            font, lines, height = self._measure(draw, slide, block, full_width)
            self._draw_block(draw, slide, block, font, lines, PADDING, y, full_width)
            y += height + BLOCK_GAP

        for column in (1, 2):
            x = PADDING if column == 1 else PADDING + column_width + column_gap
            column_y = y
            for block in (b for b in blocks if b.column == column):
                font, lines, height = self._measure(draw, slide, block, column_width)
                self._draw_block(draw, slide, block, font, lines, x, column_y, column_width)
                column_y += height + BLOCK_GAP

    def _draw_image_frame(self, draw) -> None:
        """Framed panel standing in for the picture; images are not fetched."""
        box = (PADDING, PADDING, PAGE_SIZE[0] - PADDING, PAGE_SIZE[1] - PADDING - 80 * SCALE)
        draw.rounded_rectangle(
            box, radius=12 * SCALE,
            fill=_hex_to_rgb(self.colors.panel),
            outline=_hex_to_rgb(self.colors.accent),
            width=2 * SCALE,
        )


def export_presentation_pdf(
    presentation: Presentation,
    theme: Optional[str] = None,
    accent_color: Optional[str] = None
) -> bytes:
    """Convenience wrapper used by the API layer."""
    return PdfExporter(theme, accent_color).export(presentation)
