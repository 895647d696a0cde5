"""
Content Models for SlideCraft

Request/response shapes for the content pipeline:
fetch (URL) / extract (document) -> synthesize -> export.
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from slidecraft.models.slide import Presentation


class ScrapeRequest(BaseModel):
    """Body of POST /api/scrape."""
    url: str = Field("", description="Page to fetch")


class ScrapedContent(BaseModel):
    """Metadata and body text extracted from a web page."""
    title: str = Field("", description="og:title, twitter:title or <title>")
    description: str = Field("", description="og/twitter/meta description")
    image: str = Field("", description="og:image or twitter:image URL")
    content: str = Field("", description="Whitespace-collapsed main text, truncated")
    url: str = Field(..., description="Normalized URL that was fetched")


class DocumentText(BaseModel):
    """Plain text extracted from an uploaded document."""
    text: str
    filename: Optional[str] = None
    page_count: Optional[int] = Field(None, description="Pages read (PDF only)")


class SynthesisRequest(BaseModel):
    """
    Input of the Deck Synthesizer.

    `images` is optional: when supplied, the placeholders the model emitted
    are resolved against it before the deck is returned.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    description: str = ""
    content: str = ""
    url: str = ""
    notes: str = ""
    image_count: int = Field(0, ge=0, le=5, alias="imageCount")
    images: Optional[List[str]] = Field(None, max_length=5)

    @property
    def has_source(self) -> bool:
        """True if there is anything for the model to summarize."""
        return any(part.strip() for part in (self.title, self.description, self.content))


class GenerateResponse(BaseModel):
    """Body of a successful POST /api/generate."""
    presentation: Presentation


class ExportRequest(BaseModel):
    """Body shared by the render and export endpoints."""

    model_config = ConfigDict(populate_by_name=True)

    presentation: Presentation
    template: Optional[str] = Field(None, description="minimalist, hybrid or maximalist")
    accent_color: Optional[str] = Field(None, alias="accentColor")


class SlidesExportResponse(BaseModel):
    """Result of the (not yet integrated) external slide service export."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    text_content: str = Field(..., alias="textContent")
    presentation_url: Optional[str] = Field(None, alias="presentationUrl")
    instructions: List[str] = Field(default_factory=list)
