"""
Deck Generation Pipeline

Orchestrates one generation request end to end:

    source (URL / document text / pasted text)
      -> ContentFetcher (URL only)
      -> DeckSynthesizer
      -> placeholder resolution against the user's images
      -> hand-off to the DeckSession

While the model call is pending a cosmetic progress ticker reports an
ever-increasing percentage capped below 100. The ticker is always cancelled
when the call settles. A result that arrives after a newer request (or a
reset) is discarded by the session's generation guard.
"""

import asyncio
from typing import Awaitable, Callable, List, Optional

from config.settings import get_settings
from slidecraft.agents.deck_synthesizer import DeckSynthesizer
from slidecraft.clients.content_fetcher import ContentFetcher
from slidecraft.core.errors import SlideCraftError, ValidationError
from slidecraft.core.placeholder_resolver import resolve_placeholders
from slidecraft.models.content import SynthesisRequest
from slidecraft.models.session import DeckSession
from slidecraft.models.slide import Presentation
from slidecraft.utils.logger import setup_logger

logger = setup_logger(__name__)

ProgressCallback = Callable[[int], Awaitable[None]]


class DeckPipeline:
    """
    Glue between the content sources, the synthesizer and a session.

    Usage:
        pipeline = DeckPipeline()
        presentation = await pipeline.generate(SynthesisRequest(content="..."))
        await pipeline.run(session, url="https://example.com", on_progress=send_progress)
    """

    def __init__(
        self,
        synthesizer: Optional[DeckSynthesizer] = None,
        fetcher: Optional[ContentFetcher] = None
    ):
        self.settings = get_settings()
        self.synthesizer = synthesizer or DeckSynthesizer()
        self.fetcher = fetcher or ContentFetcher()

    # ========== Request assembly ==========

    async def build_request(
        self,
        url: Optional[str] = None,
        text: Optional[str] = None,
        title: str = "",
        notes: str = "",
        image_count: int = 0
    ) -> SynthesisRequest:
        """
        Turn a user's source into a SynthesisRequest.

        A URL is fetched and its metadata used; otherwise `text` (pasted or
        extracted from a document) becomes the content.
        """
        if url:
            page = await self.fetcher.fetch(url)
            return SynthesisRequest(
                title=page.title,
                description=page.description,
                content=page.content,
                url=page.url,
                notes=notes,
                image_count=image_count,
            )

        return SynthesisRequest(
            title=title,
            content=text or "",
            notes=notes,
            image_count=image_count,
        )

    def validate_images(self, images: Optional[List[str]]) -> List[str]:
        images = [ref for ref in (images or []) if ref]
        if len(images) > self.settings.MAX_USER_IMAGES:
            raise ValidationError(
                f"At most {self.settings.MAX_USER_IMAGES} images can be attached"
            )
        return images

    # ========== Generation ==========

    async def generate(
        self,
        request: SynthesisRequest,
        images: Optional[List[str]] = None
    ) -> Presentation:
        """
        Synthesize a deck and resolve image placeholders.

        Stateless; used directly by POST /api/generate.
        """
        if not request.has_source:
            raise ValidationError("Content is required to generate a presentation")

        images = self.validate_images(images)
        if images and request.image_count == 0:
            request = request.model_copy(update={"image_count": len(images)})

        presentation = await self.synthesizer.synthesize(request)
        if images:
            presentation = resolve_placeholders(presentation, images)
        return presentation

    async def run(
        self,
        session: DeckSession,
        url: Optional[str] = None,
        text: Optional[str] = None,
        title: str = "",
        notes: str = "",
        images: Optional[List[str]] = None,
        on_progress: Optional[ProgressCallback] = None
    ) -> bool:
        """
        Run a generation request against a session.

        Input errors (no source, too many images) are raised before the
        session changes state. Fetch and generation errors move the session
        to FAILED and are re-raised for the caller to report.

        Returns:
            True if the new deck was installed, False if the result was stale
        """
        if not url and not (text or "").strip() and not title.strip():
            raise ValidationError("Please provide a URL or some content to summarize")
        images = self.validate_images(images)

        generation = session.begin_synthesis(images)
        logger.info(f"Session {session.id}: synthesis #{generation} started")

        ticker = None
        if on_progress is not None:
            ticker = asyncio.create_task(self._tick_progress(on_progress))

        try:
            request = await self.build_request(
                url=url, text=text, title=title, notes=notes, image_count=len(images)
            )
            presentation = await self.generate(request, images)
        except SlideCraftError as e:
            if session.fail_synthesis(generation, e.message):
                logger.warning(f"Session {session.id}: synthesis #{generation} failed: {e.message}")
                raise
            logger.info(f"Session {session.id}: dropping failure of stale synthesis #{generation}")
            return False
        except Exception as e:
            logger.error(f"Session {session.id}: unexpected synthesis error: {type(e).__name__}: {e}")
            session.fail_synthesis(generation, "Failed to generate presentation")
            raise
        finally:
            if ticker is not None:
                ticker.cancel()

        if not session.complete_synthesis(generation, presentation):
            logger.info(f"Session {session.id}: dropping stale synthesis #{generation}")
            return False

        logger.info(
            f"Session {session.id}: synthesis #{generation} ready with "
            f"{presentation.slide_count} slides"
        )
        return True

    async def _tick_progress(self, on_progress: ProgressCallback) -> None:
        progress = 0
        cap = self.settings.PROGRESS_CAP
        while True:
            await asyncio.sleep(self.settings.PROGRESS_TICK_SECONDS)
            progress = min(progress + self.settings.PROGRESS_STEP, cap)
            try:
                await on_progress(progress)
            except Exception as e:
                logger.debug(f"Progress update not delivered: {e}")
                return
