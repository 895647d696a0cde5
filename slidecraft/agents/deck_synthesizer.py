"""
Deck Synthesizer

Summarizes extracted page or document text into a slide deck with Gemini.

Key responsibilities:
- Build the generation prompt (content truncated, image placeholders announced)
- Call Gemini through a pydantic-ai Agent
- Strip/parse/validate the text response into a Presentation
- Map provider failures onto CredentialError / UpstreamError

The Agent returns plain text rather than a structured result: the model is
asked for a bare JSON document and the parser owns all validation, so a
malformed reply surfaces as GenerationFormatError instead of being retried.
"""

from typing import Optional

from pydantic_ai import Agent
from pydantic_ai.exceptions import ModelHTTPError
from pydantic_ai.models import Model

from config.settings import get_settings
from slidecraft.core.deck_parser import parse_presentation
from slidecraft.core.errors import CredentialError, SlideCraftError, UpstreamError
from slidecraft.core.placeholder_resolver import placeholder_token
from slidecraft.models.content import SynthesisRequest
from slidecraft.models.slide import Presentation
from slidecraft.utils.logger import setup_logger

logger = setup_logger(__name__)


SYSTEM_PROMPT = "You are an expert presentation designer."

# Slide schema shown to the model, one line per type
SLIDE_TYPE_GUIDE = """- 'title': { type: 'title', title: string, subtitle: string, keywords: string[] (5 single words) }
- 'statement': { type: 'statement', text: string (powerful single sentence) }
- 'quote': { type: 'quote', text: string, author: string }
- 'big-number': { type: 'big-number', number: string (e.g. "42%", "$1M"), label: string, detail: string }
- 'two-column': { type: 'two-column', title: string, left: string[] (3-4 bullet points), right: string[] (3-4 bullet points) }
- 'grid': { type: 'grid', title: string, items: { icon: string (emoji), label: string }[] (4 items) }
- 'split': { type: 'split', left: { title: string, value: string, label: string }, right: { title: string, value: string, label: string } } (Use for comparisons like Before/After)
- 'end': { type: 'end', title: string, cta: string }"""

IMAGE_SLIDE_GUIDE = "- 'image': { type: 'image', image: string (one of the image placeholders), caption: string }"


class DeckSynthesizer:
    """
    Gemini-backed deck generation.

    Usage:
        synthesizer = DeckSynthesizer()
        presentation = await synthesizer.synthesize(SynthesisRequest(title="...", content="..."))

    Tests pass a pydantic-ai FunctionModel/TestModel as `model` so no network
    call is made.
    """

    def __init__(self, model: Optional[Model] = None, model_name: Optional[str] = None):
        """
        Initialize DeckSynthesizer.

        Args:
            model: Pre-built pydantic-ai model; overrides the Gemini model
            model_name: Gemini model id (defaults to GEMINI_MODEL)
        """
        self.settings = get_settings()
        self.model_name = model_name or self.settings.GEMINI_MODEL
        self._model = model

        # Initialize pydantic-ai agent lazily
        self._agent = None

        logger.info(f"DeckSynthesizer initialized with model={self.model_name}")

    @property
    def agent(self) -> Agent:
        """Lazy-load the pydantic-ai agent."""
        if self._agent is None:
            self._agent = Agent(
                model=self._model or self._build_gemini_model(),
                system_prompt=SYSTEM_PROMPT
            )
        return self._agent

    def _build_gemini_model(self) -> Model:
        """Gemini model authenticated with GEMINI_API_KEY."""
        if not self.settings.GEMINI_API_KEY:
            raise CredentialError(
                "Gemini API key not configured. Please add GEMINI_API_KEY to .env"
            )

        from pydantic_ai.models.google import GoogleModel
        from pydantic_ai.providers.google import GoogleProvider

        return GoogleModel(
            self.model_name,
            provider=GoogleProvider(api_key=self.settings.GEMINI_API_KEY)
        )

    def build_prompt(self, request: SynthesisRequest) -> str:
        """Fill the instruction template with the request fields."""
        limit = self.settings.GENERATION_CONTENT_LIMIT
        content = request.content[:limit] if request.content else ""

        type_guide = SLIDE_TYPE_GUIDE
        image_rules = ""
        if request.image_count > 0:
            tokens = ", ".join(placeholder_token(n) for n in range(1, request.image_count + 1))
            type_guide = f"{SLIDE_TYPE_GUIDE}\n{IMAGE_SLIDE_GUIDE}"
            image_rules = (
                f"\n    The user supplied {request.image_count} image(s). Include one 'image' slide per image "
                f"and set its 'image' field to exactly one of these placeholders: {tokens}.\n"
            )

        return f"""
    Create a structured presentation based on the following content:

    Title: {request.title}
    Description: {request.description}
    Content: {content}
    Source URL: {request.url}
    User Notes: {request.notes}

    Generate a JSON object with a 'presentation' key containing:
    1. 'title': The main title of the deck.
    2. 'slides': An array of 5-8 slides.

    Each slide MUST have a 'type' and specific fields based on the type. Use a variety of these types to make the deck engaging:

    Types:
{type_guide}
{image_rules}
    Ensure the content is concise, professional, and impactful.

    Generate ONLY the JSON, no markdown formatting or explanations."""

    async def synthesize(self, request: SynthesisRequest) -> Presentation:
        """
        Generate a Presentation for the request.

        Raises:
            CredentialError: API key missing or rejected
            UpstreamError: any other failure talking to Gemini
            GenerationFormatError: the reply is not a valid presentation
        """
        prompt = self.build_prompt(request)
        logger.info(
            f"Synthesizing deck: title='{request.title[:60]}', "
            f"content_chars={len(request.content)}, images={request.image_count}"
        )

        try:
            result = await self.agent.run(prompt)
        except SlideCraftError:
            raise
        except ModelHTTPError as e:
            logger.error(f"Gemini returned HTTP {e.status_code}: {e.message}")
            if e.status_code in (401, 403) or "API key" in str(e.body or ""):
                raise CredentialError(
                    "Invalid API key. Please check your Gemini API key"
                ) from e
            raise UpstreamError(
                f"Failed to generate presentation: {e.message}",
                details={"status_code": e.status_code}
            ) from e
        except Exception as e:
            logger.error(f"Deck generation failed: {type(e).__name__}: {e}")
            if "API key" in str(e):
                raise CredentialError(
                    "Invalid API key. Please check your Gemini API key"
                ) from e
            raise UpstreamError(f"Failed to generate presentation: {e}") from e

        return parse_presentation(result.output)
