"""
SlideCraft - AI Slide Deck Generator
Main entry point for the FastAPI application.

Paste a URL or upload a document; Gemini summarizes it into a slide deck that
is then edited over a WebSocket session and exported with one of three
themes.

REST (stateless):
- POST /api/scrape          URL -> title/description/image/content
- POST /api/parse-document  PDF/text/markdown upload -> text
- POST /api/generate        content -> presentation
- POST /api/render          presentation -> themed HTML
- POST /api/export/pdf      presentation -> PDF
- POST /api/export-slides   presentation -> outline + instructions

WebSocket:
- /ws?session_id=...        generation and editing session
"""

import os
import re
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, File, Request, UploadFile, WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, Response
import uvicorn
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Configure Logfire early in startup
from slidecraft.utils.logfire_config import configure_logfire, instrument_agents
configure_logfire()
instrument_agents()

from slidecraft.clients.content_fetcher import ContentFetcher
from slidecraft.clients.document_extractor import extract_document_text
from slidecraft.core.deck_pipeline import DeckPipeline
from slidecraft.core.errors import SlideCraftError
from slidecraft.export.outline_exporter import export_to_slide_service
from slidecraft.export.pdf_exporter import export_presentation_pdf
from slidecraft.handlers.websocket import WebSocketHandler
from slidecraft.models.content import (
    DocumentText,
    ExportRequest,
    GenerateResponse,
    ScrapedContent,
    ScrapeRequest,
    SlidesExportResponse,
    SynthesisRequest,
)
from slidecraft.renderers.html import render_presentation_html
from slidecraft.renderers.themes import get_available_themes, get_theme_config
from slidecraft.utils.logger import setup_logger
from config.settings import get_settings

# Initialize
logger = setup_logger(__name__)
settings = get_settings()

SERVICE_NAME = "slidecraft"
SERVICE_VERSION = "1.0.0"

# Global instances (reused across requests/connections)
_handler_instance = None
_pipeline_instance = None


def get_pipeline() -> DeckPipeline:
    """Get or create the global generation pipeline."""
    global _pipeline_instance
    if _pipeline_instance is None:
        _pipeline_instance = DeckPipeline()
    return _pipeline_instance


def get_handler() -> WebSocketHandler:
    """Get or create the global WebSocket handler instance."""
    global _handler_instance
    if _handler_instance is None:
        _handler_instance = WebSocketHandler(pipeline=get_pipeline())
        logger.info("WebSocketHandler initialized")
    return _handler_instance


def get_content_fetcher() -> ContentFetcher:
    return get_pipeline().fetcher


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events."""
    logger.info("Starting SlideCraft API...")

    if not settings.API_ENABLED:
        logger.warning("API_ENABLED is set to False - SlideCraft service is DISABLED")
        logger.warning("WebSocket connections will be rejected")
        yield
        logger.info("Shutting down SlideCraft API (was disabled)...")
        return

    # A missing key only disables generation; scraping, editing and export still work
    try:
        settings.validate_settings()
        logger.info("Configuration validated")
    except ValueError as e:
        logger.warning(f"{e}")
        logger.warning("Set GEMINI_API_KEY=your-key-here in .env to enable deck generation")

    try:
        get_handler()
    except Exception as e:
        logger.error(f"FATAL: Failed to initialize handler: {str(e)}")
        raise RuntimeError("Cannot start without WebSocket handler.")

    yield
    logger.info("Shutting down SlideCraft API...")


app = FastAPI(
    title="SlideCraft API",
    version=SERVICE_VERSION,
    description="AI slide deck generation from web pages and documents",
    lifespan=lifespan
)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SlideCraftError)
async def slidecraft_error_handler(request: Request, exc: SlideCraftError):
    """Translate domain errors into {"error": message} with the error's status."""
    logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies use the same {"error": message} shape."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"Invalid request: {location} {first.get('msg', '')}".strip()
    return JSONResponse(
        status_code=400,
        content={"error": message, "details": {"errors": jsonable_encoder(errors)}}
    )


# ========== Content ==========

@app.post("/api/scrape", response_model=ScrapedContent)
async def scrape(body: ScrapeRequest, fetcher: ContentFetcher = Depends(get_content_fetcher)):
    """Fetch a web page and extract its metadata and main text."""
    return await fetcher.fetch(body.url)


@app.post("/api/parse-document", response_model=DocumentText)
async def parse_document(file: Optional[UploadFile] = File(None)):
    """Extract plain text from an uploaded PDF, text or markdown file."""
    data = await file.read() if file is not None else b""
    return extract_document_text(
        data,
        filename=file.filename if file is not None else None,
        content_type=file.content_type if file is not None else None
    )


@app.post("/api/generate", response_model=GenerateResponse, response_model_by_alias=True,
          response_model_exclude_none=True)
async def generate(body: SynthesisRequest, pipeline: DeckPipeline = Depends(get_pipeline)):
    """Summarize content into a presentation; resolves image placeholders when images are given."""
    presentation = await pipeline.generate(body, body.images)
    return GenerateResponse(presentation=presentation)


# ========== Rendering & export ==========

@app.post("/api/render", response_class=HTMLResponse)
async def render(body: ExportRequest):
    """Render a presentation as a standalone HTML document."""
    return render_presentation_html(body.presentation, body.template, body.accent_color)


@app.post("/api/export/pdf")
async def export_pdf(body: ExportRequest):
    """Export a presentation as a PDF, one raster page per slide."""
    pdf_bytes = export_presentation_pdf(body.presentation, body.template, body.accent_color)
    filename = re.sub(r"[^A-Za-z0-9 _.-]", "", body.presentation.title or "").strip() or "presentation"
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}.pdf"'}
    )


@app.post("/api/export-slides", response_model=SlidesExportResponse, response_model_by_alias=True)
async def export_slides(body: ExportRequest):
    """Return a text outline and instructions for importing into an external slide service."""
    return export_to_slide_service(body.presentation, body.template, body.accent_color)


# ========== Session ==========

@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket, session_id: str):
    """
    Handle a deck session connection.

    Args:
        websocket: The WebSocket connection
        session_id: Session identifier chosen by the client
    """
    if not settings.API_ENABLED:
        logger.warning(f"WebSocket connection rejected - API is disabled (session: {session_id})")
        await websocket.close(code=1013, reason="Service temporarily unavailable - API disabled")
        return

    if not session_id:
        logger.error("WebSocket connection attempted without session_id")
        await websocket.close(code=1008, reason="Missing required parameters")
        return

    try:
        handler = get_handler()
    except Exception as init_error:
        logger.error(f"Failed to get WebSocketHandler: {str(init_error)}", exc_info=True)
        await websocket.close(code=1011, reason="Server error during initialization")
        return

    try:
        await handler.handle_connection(websocket, session_id)
    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected: session={session_id}")
    except Exception as e:
        logger.error(f"WebSocket error: session={session_id}, error={str(e)}", exc_info=True)
        if websocket.client_state.value <= 1:  # CONNECTING=0, CONNECTED=1
            await websocket.close(code=1011)


# ========== Info ==========

@app.get("/health")
async def health_check():
    """Basic health check endpoint."""
    active_sessions = 0
    if _handler_instance is not None:
        active_sessions = _handler_instance.session_manager.active_count

    return {
        "status": "healthy" if settings.API_ENABLED else "disabled",
        "api_enabled": settings.API_ENABLED,
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "environment": settings.APP_ENV,
        "generation_available": settings.has_ai_service,
        "model": settings.GEMINI_MODEL,
        "active_sessions": active_sessions,
    }


@app.get("/themes")
async def list_themes():
    """List available themes and their palettes."""
    themes = [get_theme_config(theme_id) for theme_id in get_available_themes()]
    return {
        "default": settings.DEFAULT_THEME,
        "themes": [
            {
                "id": theme.theme_id,
                "name": theme.name,
                "description": theme.description,
                "uses_accent_color": theme.uses_accent_color,
                "colors": theme.colors.model_dump(),
            }
            for theme in themes
        ]
    }


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "SlideCraft API",
        "description": "AI-powered slide deck generation from web pages and documents",
        "version": SERVICE_VERSION,
        "endpoints": {
            "websocket": "/ws?session_id={session_id}",
            "scrape": "POST /api/scrape",
            "parse_document": "POST /api/parse-document",
            "generate": "POST /api/generate",
            "render": "POST /api/render",
            "export_pdf": "POST /api/export/pdf",
            "export_slides": "POST /api/export-slides",
            "health": "/health",
            "themes": "/themes"
        },
        "themes": get_available_themes()
    }


if __name__ == "__main__":
    port = int(os.getenv("PORT", str(settings.API_PORT)))
    log_level = "debug" if settings.DEBUG else "info"

    uvicorn.run(
        "main:app",
        host=settings.API_HOST,
        port=port,
        log_level=log_level,
        reload=settings.DEBUG
    )
