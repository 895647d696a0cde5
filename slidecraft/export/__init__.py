"""
Export Package for SlideCraft

PDF rasterization and the external slide service outline.
"""

from .pdf_exporter import PdfExporter, export_presentation_pdf
from .outline_exporter import format_presentation_outline, export_to_slide_service

__all__ = [
    'PdfExporter',
    'export_presentation_pdf',
    'format_presentation_outline',
    'export_to_slide_service'
]
