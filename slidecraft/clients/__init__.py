"""
Clients Package for SlideCraft

Contains the content sources: web pages and uploaded documents.
"""

from .content_fetcher import ContentFetcher
from .document_extractor import extract_document_text

__all__ = [
    'ContentFetcher',
    'extract_document_text'
]
