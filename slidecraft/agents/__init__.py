"""
Agents Package for SlideCraft

Contains the Gemini-backed deck synthesizer.
"""

from .deck_synthesizer import DeckSynthesizer

__all__ = [
    'DeckSynthesizer'
]
