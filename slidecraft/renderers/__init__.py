"""
Renderers Package for SlideCraft

Theme definitions and the HTML slide renderer.
"""

from .themes import THEME_REGISTRY, ThemeConfig, get_theme_config, get_available_themes
from .html import SlideRenderer, render_presentation_html

__all__ = [
    'THEME_REGISTRY',
    'ThemeConfig',
    'get_theme_config',
    'get_available_themes',
    'SlideRenderer',
    'render_presentation_html'
]
