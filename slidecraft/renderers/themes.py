"""
Theme Configuration for SlideCraft

Three visual themes share one slide template; a ThemeConfig only carries the
palette and typography each theme plugs into it. Unknown theme ids fall back
to the default theme.
"""

from typing import Dict, List, Optional
from pydantic import BaseModel, Field

SLIDE_WIDTH = 960
SLIDE_HEIGHT = 540

BASE_FONT = '"Inter", -apple-system, BlinkMacSystemFont, sans-serif'


class ThemeColors(BaseModel):
    """Colour palette for a theme."""
    background: str = Field(..., description="Slide background")
    text: str = Field(..., description="Body text colour")
    muted: str = Field(..., description="Secondary text colour")
    accent: str = Field(..., description="Accent used for rules, numbers and CTAs")
    panel: str = Field(..., description="Background of cards and grid tiles")


class ThemeTypography(BaseModel):
    """Base font sizes in pixels at the 960x540 logical slide size."""
    family: str = BASE_FONT
    hero: int = 64
    heading: int = 40
    body: int = 22
    small: int = 16
    heading_weight: int = 700
    uppercase_headings: bool = False


class ThemeConfig(BaseModel):
    """A complete theme definition."""
    theme_id: str
    name: str
    description: str
    colors: ThemeColors
    typography: ThemeTypography = Field(default_factory=ThemeTypography)
    uses_accent_color: bool = Field(
        False,
        description="True if the user-chosen accent colour overrides colors.accent"
    )

    def palette(self, accent_color: Optional[str] = None) -> ThemeColors:
        """Colours to render with, honouring a user accent where the theme allows it."""
        if accent_color and self.uses_accent_color:
            return self.colors.model_copy(update={"accent": accent_color})
        return self.colors


THEME_REGISTRY: Dict[str, ThemeConfig] = {
    "minimalist": ThemeConfig(
        theme_id="minimalist",
        name="Stark",
        description="Pure black and white, Swiss design influence",
        colors=ThemeColors(
            background="#FFFFFF",
            text="#111111",
            muted="#666666",
            accent="#111111",
            panel="#F5F5F5",
        ),
        typography=ThemeTypography(hero=72, heading=44, body=22, small=15,
                                   heading_weight=800, uppercase_headings=False),
    ),
    "hybrid": ThemeConfig(
        theme_id="hybrid",
        name="Hybrid",
        description="Clean corporate layout driven by a single accent colour",
        colors=ThemeColors(
            background="#FFFFFF",
            text="#1A1A1A",
            muted="#5E6C84",
            accent="#0052CC",
            panel="#F4F5F7",
        ),
        uses_accent_color=True,
    ),
    "maximalist": ThemeConfig(
        theme_id="maximalist",
        name="Maximalist",
        description="Loud neo-brutalist colour blocks",
        colors=ThemeColors(
            background="#FFFBF5",
            text="#1A1A1A",
            muted="#333333",
            accent="#FF90E8",
            panel="#FFC900",
        ),
        typography=ThemeTypography(hero=80, heading=48, body=24, small=16,
                                   heading_weight=900, uppercase_headings=True),
    ),
}

DEFAULT_THEME_ID = "minimalist"


def is_known_theme(theme_id: Optional[str]) -> bool:
    return theme_id in THEME_REGISTRY


def get_theme_config(theme_id: Optional[str]) -> ThemeConfig:
    """Get a theme by id, falling back to the default theme."""
    return THEME_REGISTRY.get(theme_id or DEFAULT_THEME_ID, THEME_REGISTRY[DEFAULT_THEME_ID])


def get_available_themes() -> List[str]:
    """List available theme ids."""
    return list(THEME_REGISTRY.keys())
