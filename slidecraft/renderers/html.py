"""
HTML Slide Renderer

Stateless mapping from Slide -> HTML for a given theme. One Jinja2 template
dispatches on slide type; the theme only supplies colours and type sizes.
Per-field customizations (positions, fontSizes, rotations) are applied as
inline styles keyed by the same field identifiers the editor uses.
"""

from typing import Any, Dict, Optional

from jinja2 import Environment, BaseLoader, select_autoescape
from markupsafe import Markup

from slidecraft.models.slide import Presentation, Slide
from slidecraft.renderers.themes import (
    SLIDE_HEIGHT,
    SLIDE_WIDTH,
    ThemeConfig,
    get_theme_config,
)


SLIDE_TEMPLATE = """
{%- macro field(tag, key, value, size, extra='') -%}
<{{ tag }} class="field" data-field="{{ key }}" style="{{ fstyle(key, size) }}{{ extra }}">{{ value }}</{{ tag }}>
{%- endmacro -%}
<section class="slide slide-{{ slide.type.value }}" data-index="{{ index }}">
{%- if slide.type.value == 'title' %}
  <div class="center">
    {{ field('h1', 'title', slide.title or '', t.hero) }}
    {% if slide.subtitle %}{{ field('p', 'subtitle', slide.subtitle, t.body, ' color:' ~ c.muted ~ ';') }}{% endif %}
    {% if slide.keywords %}<div class="keywords">
      {% for word in slide.keywords %}{{ field('span', 'keyword_' ~ loop.index0, word, t.small) }}{% endfor %}
    </div>{% endif %}
  </div>
{%- elif slide.type.value == 'statement' %}
  <div class="center">{{ field('p', 'text', slide.text or slide.detail or '', t.heading) }}</div>
{%- elif slide.type.value == 'quote' %}
  <div class="center">
    <div class="quote-mark" style="color:{{ c.accent }}">&ldquo;</div>
    {{ field('blockquote', 'text', slide.text or '', t.heading) }}
    {% if slide.author %}{{ field('p', 'author', '— ' ~ slide.author, t.body, ' color:' ~ c.accent ~ ';') }}{% endif %}
  </div>
{%- elif slide.type.value == 'big-number' %}
  <div class="center">
    {{ field('div', 'number', slide.number or '', t.hero * 2, ' color:' ~ c.accent ~ ';') }}
    {% if slide.label %}{{ field('p', 'label', slide.label, t.heading) }}{% endif %}
    {% if slide.detail %}{{ field('p', 'detail', slide.detail, t.body, ' color:' ~ c.muted ~ ';') }}{% endif %}
  </div>
{%- elif slide.type.value == 'two-column' %}
  {% if slide.title %}{{ field('h2', 'title', slide.title, t.heading, ' color:' ~ c.accent ~ ';') }}{% endif %}
  <div class="columns">
    {% for side in ['left', 'right'] %}
    <ul class="column">
      {% for bullet in (slide[side] or []) %}{{ field('li', side ~ '_' ~ loop.index0, bullet, t.body) }}{% endfor %}
    </ul>
    {% endfor %}
  </div>
{%- elif slide.type.value == 'split' %}
  <div class="columns split">
    {% for side in ['left', 'right'] %}{% set card = slide[side] %}
    <div class="card" style="background:{{ c.panel if loop.first else c.accent }}">
      {% if card %}
      {{ field('h3', side ~ '_title', card.title, t.body) }}
      {{ field('div', side ~ '_value', card.value, t.hero) }}
      {{ field('p', side ~ '_label', card.label, t.small) }}
      {% endif %}
    </div>
    {% endfor %}
  </div>
{%- elif slide.type.value == 'grid' %}
  {% if slide.title %}{{ field('h2', 'title', slide.title, t.heading) }}{% endif %}
  <div class="grid">
    {% for item in (slide.items or []) %}
    <div class="tile" data-field="grid_{{ loop.index0 }}" style="background:{{ c.panel }};{{ fstyle('grid_' ~ loop.index0, t.body) }}">
      <span class="icon">{{ item.icon }}</span><span>{{ item.label }}</span>
    </div>
    {% endfor %}
  </div>
{%- elif slide.type.value == 'image' %}
  <figure class="center">
    {% if slide.image %}<img src="{{ slide.image }}" alt="{{ slide.caption or '' }}">{% endif %}
    {% if slide.caption %}{{ field('figcaption', 'caption', slide.caption, t.body, ' color:' ~ c.accent ~ ';') }}{% endif %}
  </figure>
{%- elif slide.type.value == 'end' %}
  <div class="center">
    {{ field('h1', 'title', slide.title or '', t.hero) }}
    <div class="rule" style="background:{{ c.accent }}"></div>
    {% if slide.cta %}{{ field('p', 'cta', slide.cta, t.body) }}{% endif %}
  </div>
{%- else %}
  {% if slide.title %}{{ field('h2', 'title', slide.title, t.heading, ' color:' ~ c.accent ~ ';') }}{% endif %}
  {% if slide.text %}{{ field('p', 'text', slide.text, t.body) }}{% endif %}
{%- endif %}
</section>
"""

DECK_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{{ presentation.title }}</title>
<style>
  body { margin: 0; background: #e9e9e9; font-family: {{ t.family|safe }}; }
  .slide { position: relative; box-sizing: border-box; width: {{ width }}px; height: {{ height }}px;
           margin: 24px auto; padding: 56px 64px; overflow: hidden;
           background: {{ c.background }}; color: {{ c.text }}; page-break-after: always; }
  .slide h1, .slide h2 { font-weight: {{ t.heading_weight }}; margin: 0 0 24px;
           {% if t.uppercase_headings %}text-transform: uppercase;{% endif %} }
  .field { display: block; }
  .center { height: 100%; display: flex; flex-direction: column; justify-content: center; align-items: center; text-align: center; }
  .columns { display: flex; gap: 48px; }
  .column { flex: 1; }
  .card { flex: 1; padding: 32px; border-radius: 12px; }
  .grid { display: grid; grid-template-columns: repeat(2, 1fr); gap: 20px; }
  .tile { padding: 20px; border-radius: 12px; display: flex; gap: 12px; align-items: center; }
  .keywords { display: flex; gap: 12px; margin-top: 24px; }
  .quote-mark { font-size: 96px; line-height: .5; }
  .rule { width: 80px; height: 4px; margin: 24px auto; }
  img { max-width: 100%; max-height: 380px; }
</style>
</head>
<body>
{% for slide_html in slides %}{{ slide_html }}
{% endfor %}
</body>
</html>
"""


class SlideRenderer:
    """
    Render slides and decks to HTML for one theme.

    Usage:
        renderer = SlideRenderer("hybrid", accent_color="#E63946")
        html = renderer.render_deck(presentation)
    """

    def __init__(self, theme: Optional[str] = None, accent_color: Optional[str] = None):
        self.theme: ThemeConfig = get_theme_config(theme)
        self.colors = self.theme.palette(accent_color)
        self.env = Environment(
            loader=BaseLoader(),
            autoescape=select_autoescape(['html', 'xml'], default_for_string=True)
        )
        self._slide_template = self.env.from_string(SLIDE_TEMPLATE)
        self._deck_template = self.env.from_string(DECK_TEMPLATE)

    def _context(self) -> Dict[str, Any]:
        return {"t": self.theme.typography, "c": self.colors}

    def render_slide(self, slide: Slide, index: int = 0) -> Markup:
        """Render a single slide as an HTML <section>."""
        return Markup(self._slide_template.render(
            slide=slide,
            index=index,
            fstyle=lambda key, size: field_style(slide, key, size),
            **self._context()
        ))

    def render_deck(self, presentation: Presentation) -> str:
        """Render a full standalone HTML document, one section per slide."""
        slides = [self.render_slide(slide, i) for i, slide in enumerate(presentation.slides)]
        return self._deck_template.render(
            presentation=presentation,
            slides=slides,
            width=SLIDE_WIDTH,
            height=SLIDE_HEIGHT,
            **self._context()
        )


def field_style(slide: Slide, key: str, base_size: float) -> str:
    """Inline CSS for one field, layering the user's customizations."""
    size = (slide.font_sizes or {}).get(key, base_size)
    parts = [f"font-size:{size:g}px;"]

    transforms = []
    offset = (slide.positions or {}).get(key)
    if offset is not None:
        transforms.append(f"translate({offset.x:g}px, {offset.y:g}px)")
    angle = (slide.rotations or {}).get(key)
    if angle:
        transforms.append(f"rotate({angle:g}deg)")
    if transforms:
        parts.append(f"transform:{' '.join(transforms)};")
    return "".join(parts)


def render_presentation_html(
    presentation: Presentation,
    theme: Optional[str] = None,
    accent_color: Optional[str] = None
) -> str:
    """Convenience wrapper used by the API layer."""
    return SlideRenderer(theme, accent_color).render_deck(presentation)
