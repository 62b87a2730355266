"""Categorizes page declarations and assembles the single reference document."""

from __future__ import annotations

import locale
import re
from typing import Callable, Dict, Iterable, List, Optional, Protocol, Tuple

from markupsafe import Markup

from .comments import category_of, has_documentation
from .logging import get_logger
from .models import DeclarationReflection
from .postproc.sanitize import MarkupSanitizer
from .routing import PageEvent, page_model_of
from .theme.renderer import DefaultTheme, DefaultThemeRenderContext

DEFAULT_CATEGORY_TITLE = "Common Types"
DOCUMENT_TITLE = "Schema Reference"
ANCHOR_TARGET_ID = "schema-reference"

_IDENTIFIER_LIKE = re.compile(r"^[a-z]")

logger = get_logger("assembler")


class DeclarationRenderer(Protocol):
    """Renders one page declaration into a Markdown fragment."""

    def render(self, reflection: DeclarationReflection, context: DefaultThemeRenderContext) -> str:
        """Return the fragment for ``reflection``."""


class SchemaReferenceRenderer:
    """Heading, preview or declaration, then one section per documented member."""

    def __init__(self, sanitizer: MarkupSanitizer | None = None) -> None:
        self.sanitizer = sanitizer or MarkupSanitizer()

    def render(self, reflection: DeclarationReflection, context: DefaultThemeRenderContext) -> str:
        name = reflection.get_friendly_full_name()
        members = [child for child in reflection.children if has_documentation(child)]

        preview = context.reflection_preview(reflection)
        if preview is not None:
            parts = [preview, context.comment_summary(reflection)]
        else:
            parts = [context.member_declaration(reflection)]
        parts.extend(context.member(member) for member in members)

        content = self.sanitizer.sanitize(str(Markup("").join(parts)))
        return f"### `{name}`\n\n{content}\n"


def render_reflection(
    reflection: DeclarationReflection,
    context: DefaultThemeRenderContext,
    sanitizer: MarkupSanitizer | None = None,
) -> str:
    return SchemaReferenceRenderer(sanitizer).render(reflection, context)


def render_category(category: str) -> str:
    """Return the ``##`` heading for a category; identifier-like labels become inline code."""
    heading = category or DEFAULT_CATEGORY_TITLE
    if _IDENTIFIER_LIKE.match(heading):
        heading = f"`{heading}`"
    return f"## {heading}\n"


def name_sort_key(name: str) -> Tuple[str, str]:
    """Locale-aware ordering: case-insensitive first, lower case before upper case on ties."""
    return (locale.strxfrm(name.casefold()), name.swapcase())


def declaration_events(events: Iterable[PageEvent]) -> List[PageEvent[DeclarationReflection]]:
    """Keep declaration pages only, sorted by declaration name."""
    selected = [event for event in events if page_model_of(event) is not None]
    return sorted(selected, key=lambda event: name_sort_key(event.model.name))


def render_page_events(
    events: Iterable[PageEvent],
    theme: DefaultTheme,
    renderer: Optional[DeclarationRenderer] = None,
    *,
    category_for: Callable[[DeclarationReflection], str] = category_of,
) -> str:
    """Render declaration pages grouped under category headings."""
    renderer = renderer or SchemaReferenceRenderer()
    outputs_by_category: Dict[str, List[str]] = {}

    for event in declaration_events(events):
        category = category_for(event.model)
        rendered = renderer.render(event.model, theme.get_render_context(event))
        if category not in outputs_by_category:
            outputs_by_category[category] = [render_category(category)]
        outputs_by_category[category].append(rendered)

    logger.debug("Rendered %d categories", len(outputs_by_category))
    ordered: List[str] = []
    for category in sorted(outputs_by_category, key=name_sort_key):
        ordered.extend(outputs_by_category[category])
    return "\n".join(ordered)


def front_matter(title: str = DOCUMENT_TITLE) -> str:
    return f"---\ntitle: {title}\n---\n\n"


def assemble_document(body: str, *, title: str = DOCUMENT_TITLE) -> str:
    """Prefix the rendered body with front matter and the page anchor target."""
    return f'{front_matter(title)}<div id="{ANCHOR_TARGET_ID}" />\n\n{body}'


__all__ = [
    "ANCHOR_TARGET_ID",
    "DEFAULT_CATEGORY_TITLE",
    "DOCUMENT_TITLE",
    "DeclarationRenderer",
    "SchemaReferenceRenderer",
    "assemble_document",
    "declaration_events",
    "front_matter",
    "name_sort_key",
    "render_category",
    "render_page_events",
    "render_reflection",
]
