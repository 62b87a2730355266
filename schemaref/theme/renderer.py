"""Default theme: renders reflections to HTML fragments through Jinja templates."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional

import markdown
from jinja2 import Environment, FileSystemLoader
from markupsafe import Markup

from ..comments import CATEGORY_TAG, has_documentation
from ..models import (
    CommentDisplayPart,
    CommentTag,
    DeclarationReflection,
    Reflection,
    ReflectionKind,
    ReflectionType,
)
from ..routing import PageEvent, StructureRouter
from .types import TypeFormatter, esc, keyword, kind_class, symbol

_LINK_TAGS = {"@link", "@linkcode", "@linkplain"}

# Tags consumed by other stages and never shown in tag lists.
_HIDDEN_TAGS = {CATEGORY_TAG}


def tag_title(tag: str) -> str:
    """Turn ``@defaultValue`` into ``Default Value``."""
    name = tag.lstrip("@")
    words: List[str] = []
    current = ""
    for char in name:
        if char.isupper() and current and not current[-1].isupper():
            words.append(current)
            current = char
        else:
            current += char
    if current:
        words.append(current)
    return " ".join(word[:1].upper() + word[1:] for word in words)


class DefaultTheme:
    """Owns the template environment and Markdown processor shared by render contexts."""

    def __init__(
        self,
        router: StructureRouter,
        *,
        disable_sources: bool = True,
        templates_dir: Path | None = None,
    ) -> None:
        self.router = router
        self.disable_sources = disable_sources
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._markdown = markdown.Markdown(extensions=["tables", "fenced_code"])

    def get_render_context(self, event: PageEvent) -> "DefaultThemeRenderContext":
        return DefaultThemeRenderContext(self, event)

    def render_markdown(self, source: str) -> Markup:
        if not source.strip():
            return Markup("")
        self._markdown.reset()
        return Markup(self._markdown.convert(source))

    def render_template(self, template_name: str, /, **context: object) -> Markup:
        return Markup(self.env.get_template(template_name).render(**context))


class DefaultThemeRenderContext:
    """Per-page helpers used by templates and the declaration renderer."""

    def __init__(self, theme: DefaultTheme, page: PageEvent) -> None:
        self.theme = theme
        self.page = page
        self.router = theme.router
        self.project = page.project
        self.types = TypeFormatter(page.project, self.url_for)

    # -- addressing ----------------------------------------------------------

    def url_for(self, reflection: Optional[Reflection]) -> Optional[str]:
        """Return a link target for ``reflection``, or None when it is not linkable."""
        if reflection is None or not self.router.has_url(reflection):
            return None
        url = self.router.get_full_url(reflection)
        if not url or url == "#":
            return None
        return url

    def anchor_for(self, reflection: Reflection) -> str:
        if not self.router.has_url(reflection):
            return ""
        return self.router.get_anchor(reflection)

    # -- comments ------------------------------------------------------------

    def display_parts(self, parts: Iterable[CommentDisplayPart]) -> Markup:
        chunks: List[str] = []
        for part in parts:
            if part.kind == "inline-tag" and part.tag in _LINK_TAGS:
                text = f"`{part.text}`" if part.tag == "@linkcode" else part.text
                url = self.url_for(self.project.get_reflection_by_id(part.target))
                chunks.append(f"[{text}]({url})" if url else text)
            else:
                chunks.append(part.text)
        return self.theme.render_markdown("".join(chunks))

    def comment_summary(self, reflection: Reflection) -> Markup:
        if reflection.comment is None:
            return Markup("")
        summary = self.display_parts(reflection.comment.summary)
        return self.theme.render_template("comment_summary.html.j2", summary=summary)

    def visible_tags(self, reflection: Reflection) -> List[CommentTag]:
        if reflection.comment is None:
            return []
        return [tag for tag in reflection.comment.block_tags if tag.tag not in _HIDDEN_TAGS]

    def comment_tags(self, reflection: Reflection) -> Markup:
        tags = [
            {
                "css": "tsd-tag-" + tag.tag.lstrip("@").lower(),
                "title": tag_title(tag.tag) + (f" {tag.name}" if tag.name else ""),
                "body": self.display_parts(tag.content),
            }
            for tag in self.visible_tags(reflection)
        ]
        return self.theme.render_template("comment_tags.html.j2", tags=tags)

    # -- declarations --------------------------------------------------------

    def reflection_preview(self, reflection: Reflection) -> Optional[Markup]:
        """Return an ``interface Name { ... }`` code preview, or None for other kinds and empty interfaces."""
        if not isinstance(reflection, DeclarationReflection):
            return None
        if not reflection.kind_of(ReflectionKind.Interface) or not reflection.children:
            return None
        heritage = ""
        if reflection.extended_types:
            heritage = (
                " "
                + keyword("extends")
                + " "
                + symbol(", ").join(str(self.types.format(item)) for item in reflection.extended_types)
            )
        return self.theme.render_template(
            "reflection_preview.html.j2",
            keyword=Markup(keyword("interface")),
            name=reflection.name,
            kind_class=kind_class(reflection),
            type_parameters=self.types.type_parameters(reflection.type_parameters),
            heritage=Markup(heritage),
            body=self.types.object_body(reflection),
        )

    def declaration_signature(self, reflection: DeclarationReflection) -> Markup:
        """Return the one-line signature shown above a declaration's comment."""
        name = f'<span class="{kind_class(reflection)}">{esc(reflection.name)}</span>'
        type_parameters = str(self.types.type_parameters(reflection.type_parameters))
        if reflection.kind_of(ReflectionKind.TypeAlias):
            text = (
                keyword("type") + " " + name + type_parameters + " " + symbol("=") + " "
                + str(self.types.format(reflection.type))
            )
        elif reflection.kind_of(ReflectionKind.Variable):
            text = (
                keyword("const" if reflection.flags.is_const else "let") + " " + name + symbol(": ")
                + str(self.types.format(reflection.type))
            )
            if reflection.default_value:
                text += " " + symbol("=") + " " + esc(reflection.default_value)
        elif reflection.kind_of(ReflectionKind.Class | ReflectionKind.Interface):
            word = "class" if reflection.kind_of(ReflectionKind.Class) else "interface"
            text = keyword(word) + " " + name + type_parameters
            if reflection.extended_types:
                text += " " + keyword("extends") + " " + symbol(", ").join(
                    str(self.types.format(item)) for item in reflection.extended_types
                )
            if reflection.implemented_types:
                text += " " + keyword("implements") + " " + symbol(", ").join(
                    str(self.types.format(item)) for item in reflection.implemented_types
                )
        elif reflection.kind_of(ReflectionKind.Enum):
            text = keyword("enum") + " " + name
        elif reflection.kind_of(ReflectionKind.Module | ReflectionKind.Namespace):
            text = keyword("namespace") + " " + name
        else:
            prefix = "".join(keyword(word) + " " for word in reflection.flags.keywords())
            value_type = reflection.type
            if value_type is None and reflection.get_signature is not None:
                value_type = reflection.get_signature.type
            marker = "?: " if reflection.flags.is_optional else ": "
            text = prefix + name + symbol(marker) + str(self.types.format(value_type))
            if reflection.default_value:
                text += " " + symbol("=") + " " + esc(reflection.default_value)
        return Markup(text)

    def member_declaration(self, reflection: Reflection) -> Markup:
        if not isinstance(reflection, DeclarationReflection):
            return self.comment_summary(reflection)
        if reflection.signatures:
            return self.member_signatures(reflection)
        return self.theme.render_template(
            "member_declaration.html.j2",
            ctx=self,
            reflection=reflection,
            signature=self.declaration_signature(reflection),
        )

    def member_signatures(self, reflection: DeclarationReflection) -> Markup:
        signatures = [
            {
                "anchor": self.anchor_for(signature),
                "code": self.types.signature(signature, name=reflection.name),
                "signature": signature,
            }
            for signature in reflection.signatures
        ]
        return self.theme.render_template(
            "member_signatures.html.j2", ctx=self, reflection=reflection, signatures=signatures
        )

    def type_declaration(self, reflection: Reflection) -> Markup:
        """List the documented members of an inline object type."""
        declaration_type = getattr(reflection, "type", None)
        if not isinstance(declaration_type, ReflectionType) or declaration_type.declaration is None:
            return Markup("")
        members = [child for child in declaration_type.declaration.children if has_documentation(child)]
        if not members:
            return Markup("")
        return self.theme.render_template("type_declaration.html.j2", ctx=self, members=members)

    def member_sources(self, reflection: Reflection) -> Markup:
        if self.theme.disable_sources:
            return Markup("")
        sources = getattr(reflection, "sources", None) or []
        return self.theme.render_template("member_sources.html.j2", sources=sources)

    def member(self, reflection: DeclarationReflection) -> Markup:
        """Render one member section: anchor, title, and declaration."""
        return self.theme.render_template(
            "member.html.j2",
            ctx=self,
            reflection=reflection,
            anchor=self.anchor_for(reflection),
            kind_class=kind_class(reflection),
            flags=reflection.flags.keywords(),
        )


__all__ = ["DefaultTheme", "DefaultThemeRenderContext", "tag_title"]
