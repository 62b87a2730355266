"""Page planning and the single-page addressing scheme."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Generic, List, Optional, Set, TypeVar

from .comments import has_documentation
from .logging import get_logger
from .models import (
    PAGE_KINDS,
    DeclarationReflection,
    ProjectReflection,
    Reflection,
    ReflectionKind,
    ReflectionType,
    SignatureReflection,
    TypeParameterReflection,
)

ModelT = TypeVar("ModelT", bound=Reflection)

# Parents left out of anchor paths.
_UNNAMED_SCOPES = ReflectionKind.TypeLiteral | ReflectionKind.Function | ReflectionKind.Method


class PageKind(str, Enum):
    INDEX = "index"
    REFLECTION = "reflection"


@dataclass
class PageDefinition:
    """A page the router plans to emit for a reflection."""

    url: str
    kind: PageKind
    model: Reflection


@dataclass
class PageEvent(Generic[ModelT]):
    """Render-time view of a planned page."""

    model: ModelT
    project: ProjectReflection
    url: str = ""
    filename: str = ""
    page_kind: PageKind = PageKind.REFLECTION


class Slugger:
    """Produces unique, lower-case anchor slugs within one page."""

    _STRIP_PATTERN = re.compile(r"[&<>\"'`‘’“”]")

    def __init__(self) -> None:
        self._seen: Dict[str, int] = {}

    def slug(self, value: str) -> str:
        base = self.serialize(value)
        count = self._seen.get(base, 0)
        self._seen[base] = count + 1
        return base if count == 0 else f"{base}-{count}"

    @classmethod
    def serialize(cls, value: str) -> str:
        cleaned = cls._STRIP_PATTERN.sub("", value.strip())
        return re.sub(r"\s+", "-", cleaned).lower()


class StructureRouter:
    """Routes page-owning reflections to ``Parent/Child.html`` style URLs.

    Members without a page of their own are addressed as ``page.html#anchor``;
    members of inline object types get ``owner.member`` anchors.
    """

    extension = ".html"

    def __init__(self) -> None:
        self.logger = get_logger("routing")
        self._full_urls: Dict[int, str] = {}
        self._anchors: Dict[int, str] = {}
        self._used_file_names: Set[str] = set()

    def build_pages(self, project: ProjectReflection) -> List[PageDefinition]:
        """Plan the index page plus one page per page-owning declaration."""
        self._full_urls = {}
        self._anchors = {}
        self._used_file_names = set()

        index_url = self._claim_file_name("index")
        self._full_urls[project.id] = index_url
        pages = [PageDefinition(url=index_url, kind=PageKind.INDEX, model=project)]
        for child in project.children:
            self._build_pages_recursive(child, pages)
        self.logger.debug("Planned %d pages for %s", len(pages), project.name)
        return pages

    def get_ideal_base_name(self, reflection: Reflection) -> str:
        parts = [reflection.name]
        current = reflection
        while current.parent is not None and not current.parent.is_project():
            current = current.parent
            parts.insert(0, current.name)
        return "/".join(parts)

    def has_url(self, target: Reflection) -> bool:
        return target.id in self._full_urls

    def get_full_url(self, target: Reflection) -> str:
        try:
            return self._full_urls[target.id]
        except KeyError:
            raise LookupError(f"No URL was planned for {target.get_full_name()}") from None

    def get_anchor(self, target: Reflection) -> str:
        return self._anchors.get(target.id, "")

    def _build_pages_recursive(self, reflection: DeclarationReflection, pages: List[PageDefinition]) -> None:
        if not reflection.kind_of(PAGE_KINDS):
            return
        url = self._claim_file_name(self.get_ideal_base_name(reflection))
        self._full_urls[reflection.id] = url
        pages.append(PageDefinition(url=url, kind=PageKind.REFLECTION, model=reflection))

        slugger = Slugger()
        for child in reflection.iter_children():
            if isinstance(child, DeclarationReflection) and child.kind_of(PAGE_KINDS):
                self._build_pages_recursive(child, pages)
            else:
                self._build_anchors(child, reflection, slugger)
        self._build_type_anchors(reflection, reflection, slugger)

    def _build_anchors(self, target: Reflection, page: Reflection, slugger: Slugger) -> None:
        if not isinstance(target, (DeclarationReflection, SignatureReflection, TypeParameterReflection)):
            return
        if not target.kind_of(ReflectionKind.TypeLiteral):
            parts = [target.name]
            current = target
            while current.parent is not None and current.parent is not page and not current.parent.is_project():
                current = current.parent
                if current.kind_of(_UNNAMED_SCOPES):
                    continue
                parts.insert(0, current.name)
            anchor = slugger.slug(".".join(parts))
            self._anchors[target.id] = anchor
            self._full_urls[target.id] = f"{self._full_urls[page.id]}#{anchor}"
        for child in target.iter_children():
            self._build_anchors(child, page, slugger)
        self._build_type_anchors(target, page, slugger)

    def _build_type_anchors(self, target: Reflection, page: Reflection, slugger: Slugger) -> None:
        declaration_type = getattr(target, "type", None)
        if not isinstance(declaration_type, ReflectionType) or declaration_type.declaration is None:
            return
        for child in declaration_type.declaration.children:
            self._build_anchors(child, page, slugger)

    def _claim_file_name(self, base_name: str) -> str:
        candidate = base_name
        index = 0
        while candidate.lower() in self._used_file_names:
            index += 1
            candidate = f"{base_name}-{index}"
        self._used_file_names.add(candidate.lower())
        return candidate + self.extension


class SchemaReferenceRouter(StructureRouter):
    """Addresses every reflection as an anchor on one page.

    The downstream renderer derives lower-case ids from Markdown headings, so anchors
    are the structure URL with separators flattened to ``-`` and lower-cased.
    """

    _SEPARATORS = re.compile(r"[./#]")

    def get_full_url(self, target: Reflection) -> str:
        return "#" + self.get_anchor(target)

    def get_anchor(self, target: Reflection) -> str:
        if (
            isinstance(target, DeclarationReflection)
            and target.kind_of(ReflectionKind.Property)
            and not has_documentation(target)
        ):
            return ""
        url = super().get_full_url(target).replace(self.extension, "", 1)
        return self._SEPARATORS.sub("-", url).lower()


def build_page_events(project: ProjectReflection, router: StructureRouter) -> List[PageEvent]:
    """Wrap every planned page into a :class:`PageEvent`."""
    events: List[PageEvent] = []
    for definition in router.build_pages(project):
        events.append(
            PageEvent(
                model=definition.model,
                project=project,
                url=definition.url,
                filename=definition.url,
                page_kind=definition.kind,
            )
        )
    return events


def page_model_of(event: PageEvent) -> Optional[DeclarationReflection]:
    return event.model if isinstance(event.model, DeclarationReflection) else None


__all__ = [
    "PageDefinition",
    "PageEvent",
    "PageKind",
    "SchemaReferenceRouter",
    "Slugger",
    "StructureRouter",
    "build_page_events",
    "page_model_of",
]
