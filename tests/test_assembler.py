"""Tests for categorization, declaration rendering and document assembly."""

from __future__ import annotations

import re
from typing import Any, List

from schemaref.assembler import (
    SchemaReferenceRenderer,
    assemble_document,
    declaration_events,
    name_sort_key,
    render_category,
    render_page_events,
)
from schemaref.loader import ProjectLoader
from schemaref.models import DeclarationReflection, ProjectReflection
from schemaref.routing import SchemaReferenceRouter, build_page_events
from schemaref.theme.renderer import DefaultTheme, DefaultThemeRenderContext
from tests._fixtures.project_builder import ProjectBuilder, intrinsic


class _NameRenderer:
    """Renders each declaration as its bare name."""

    def __init__(self) -> None:
        self.seen: List[str] = []

    def render(self, reflection: DeclarationReflection, context: DefaultThemeRenderContext) -> str:
        self.seen.append(reflection.name)
        return reflection.name


def _render(project: ProjectReflection, **kwargs: Any) -> str:
    router = SchemaReferenceRouter()
    events = build_page_events(project, router)
    return render_page_events(events, DefaultTheme(router), **kwargs)


def _headings(text: str) -> List[str]:
    return re.findall(r"^## (.+)$", text, flags=re.MULTILINE)


def test_render_category_headings() -> None:
    assert render_category("") == "## Common Types\n"
    assert render_category("Tools") == "## Tools\n"
    assert render_category("prompts") == "## `prompts`\n"


def test_name_sort_key_is_case_insensitive_with_lower_case_first() -> None:
    names = ["beta", "Alpha", "Gamma", "alpha"]

    assert sorted(names, key=name_sort_key) == ["alpha", "Alpha", "beta", "Gamma"]


def test_category_order_puts_default_bucket_first(project_builder: ProjectBuilder) -> None:
    builder = project_builder
    builder.add(
        builder.type_alias("Alpha", intrinsic("string"), summary="A.", category="Tools"),
        builder.type_alias("Beta", intrinsic("string"), summary="B."),
        builder.type_alias("Gamma", intrinsic("string"), summary="G.", category="prompts"),
    )
    project = ProjectLoader().load(builder.build())

    body = _render(project)

    assert _headings(body) == ["Common Types", "`prompts`", "Tools"]


def test_declarations_are_sorted_by_name_within_a_bucket(project_builder: ProjectBuilder) -> None:
    builder = project_builder
    builder.add(
        builder.type_alias("Zeta", intrinsic("string"), category="Tools"),
        builder.type_alias("alpha", intrinsic("string"), category="Tools"),
        builder.type_alias("Mid", intrinsic("string"), category="Tools"),
    )
    project = ProjectLoader().load(builder.build())
    renderer = _NameRenderer()

    body = _render(project, renderer=renderer)

    assert renderer.seen == ["alpha", "Mid", "Zeta"]
    assert body == "## Tools\n\nalpha\nMid\nZeta"


def test_category_for_can_be_replaced(loaded_project: ProjectReflection) -> None:
    body = _render(loaded_project, renderer=_NameRenderer(), category_for=lambda reflection: "shared")

    assert body == "## `shared`\n\nOptions\nToolConfig"


def test_declaration_events_skip_the_index_page(loaded_project: ProjectReflection) -> None:
    events = build_page_events(loaded_project, SchemaReferenceRouter())

    assert [event.model.name for event in declaration_events(events)] == ["Options", "ToolConfig"]


def test_interface_rendering_lists_documented_members(loaded_project: ProjectReflection) -> None:
    router = SchemaReferenceRouter()
    events = build_page_events(loaded_project, router)
    event = next(event for event in events if event.model.name == "ToolConfig")
    context = DefaultTheme(router).get_render_context(event)

    rendered = SchemaReferenceRenderer().render(event.model, context)

    assert rendered.startswith("### `ToolConfig`\n\n<div class=\"tsd-signature\">")
    assert rendered.endswith("\n")
    assert "<p>Tool settings.</p>" in rendered
    assert 'id="toolconfig-name"' in rendered
    assert "<span>name</span>" in rendered
    assert "<span>retries</span>" not in rendered
    assert not re.search(r"<h[1-6]", rendered)
    assert "&nbsp;" in rendered
    assert "&#x7B;" in rendered


def test_assemble_document_prefixes_front_matter() -> None:
    document = assemble_document("## Tools\n", title="Config Reference")

    assert document == '---\ntitle: Config Reference\n---\n\n<div id="schema-reference" />\n\n## Tools\n'


def test_empty_project_produces_an_empty_body(project_builder: ProjectBuilder) -> None:
    project = ProjectLoader().load(project_builder.build())

    assert _render(project) == ""
