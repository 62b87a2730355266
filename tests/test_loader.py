"""Tests for schemaref.loader."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from schemaref.loader import ProjectLoader, ReflectionLoadError, load_project
from schemaref.models import (
    DeclarationReflection,
    LiteralType,
    ProjectReflection,
    ReflectionKind,
    ReflectionType,
    UnknownType,
)
from tests._fixtures.project_builder import FUNCTION, ProjectBuilder, intrinsic


def _child(reflection: DeclarationReflection | ProjectReflection, name: str) -> DeclarationReflection:
    return next(child for child in reflection.children if child.name == name)


def test_loader_builds_declarations_with_kinds_and_comments(loaded_project: ProjectReflection) -> None:
    assert loaded_project.name == "demo"
    assert [child.name for child in loaded_project.children] == ["ToolConfig", "Options"]

    tool_config = _child(loaded_project, "ToolConfig")
    assert tool_config.kind is ReflectionKind.Interface
    assert tool_config.parent is loaded_project
    assert tool_config.comment is not None
    assert tool_config.comment.summary[0].text == "Tool settings."
    assert tool_config.comment.get_tag("@category") is not None

    name = _child(tool_config, "name")
    assert name.kind is ReflectionKind.Property
    assert name.parent is tool_config
    assert loaded_project.get_reflection_by_id(name.id) is name


def test_inline_object_declarations_are_parented_to_their_owner(loaded_project: ProjectReflection) -> None:
    options = _child(loaded_project, "Options")
    assert isinstance(options.type, ReflectionType)
    literal = options.type.declaration
    assert literal is not None
    assert literal.kind is ReflectionKind.TypeLiteral
    assert literal.parent is options

    nested = _child(literal, "nested")
    assert isinstance(nested.type, ReflectionType)
    inner = nested.type.declaration
    assert inner is not None
    assert inner.parent is nested
    assert _child(inner, "leaf").get_full_name() == "Options.__type.nested.__type.leaf"


def test_loader_rejects_non_project_documents() -> None:
    loader = ProjectLoader()

    with pytest.raises(ReflectionLoadError, match="not a TypeDoc project"):
        loader.load({"id": 0, "name": "x", "kind": 2})
    with pytest.raises(ReflectionLoadError, match="JSON object"):
        loader.load([1, 2, 3])
    with pytest.raises(ReflectionLoadError, match="not valid JSON"):
        loader.load_text("{not json")


def test_loader_rejects_invalid_reflection_kind(project_builder: ProjectBuilder) -> None:
    data = project_builder.build()
    data["children"] = [{"id": 5, "name": "Broken", "kind": "interface"}]

    with pytest.raises(ReflectionLoadError, match="Invalid reflection kind"):
        ProjectLoader().load(data)


def test_load_path_reports_missing_files(tmp_path: Path) -> None:
    with pytest.raises(ReflectionLoadError, match="Unable to read"):
        load_project(tmp_path / "missing.json")


def test_load_project_reads_from_disk(tmp_path: Path, project_builder: ProjectBuilder) -> None:
    project_builder.add(project_builder.type_alias("Mode", intrinsic("string"), summary="A mode."))
    path = project_builder.write(tmp_path / "docs.json")

    project = load_project(path)

    assert [child.name for child in project.children] == ["Mode"]


def test_internal_reflections_are_dropped_unless_included(project_builder: ProjectBuilder) -> None:
    builder = project_builder
    builder.add(
        builder.interface(
            "Public",
            builder.property("visible", intrinsic("string"), summary="Shown."),
            builder.property("secret", intrinsic("string"), summary="Hidden.", modifiers=["@internal"]),
        ),
        builder.type_alias("Hidden", intrinsic("string"), modifiers=["@internal"]),
    )
    data = builder.build()

    excluded = ProjectLoader().load(data)
    assert [child.name for child in excluded.children] == ["Public"]
    assert [child.name for child in excluded.children[0].children] == ["visible"]

    included = ProjectLoader(exclude_internal=False).load(data)
    assert [child.name for child in included.children] == ["Public", "Hidden"]
    assert len(included.children[0].children) == 2


def test_excluded_tags_are_removed_from_comments(project_builder: ProjectBuilder) -> None:
    builder = project_builder
    builder.add(
        builder.type_alias(
            "Port",
            intrinsic("number"),
            summary="Listening port.",
            tags={"@minimum": "1", "@maximum": "65535", "@example": "8080"},
        )
    )

    project = ProjectLoader(exclude_tags=["@minimum", "@maximum"]).load(builder.build())

    comment = project.children[0].comment
    assert comment is not None
    assert [tag.tag for tag in comment.block_tags] == ["@example"]


def test_literal_and_unsupported_types(project_builder: ProjectBuilder) -> None:
    builder = project_builder
    builder.add(
        builder.type_alias("Big", {"type": "literal", "value": {"negative": True, "value": "42"}}),
        builder.type_alias("Odd", {"type": "somethingNew", "name": "Future"}),
    )

    project = ProjectLoader().load(builder.build())

    big = _child(project, "Big")
    assert isinstance(big.type, LiteralType)
    assert big.type.is_bigint is True
    assert big.type.value == "-42"
    odd = _child(project, "Odd")
    assert isinstance(odd.type, UnknownType)
    assert odd.type.name == "Future"


def test_signatures_and_parameters_are_loaded(project_builder: ProjectBuilder) -> None:
    builder = project_builder
    signature = builder.signature(
        "greet",
        parameters=[builder.parameter("who", intrinsic("string"), isOptional=True)],
        returns=intrinsic("string"),
        summary="Say hello.",
    )
    builder.add(builder.declaration("greet", FUNCTION, signatures=[signature]))

    project = ProjectLoader().load(json.loads(json.dumps(builder.build())))

    greet = project.children[0]
    assert len(greet.signatures) == 1
    loaded = greet.signatures[0]
    assert loaded.kind is ReflectionKind.CallSignature
    assert loaded.parent is greet
    assert loaded.get_friendly_full_name() == "greet"
    assert [parameter.name for parameter in loaded.parameters] == ["who"]
    assert loaded.parameters[0].flags.is_optional is True
    assert loaded.parameters[0].parent is loaded
