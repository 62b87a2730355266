"""Tests for the output registry and the schema reference output."""

from __future__ import annotations

import io
import re
from pathlib import Path
from typing import Any, Callable, List, TextIO

import pytest

from schemaref import outputs
from schemaref.loader import ProjectLoader
from schemaref.models import ProjectReflection
from schemaref.outputs import (
    SCHEMA_REFERENCE_OUTPUT,
    OutputRegistry,
    RenderOptions,
    UnknownOutputError,
    discover_outputs,
    schema_reference_output,
)
from tests._fixtures.project_builder import ProjectBuilder, intrinsic


class _FakeEntryPoint:
    def __init__(self, name: str, plugin: Any) -> None:
        self.name = name
        self._plugin = plugin

    def load(self) -> Any:
        return self._plugin


def _recording_output(calls: List[str]) -> Callable[[Path, ProjectReflection, RenderOptions, TextIO], None]:
    def output(output_dir: Path, project: ProjectReflection, options: RenderOptions, stream: TextIO) -> None:
        calls.append(project.name)
        stream.write("recorded")

    return output


def test_schema_reference_output_end_to_end(tmp_path: Path, loaded_project: ProjectReflection) -> None:
    stream = io.StringIO()

    schema_reference_output(tmp_path, loaded_project, RenderOptions(), stream)
    document = stream.getvalue()

    assert document.startswith(
        '---\ntitle: Schema Reference\n---\n\n<div id="schema-reference" />\n\n## Common Types\n\n### `Options`\n\n'
    )
    assert re.findall(r"^## (.+)$", document, flags=re.MULTILINE) == ["Common Types", "Tools"]
    assert document.index("### `Options`") < document.index("## Tools") < document.index("### `ToolConfig`")
    assert not re.search(r"<h[1-6]", document)
    # Undocumented properties get neither a section nor an anchor.
    assert "<span>retries</span>" not in document
    assert "<span>verbose</span>" not in document
    assert 'id="options-verbose"' not in document
    assert 'href="#"' not in document
    assert 'id="toolconfig-name"' in document
    assert 'id="options-nested-leaf"' in document
    assert list(tmp_path.iterdir()) == []


def test_schema_reference_output_uses_custom_title(tmp_path: Path, loaded_project: ProjectReflection) -> None:
    stream = io.StringIO()

    schema_reference_output(tmp_path, loaded_project, RenderOptions(title="Config"), stream)

    assert stream.getvalue().startswith("---\ntitle: Config\n---\n")


def test_registry_runs_default_output(tmp_path: Path, loaded_project: ProjectReflection) -> None:
    calls: List[str] = []
    registry = OutputRegistry()
    registry.add_output("record", _recording_output(calls))
    registry.set_default_output_name("record")
    stream = io.StringIO()

    registry.run(None, tmp_path, loaded_project, RenderOptions(), stream)

    assert registry.default_output_name == "record"
    assert calls == ["demo"]
    assert stream.getvalue() == "recorded"


def test_registry_rejects_duplicates_and_unknown_names() -> None:
    registry = OutputRegistry()
    outputs.load(registry)

    with pytest.raises(ValueError, match="already registered"):
        registry.add_output(SCHEMA_REFERENCE_OUTPUT, schema_reference_output)
    with pytest.raises(UnknownOutputError) as excinfo:
        registry.get("html")
    assert str(excinfo.value) == "Unknown output 'html' (available: schema-reference)"
    with pytest.raises(UnknownOutputError):
        registry.set_default_output_name("html")


def test_empty_registry_has_no_default() -> None:
    registry = OutputRegistry()

    assert registry.default_output_name is None
    with pytest.raises(UnknownOutputError, match="available: none"):
        registry.get()


def test_discover_outputs_loads_entry_point_plugins(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: List[str] = []

    def plugin(registry: OutputRegistry) -> None:
        registry.add_output("record", _recording_output(calls))

    monkeypatch.setattr(outputs, "_iter_entry_points", lambda: [_FakeEntryPoint("record", plugin)])

    registry = discover_outputs()

    assert registry.names() == [SCHEMA_REFERENCE_OUTPUT, "record"]
    assert registry.default_output_name == SCHEMA_REFERENCE_OUTPUT


def test_discover_outputs_rejects_non_callable_plugins(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(outputs, "_iter_entry_points", lambda: [_FakeEntryPoint("broken", "nope")])

    with pytest.raises(TypeError, match="broken"):
        discover_outputs()


def test_two_interfaces_render_into_two_buckets(tmp_path: Path, project_builder: ProjectBuilder) -> None:
    builder = project_builder
    builder.add(
        builder.interface(
            "Tool",
            builder.property("name", intrinsic("string"), summary="Tool name."),
            summary="A tool.",
            category="Tools",
        ),
        builder.interface("Plain", builder.property("x", intrinsic("number")), summary="Plain settings."),
    )
    project = ProjectLoader().load(builder.build())
    stream = io.StringIO()

    schema_reference_output(tmp_path, project, RenderOptions(), stream)
    document = stream.getvalue()

    assert re.findall(r"^## (.+)$", document, flags=re.MULTILINE) == ["Common Types", "Tools"]
    assert document.index("### `Plain`") < document.index("### `Tool`")
    assert 'id="tool-name"' in document
    assert 'id="plain-x"' not in document
    assert "<span>x</span>" not in document
    assert '<span class="tsd-kind-property">x</span>' in document
    assert not re.search(r"<h[1-6]", document)
