from __future__ import annotations

from typing import Any, Dict

import pytest

from schemaref.loader import ProjectLoader
from schemaref.models import ProjectReflection
from tests._fixtures.project_builder import ProjectBuilder, intrinsic


@pytest.fixture
def project_builder() -> ProjectBuilder:
    """Provide a fresh TypeDoc project builder."""
    return ProjectBuilder()


@pytest.fixture
def schema_project(project_builder: ProjectBuilder) -> Dict[str, Any]:
    """A tagged interface with one documented property and an untagged alias with nested members.

    ``Options.verbose`` is undocumented; ``Options.nested`` is only documented through ``leaf``.
    """
    builder = project_builder
    tool_config = builder.interface(
        "ToolConfig",
        builder.property("name", intrinsic("string"), summary="Tool name."),
        builder.property("retries", intrinsic("number")),
        summary="Tool settings.",
        category="Tools",
    )
    options = builder.type_alias(
        "Options",
        builder.object_type(
            builder.property("verbose", intrinsic("boolean")),
            builder.property(
                "nested",
                builder.object_type(builder.property("leaf", intrinsic("string"), summary="Leaf docs.")),
            ),
        ),
        summary="Options.",
    )
    return builder.add(tool_config, options).build()


@pytest.fixture
def loaded_project(schema_project: Dict[str, Any]) -> ProjectReflection:
    return ProjectLoader().load(schema_project)
