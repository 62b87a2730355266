"""Pipeline orchestration: configuration, project loading, and output selection."""

from __future__ import annotations

import sys
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterable, Optional, TextIO

from .assembler import DOCUMENT_TITLE
from .config import ReferenceConfig, load_config, normalize_tags
from .loader import ProjectLoader
from .logging import get_logger
from .models import ProjectReflection
from .outputs import OutputRegistry, RenderOptions, discover_outputs

STDIN_MARKER = "-"


@dataclass
class RenderOverrides:
    """Command-line values that take precedence over .schemaref.yml."""

    output: Optional[str] = None
    exclude_tags: Iterable[str] = ()
    include_internal: bool = False
    enable_sources: bool = False


class Orchestrator:
    """Coordinates a single render run from TypeDoc JSON to the selected output."""

    def __init__(self, registry: OutputRegistry | None = None) -> None:
        self.registry = registry or discover_outputs()
        self.logger = get_logger("orchestrator")

    def resolve_config(
        self,
        config_path: Path,
        overrides: RenderOverrides | None = None,
    ) -> ReferenceConfig:
        """Load configuration and apply command-line overrides."""
        config = load_config(config_path)
        if overrides is None:
            return config
        extra_tags = normalize_tags(list(overrides.exclude_tags))
        return replace(
            config,
            output=overrides.output or config.output,
            exclude_tags=normalize_tags([*config.exclude_tags, *extra_tags]),
            exclude_internal=config.exclude_internal and not overrides.include_internal,
            disable_sources=config.disable_sources and not overrides.enable_sources,
        )

    def load_project(self, source: str, config: ReferenceConfig, *, stdin: TextIO | None = None) -> ProjectReflection:
        loader = ProjectLoader(
            exclude_internal=config.exclude_internal,
            exclude_tags=config.exclude_tags,
        )
        if source == STDIN_MARKER:
            stream = stdin or sys.stdin
            return loader.load_text(stream.read(), source="<stdin>")
        return loader.load_path(Path(source).expanduser())

    def run_render(
        self,
        source: str,
        *,
        config: ReferenceConfig,
        stream: TextIO | None = None,
        stdin: TextIO | None = None,
    ) -> None:
        """Load ``source`` and run the configured output against it."""
        project = self.load_project(source, config, stdin=stdin)
        self.logger.info("Loaded project %s from %s", project.name or "<unnamed>", source)
        options = RenderOptions(
            disable_sources=config.disable_sources,
            title=config.title or DOCUMENT_TITLE,
        )
        self.registry.run(
            config.output,
            config.out,
            project,
            options,
            stream or sys.stdout,
        )


__all__ = ["Orchestrator", "RenderOverrides", "STDIN_MARKER"]
