"""Named outputs and the built-in single-page schema reference output."""

from __future__ import annotations

from dataclasses import dataclass
from importlib import metadata
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, TextIO

from .assembler import DOCUMENT_TITLE, assemble_document, render_page_events
from .logging import get_logger
from .models import ProjectReflection
from .routing import SchemaReferenceRouter, build_page_events
from .theme.renderer import DefaultTheme

SCHEMA_REFERENCE_OUTPUT = "schema-reference"

_ENTRY_POINT_GROUP = "schemaref.outputs"

logger = get_logger("outputs")


@dataclass
class RenderOptions:
    """Rendering switches handed to every output."""

    disable_sources: bool = True
    title: str = DOCUMENT_TITLE


OutputFunction = Callable[[Path, ProjectReflection, RenderOptions, TextIO], None]


class UnknownOutputError(KeyError):
    """Raised when an output name has not been registered."""

    def __init__(self, name: str, available: Iterable[str]) -> None:
        self.name = name
        self.available = sorted(available)
        super().__init__(name)

    def __str__(self) -> str:
        choices = ", ".join(self.available) or "none"
        return f"Unknown output '{self.name}' (available: {choices})"


class OutputRegistry:
    """Maps output names to output functions and tracks the default selection."""

    def __init__(self) -> None:
        self._outputs: Dict[str, OutputFunction] = {}
        self._default: Optional[str] = None

    def add_output(self, name: str, output: OutputFunction) -> None:
        if name in self._outputs:
            raise ValueError(f"Output '{name}' is already registered")
        self._outputs[name] = output

    def set_default_output_name(self, name: str) -> None:
        if name not in self._outputs:
            raise UnknownOutputError(name, self._outputs)
        self._default = name

    @property
    def default_output_name(self) -> Optional[str]:
        return self._default

    def names(self) -> List[str]:
        return list(self._outputs)

    def get(self, name: Optional[str] = None) -> OutputFunction:
        selected = name or self._default
        if selected is None or selected not in self._outputs:
            raise UnknownOutputError(selected or "", self._outputs)
        return self._outputs[selected]

    def run(
        self,
        name: Optional[str],
        output_dir: Path,
        project: ProjectReflection,
        options: RenderOptions,
        stream: TextIO,
    ) -> None:
        output = self.get(name)
        logger.info("Running output %s", name or self._default)
        output(output_dir, project, options, stream)


def schema_reference_output(
    output_dir: Path,
    project: ProjectReflection,
    options: RenderOptions,
    stream: TextIO,
) -> None:
    """Write the categorized single-page reference to ``stream``.

    ``output_dir`` is accepted for signature compatibility; this output never writes files.
    """
    router = SchemaReferenceRouter()
    theme = DefaultTheme(router, disable_sources=options.disable_sources)

    events = build_page_events(project, router)
    rendered = render_page_events(events, theme)

    stream.write(assemble_document(rendered, title=options.title))
    # Everything must be written before the process is allowed to exit.
    stream.flush()


def load(registry: OutputRegistry) -> None:
    """Register the built-in outputs."""
    registry.add_output(SCHEMA_REFERENCE_OUTPUT, schema_reference_output)
    registry.set_default_output_name(SCHEMA_REFERENCE_OUTPUT)


def discover_outputs() -> OutputRegistry:
    """Return a registry with built-in outputs plus those contributed by entry points."""
    registry = OutputRegistry()
    load(registry)
    for entry in _iter_entry_points():
        try:
            plugin = entry.load()
        except Exception as exc:  # pragma: no cover - defensive guard
            raise RuntimeError(f"Failed to load output plugin '{entry.name}': {exc}") from exc
        if not callable(plugin):
            raise TypeError(f"Output plugin '{entry.name}' must be a callable taking the registry")
        plugin(registry)
        logger.debug("Loaded output plugin %s", entry.name)
    return registry


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "OutputRegistry",
    "RenderOptions",
    "SCHEMA_REFERENCE_OUTPUT",
    "UnknownOutputError",
    "discover_outputs",
    "load",
    "schema_reference_output",
]
