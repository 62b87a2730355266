"""Rewrites that make rendered markup safe for the downstream Markdown parser."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, Sequence

_HEADING_OPEN = re.compile(r"<h([1-6])")
_HEADING_CLOSE = re.compile(r"</h[1-6]>")
_TAG_AFTER_NEWLINES = re.compile(r"\n+<")
_SCHEMA_TYPE_HINT = re.compile(r"<p>@TJS-type [^<]+</p>")

_PARSER_ESCAPES = (
    ("[", "&#x5B;"),  # `[` inside HTML tags != link
    ("_", "&#x5F;"),  # `_` inside HTML tags != emphasis
    ("{", "&#x7B;"),  # plain *.md is not supported, so JSX interpolation must be escaped
)


@dataclass(frozen=True)
class RewriteStep:
    """A named textual rewrite applied to a rendered fragment."""

    name: str
    apply: Callable[[str], str]

    def __call__(self, content: str) -> str:
        return self.apply(content)


def neutralize_headings(content: str) -> str:
    """Convert ``<hN>`` elements to ``<div data-typedoc-h="N">``."""
    content = _HEADING_OPEN.sub(r'<div data-typedoc-h="\1"', content)
    return _HEADING_CLOSE.sub("</div>", content)


def collapse_indent(content: str) -> str:
    """Reduce code block indent from 4 to 2 spaces."""
    return content.replace("\u00a0\u00a0", "\u00a0")


def encode_nbsp(content: str) -> str:
    return content.replace("\u00a0", "&nbsp;")


def join_tag_lines(content: str) -> str:
    """Newlines before tags are not significant, but the parser reads them as breaks."""
    return _TAG_AFTER_NEWLINES.sub(" <", content)


def escape_parser_characters(content: str) -> str:
    for char, entity in _PARSER_ESCAPES:
        content = content.replace(char, entity)
    return content


def strip_schema_type_hints(content: str) -> str:
    # `@TJS-type` cannot go through tag exclusion since tag names with dashes are rejected.
    return _SCHEMA_TYPE_HINT.sub("", content)


DEFAULT_STEPS: Sequence[RewriteStep] = (
    RewriteStep("neutralize_headings", neutralize_headings),
    RewriteStep("collapse_indent", collapse_indent),
    RewriteStep("encode_nbsp", encode_nbsp),
    RewriteStep("join_tag_lines", join_tag_lines),
    RewriteStep("escape_parser_characters", escape_parser_characters),
    RewriteStep("strip_schema_type_hints", strip_schema_type_hints),
)


class MarkupSanitizer:
    """Applies an ordered sequence of rewrites; each step sees the previous output."""

    def __init__(self, steps: Iterable[RewriteStep] | None = None) -> None:
        self.steps: List[RewriteStep] = list(steps if steps is not None else DEFAULT_STEPS)

    def sanitize(self, content: str) -> str:
        for step in self.steps:
            content = step(content)
        return content

    def step_names(self) -> List[str]:
        return [step.name for step in self.steps]


__all__ = [
    "DEFAULT_STEPS",
    "MarkupSanitizer",
    "RewriteStep",
    "collapse_indent",
    "encode_nbsp",
    "escape_parser_characters",
    "join_tag_lines",
    "neutralize_headings",
    "strip_schema_type_hints",
]
