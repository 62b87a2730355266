"""Renders reflection types and signatures as signature markup."""

from __future__ import annotations

import json
from typing import Callable, Iterable, List, Optional

from markupsafe import Markup, escape

from ..models import (
    ArrayType,
    ConditionalType,
    DeclarationReflection,
    IndexedAccessType,
    InferredType,
    IntersectionType,
    IntrinsicType,
    LiteralType,
    MappedType,
    NamedTupleMemberType,
    OptionalType,
    ParameterReflection,
    PredicateType,
    ProjectReflection,
    QueryType,
    ReferenceType,
    Reflection,
    ReflectionType,
    RestType,
    SignatureReflection,
    SomeType,
    TemplateLiteralType,
    TupleType,
    TypeOperatorType,
    TypeParameterReflection,
    UnionType,
    UnknownType,
)

# Four non-breaking spaces per nesting level, as in the default theme.
INDENT = "\u00a0" * 4

UrlResolver = Callable[[Optional[Reflection]], Optional[str]]


def esc(text: object) -> str:
    """HTML-escape ``text`` and return a plain ``str`` safe to concatenate."""
    return str(escape(text))


def keyword(text: str) -> str:
    return f'<span class="tsd-signature-keyword">{esc(text)}</span>'


def symbol(text: str) -> str:
    return f'<span class="tsd-signature-symbol">{esc(text)}</span>'


def kind_class(reflection: Reflection) -> str:
    """Return the ``tsd-kind-*`` CSS class for a reflection."""
    name = reflection.kind.name or "unknown"
    chars: List[str] = []
    for char in name:
        if char.isupper() and chars:
            chars.append("-")
        chars.append(char.lower())
    return "tsd-kind-" + "".join(chars)


class TypeFormatter:
    """Formats :class:`SomeType` trees; inline object types span multiple lines.

    Internals work on plain strings and only the public methods wrap the result in
    :class:`~markupsafe.Markup`, so concatenation never re-escapes rendered tags.
    """

    _NEEDS_PARENS = ("union", "intersection", "conditional", "typeOperator")

    def __init__(self, project: ProjectReflection, url_for: UrlResolver) -> None:
        self.project = project
        self.url_for = url_for

    # -- public API ----------------------------------------------------------

    def format(self, some_type: Optional[SomeType], depth: int = 0) -> Markup:
        return Markup(self._render(some_type, depth))

    def type_parameters(self, parameters: Iterable[TypeParameterReflection]) -> Markup:
        return Markup(self._type_parameters(parameters))

    def signature(
        self,
        signature: SignatureReflection,
        *,
        name: Optional[str] = None,
        arrow: bool = False,
        depth: int = 0,
    ) -> Markup:
        """Render ``name<T>(a: A, b?: B): R`` or, with ``arrow``, ``(a: A) => R``."""
        return Markup(self._signature(signature, name=name, arrow=arrow, depth=depth))

    def object_body(self, declaration: DeclarationReflection, depth: int = 0) -> Markup:
        """Render ``{ member: T; ... }`` with one member per line."""
        return Markup(self._object_body(declaration, depth))

    # -- internals -----------------------------------------------------------

    def _render(self, some_type: Optional[SomeType], depth: int) -> str:
        if some_type is None:
            return self._type_name("any")
        handler = getattr(self, f"_format_{some_type.type}", None)
        if handler is None:
            return self._type_name(getattr(some_type, "name", "") or "unknown")
        return handler(some_type, depth)

    def _type_parameters(self, parameters: Iterable[TypeParameterReflection]) -> str:
        rendered = []
        for parameter in parameters:
            text = f'<span class="tsd-signature-type tsd-kind-type-parameter">{esc(parameter.name)}</span>'
            if parameter.type is not None:
                text += " " + keyword("extends") + " " + self._render(parameter.type, 0)
            if parameter.default is not None:
                text += " " + symbol("=") + " " + self._render(parameter.default, 0)
            rendered.append(text)
        if not rendered:
            return ""
        return symbol("<") + symbol(", ").join(rendered) + symbol(">")

    def _signature(
        self,
        signature: SignatureReflection,
        *,
        name: Optional[str] = None,
        arrow: bool = False,
        depth: int = 0,
    ) -> str:
        parts: List[str] = []
        if name:
            parts.append(f'<span class="{kind_class(signature.parent or signature)}">{esc(name)}</span>')
        parts.append(self._type_parameters(signature.type_parameters))
        parts.append(symbol("("))
        parts.append(symbol(", ").join(self._parameter(parameter, depth) for parameter in signature.parameters))
        parts.append(symbol(")"))
        parts.append(" " + symbol("=>") + " " if arrow else symbol(": "))
        parts.append(self._render(signature.type, depth))
        return "".join(parts)

    def _parameter(self, parameter: ParameterReflection, depth: int) -> str:
        text = symbol("...") if parameter.flags.is_rest else ""
        text += f'<span class="tsd-kind-parameter">{esc(parameter.name)}</span>'
        if parameter.flags.is_optional or parameter.default_value is not None:
            text += symbol("?: ")
        else:
            text += symbol(": ")
        return text + self._render(parameter.type, depth)

    def _type_name(self, name: str) -> str:
        return f'<span class="tsd-signature-type">{esc(name)}</span>'

    def _wrapped(self, some_type: SomeType, depth: int) -> str:
        rendered = self._render(some_type, depth)
        needs_parens = some_type.type in self._NEEDS_PARENS or (
            isinstance(some_type, ReflectionType)
            and some_type.declaration is not None
            and bool(some_type.declaration.signatures)
            and not some_type.declaration.children
        )
        if needs_parens:
            return symbol("(") + rendered + symbol(")")
        return rendered

    # -- type kinds ----------------------------------------------------------

    def _format_intrinsic(self, some_type: IntrinsicType, depth: int) -> str:
        return self._type_name(some_type.name)

    def _format_literal(self, some_type: LiteralType, depth: int) -> str:
        if some_type.is_bigint:
            return self._type_name(f"{some_type.value}n")
        return self._type_name(json.dumps(some_type.value))

    def _format_reference(self, some_type: ReferenceType, depth: int) -> str:
        target = self.project.get_reflection_by_id(some_type.target)
        url = self.url_for(target) if target is not None else some_type.external_url
        if url:
            css = "tsd-signature-type"
            if target is not None:
                css += " " + kind_class(target)
            text = f'<a href="{esc(url)}" class="{css}">{esc(some_type.name)}</a>'
        else:
            text = self._type_name(some_type.name)
        if some_type.type_arguments:
            arguments = symbol(", ").join(self._render(argument, depth) for argument in some_type.type_arguments)
            text += symbol("<") + arguments + symbol(">")
        return text

    def _format_array(self, some_type: ArrayType, depth: int) -> str:
        return self._wrapped(some_type.element_type, depth) + symbol("[]")

    def _format_union(self, some_type: UnionType, depth: int) -> str:
        return symbol(" | ").join(self._wrapped(item, depth) for item in some_type.types)

    def _format_intersection(self, some_type: IntersectionType, depth: int) -> str:
        return symbol(" & ").join(self._wrapped(item, depth) for item in some_type.types)

    def _format_tuple(self, some_type: TupleType, depth: int) -> str:
        elements = symbol(", ").join(self._render(item, depth) for item in some_type.elements)
        return symbol("[") + elements + symbol("]")

    def _format_namedTupleMember(self, some_type: NamedTupleMemberType, depth: int) -> str:
        marker = "?: " if some_type.is_optional else ": "
        return esc(some_type.name) + symbol(marker) + self._render(some_type.element, depth)

    def _format_optional(self, some_type: OptionalType, depth: int) -> str:
        return self._wrapped(some_type.element_type, depth) + symbol("?")

    def _format_rest(self, some_type: RestType, depth: int) -> str:
        return symbol("...") + self._wrapped(some_type.element_type, depth)

    def _format_typeOperator(self, some_type: TypeOperatorType, depth: int) -> str:
        return keyword(some_type.operator) + " " + self._wrapped(some_type.target, depth)

    def _format_indexedAccess(self, some_type: IndexedAccessType, depth: int) -> str:
        return (
            self._wrapped(some_type.object_type, depth)
            + symbol("[")
            + self._render(some_type.index_type, depth)
            + symbol("]")
        )

    def _format_query(self, some_type: QueryType, depth: int) -> str:
        return keyword("typeof") + " " + self._format_reference(some_type.query_type, depth)

    def _format_conditional(self, some_type: ConditionalType, depth: int) -> str:
        return " ".join(
            [
                self._wrapped(some_type.check_type, depth),
                keyword("extends"),
                self._render(some_type.extends_type, depth),
                symbol("?"),
                self._render(some_type.true_type, depth),
                symbol(":"),
                self._render(some_type.false_type, depth),
            ]
        )

    def _format_mapped(self, some_type: MappedType, depth: int) -> str:
        parts = [symbol("{ ")]
        if some_type.readonly_modifier == "+":
            parts.append(keyword("readonly") + " ")
        elif some_type.readonly_modifier == "-":
            parts.append(symbol("-") + keyword("readonly") + " ")
        parts.append(symbol("["))
        parts.append(f'<span class="tsd-kind-type-parameter">{esc(some_type.parameter)}</span>')
        parts.append(" " + keyword("in") + " ")
        parts.append(self._render(some_type.parameter_type, depth))
        if some_type.name_type is not None:
            parts.append(" " + keyword("as") + " " + self._render(some_type.name_type, depth))
        parts.append(symbol("]"))
        if some_type.optional_modifier == "+":
            parts.append(symbol("?: "))
        elif some_type.optional_modifier == "-":
            parts.append(symbol("-?: "))
        else:
            parts.append(symbol(": "))
        parts.append(self._render(some_type.template_type, depth))
        parts.append(symbol(" }"))
        return "".join(parts)

    def _format_templateLiteral(self, some_type: TemplateLiteralType, depth: int) -> str:
        parts = [symbol("`"), esc(some_type.head)]
        for item_type, text in some_type.tail:
            parts.append(symbol("${") + self._render(item_type, depth) + symbol("}"))
            parts.append(esc(text))
        parts.append(symbol("`"))
        return "".join(parts)

    def _format_predicate(self, some_type: PredicateType, depth: int) -> str:
        text = keyword("asserts") + " " if some_type.asserts else ""
        text += f'<span class="tsd-kind-parameter">{esc(some_type.name)}</span>'
        if some_type.target_type is not None:
            text += " " + keyword("is") + " " + self._render(some_type.target_type, depth)
        return text

    def _format_inferred(self, some_type: InferredType, depth: int) -> str:
        return keyword("infer") + " " + f'<span class="tsd-kind-type-parameter">{esc(some_type.name)}</span>'

    def _format_unknown(self, some_type: UnknownType, depth: int) -> str:
        return self._type_name(some_type.name or "unknown")

    def _format_reflection(self, some_type: ReflectionType, depth: int) -> str:
        declaration = some_type.declaration
        if declaration is None:
            return symbol("{}")
        if declaration.signatures and not declaration.children and not declaration.index_signatures:
            rendered = [self._signature(item, arrow=True, depth=depth) for item in declaration.signatures]
            if len(rendered) == 1:
                return rendered[0]
            return symbol(" & ").join(symbol("(") + item + symbol(")") for item in rendered)
        return self._object_body(declaration, depth)

    def _object_body(self, declaration: DeclarationReflection, depth: int) -> str:
        lines: List[str] = []
        inner = INDENT * (depth + 1)
        for index_signature in declaration.index_signatures:
            parameters = symbol(", ").join(
                esc(parameter.name) + symbol(": ") + self._render(parameter.type, depth + 1)
                for parameter in index_signature.parameters
            )
            lines.append(
                inner
                + symbol("[")
                + parameters
                + symbol("]: ")
                + self._render(index_signature.type, depth + 1)
                + symbol(";")
            )
        for signature in declaration.signatures:
            lines.append(inner + self._signature(signature, depth=depth + 1) + symbol(";"))
        for child in declaration.children:
            lines.append(inner + self._member_line(child, depth + 1))
        if not lines:
            return symbol("{}")
        return symbol("{") + "<br/>" + "<br/>".join(lines) + "<br/>" + INDENT * depth + symbol("}")

    def _member_line(self, child: DeclarationReflection, depth: int) -> str:
        prefix = "".join(keyword(word) + " " for word in child.flags.keywords())
        url = self.url_for(child)
        if url:
            name = f'<a class="{kind_class(child)}" href="{esc(url)}">{esc(child.name)}</a>'
        else:
            name = f'<span class="{kind_class(child)}">{esc(child.name)}</span>'
        if child.signatures:
            separator = symbol(";") + "<br/>" + INDENT * depth + prefix
            rendered = [name + self._signature(item, depth=depth) for item in child.signatures]
            return prefix + separator.join(rendered) + symbol(";")
        marker = "?: " if child.flags.is_optional else ": "
        return prefix + name + symbol(marker) + self._render(child.type, depth) + symbol(";")


__all__ = ["INDENT", "TypeFormatter", "esc", "keyword", "kind_class", "symbol"]
