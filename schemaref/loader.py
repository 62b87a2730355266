"""Deserialization of TypeDoc JSON project documents into the reflection model."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Set

from .logging import get_logger
from .models import (
    ArrayType,
    Comment,
    CommentDisplayPart,
    CommentTag,
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
    ReflectionFlags,
    ReflectionKind,
    ReflectionType,
    RestType,
    SignatureReflection,
    SomeType,
    SourceReference,
    TemplateLiteralType,
    TupleType,
    TypeOperatorType,
    TypeParameterReflection,
    UnionType,
    UnknownType,
)

INTERNAL_TAG = "@internal"


class ReflectionLoadError(RuntimeError):
    """Raised when the input is not a TypeDoc project document."""


class ProjectLoader:
    """Builds a :class:`ProjectReflection` from TypeDoc's ``--json`` output.

    Excluded block tags are removed from comments while loading, and reflections
    marked ``@internal`` are dropped together with their subtree when
    ``exclude_internal`` is set.
    """

    def __init__(
        self,
        *,
        exclude_internal: bool = True,
        exclude_tags: Iterable[str] = (),
    ) -> None:
        self.exclude_internal = exclude_internal
        self.exclude_tags: Set[str] = set(exclude_tags)
        self.logger = get_logger("loader")
        self._registry: Dict[int, Reflection] = {}
        self._owner: Optional[Reflection] = None
        self._type_loaders: Dict[str, Callable[[Mapping[str, Any]], SomeType]] = {
            "intrinsic": lambda data: IntrinsicType(name=str(data.get("name", "any"))),
            "literal": self._load_literal,
            "reference": self._load_reference,
            "array": lambda data: ArrayType(element_type=self._load_type(data.get("elementType"))),
            "union": lambda data: UnionType(types=self._load_types(data.get("types"))),
            "intersection": lambda data: IntersectionType(types=self._load_types(data.get("types"))),
            "tuple": lambda data: TupleType(elements=self._load_types(data.get("elements"))),
            "namedTupleMember": lambda data: NamedTupleMemberType(
                name=str(data.get("name", "")),
                is_optional=bool(data.get("isOptional")),
                element=self._load_type(data.get("element")),
            ),
            "optional": lambda data: OptionalType(element_type=self._load_type(data.get("elementType"))),
            "rest": lambda data: RestType(element_type=self._load_type(data.get("elementType"))),
            "typeOperator": lambda data: TypeOperatorType(
                operator=str(data.get("operator", "keyof")),
                target=self._load_type(data.get("target")),
            ),
            "indexedAccess": lambda data: IndexedAccessType(
                object_type=self._load_type(data.get("objectType")),
                index_type=self._load_type(data.get("indexType")),
            ),
            "query": self._load_query,
            "conditional": lambda data: ConditionalType(
                check_type=self._load_type(data.get("checkType")),
                extends_type=self._load_type(data.get("extendsType")),
                true_type=self._load_type(data.get("trueType")),
                false_type=self._load_type(data.get("falseType")),
            ),
            "mapped": self._load_mapped,
            "templateLiteral": self._load_template_literal,
            "predicate": lambda data: PredicateType(
                name=str(data.get("name", "")),
                asserts=bool(data.get("asserts")),
                target_type=self._load_type(data["targetType"]) if data.get("targetType") else None,
            ),
            "inferred": lambda data: InferredType(name=str(data.get("name", ""))),
            "unknown": lambda data: UnknownType(name=str(data.get("name", ""))),
        }

    # -- entry points --------------------------------------------------------

    def load_path(self, path: Path) -> ProjectReflection:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ReflectionLoadError(f"Unable to read {path}: {exc}") from exc
        return self.load_text(text, source=str(path))

    def load_text(self, text: str, *, source: str = "<input>") -> ProjectReflection:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ReflectionLoadError(f"{source} is not valid JSON: {exc}") from exc
        return self.load(data, source=source)

    def load(self, data: Any, *, source: str = "<input>") -> ProjectReflection:
        """Load an already decoded TypeDoc project document."""
        if not isinstance(data, dict):
            raise ReflectionLoadError(f"{source} must contain a JSON object at the root")
        if data.get("kind") != ReflectionKind.Project:
            raise ReflectionLoadError(f"{source} is not a TypeDoc project (root kind is {data.get('kind')!r})")

        self._registry = {}
        project = ProjectReflection(
            id=int(data.get("id", 0)),
            name=str(data.get("name", "")),
            kind=ReflectionKind.Project,
            comment=self._load_comment(data.get("comment")),
            package_name=data.get("packageName"),
        )
        self._register(project)
        project.children = self._load_declarations(data.get("children"), project)
        project.reflections = self._registry
        self.logger.debug(
            "Loaded project %s with %d top-level children and %d reflections",
            project.name,
            len(project.children),
            len(self._registry),
        )
        return project

    # -- reflections ---------------------------------------------------------

    def _register(self, reflection: Reflection) -> None:
        self._registry[reflection.id] = reflection

    def _is_excluded(self, data: Mapping[str, Any]) -> bool:
        if not self.exclude_internal:
            return False
        comment = data.get("comment")
        if not isinstance(comment, dict):
            return False
        return INTERNAL_TAG in (comment.get("modifierTags") or [])

    def _load_declarations(self, items: Any, parent: Reflection) -> List[DeclarationReflection]:
        declarations: List[DeclarationReflection] = []
        for item in _as_list(items):
            if not isinstance(item, dict):
                continue
            if self._is_excluded(item):
                self.logger.debug("Skipping internal reflection %s", item.get("name"))
                continue
            declarations.append(self._load_declaration(item, parent))
        return declarations

    def _load_declaration(self, data: Mapping[str, Any], parent: Optional[Reflection]) -> DeclarationReflection:
        reflection = DeclarationReflection(
            id=int(data.get("id", -1)),
            name=str(data.get("name", "")),
            kind=_as_kind(data.get("kind")),
            comment=self._load_comment(data.get("comment")),
            parent=parent,
            flags=_load_flags(data.get("flags")),
            default_value=data.get("defaultValue"),
            sources=_load_sources(data.get("sources")),
        )
        self._register(reflection)
        reflection.type_parameters = self._load_type_parameters(data.get("typeParameters"), reflection)
        reflection.children = self._load_declarations(data.get("children"), reflection)
        reflection.signatures = self._load_signatures(data.get("signatures"), reflection)
        reflection.index_signatures = self._load_signatures(data.get("indexSignatures"), reflection)
        if isinstance(data.get("getSignature"), dict):
            reflection.get_signature = self._load_signature(data["getSignature"], reflection)
        if isinstance(data.get("setSignature"), dict):
            reflection.set_signature = self._load_signature(data["setSignature"], reflection)
        if data.get("type") is not None:
            reflection.type = self._load_type(data.get("type"), owner=reflection)
        reflection.extended_types = self._load_types(data.get("extendedTypes"))
        reflection.implemented_types = self._load_types(data.get("implementedTypes"))
        return reflection

    def _load_signatures(self, items: Any, parent: Reflection) -> List[SignatureReflection]:
        return [self._load_signature(item, parent) for item in _as_list(items) if isinstance(item, dict)]

    def _load_signature(self, data: Mapping[str, Any], parent: Reflection) -> SignatureReflection:
        signature = SignatureReflection(
            id=int(data.get("id", -1)),
            name=str(data.get("name", "")),
            kind=_as_kind(data.get("kind")),
            comment=self._load_comment(data.get("comment")),
            parent=parent,
            sources=_load_sources(data.get("sources")),
        )
        self._register(signature)
        signature.type_parameters = self._load_type_parameters(data.get("typeParameters"), signature)
        for item in _as_list(data.get("parameters")):
            if not isinstance(item, dict):
                continue
            parameter = ParameterReflection(
                id=int(item.get("id", -1)),
                name=str(item.get("name", "")),
                kind=_as_kind(item.get("kind", ReflectionKind.Parameter)),
                comment=self._load_comment(item.get("comment")),
                parent=signature,
                flags=_load_flags(item.get("flags")),
                default_value=item.get("defaultValue"),
            )
            self._register(parameter)
            if item.get("type") is not None:
                parameter.type = self._load_type(item.get("type"), owner=parameter)
            signature.parameters.append(parameter)
        if data.get("type") is not None:
            signature.type = self._load_type(data.get("type"), owner=signature)
        return signature

    def _load_type_parameters(self, items: Any, parent: Reflection) -> List[TypeParameterReflection]:
        parameters: List[TypeParameterReflection] = []
        for item in _as_list(items):
            if not isinstance(item, dict):
                continue
            parameter = TypeParameterReflection(
                id=int(item.get("id", -1)),
                name=str(item.get("name", "")),
                kind=ReflectionKind.TypeParameter,
                comment=self._load_comment(item.get("comment")),
                parent=parent,
            )
            self._register(parameter)
            if item.get("type") is not None:
                parameter.type = self._load_type(item.get("type"))
            if item.get("default") is not None:
                parameter.default = self._load_type(item.get("default"))
            parameters.append(parameter)
        return parameters

    # -- comments ------------------------------------------------------------

    def _load_comment(self, data: Any) -> Optional[Comment]:
        if not isinstance(data, dict):
            return None
        block_tags: List[CommentTag] = []
        for item in _as_list(data.get("blockTags")):
            if not isinstance(item, dict):
                continue
            tag = str(item.get("tag", ""))
            if tag in self.exclude_tags:
                continue
            block_tags.append(
                CommentTag(
                    tag=tag,
                    content=_load_display_parts(item.get("content")),
                    name=item.get("name"),
                )
            )
        modifiers = {str(tag) for tag in _as_list(data.get("modifierTags")) if str(tag) not in self.exclude_tags}
        return Comment(
            summary=_load_display_parts(data.get("summary")),
            block_tags=block_tags,
            modifier_tags=modifiers,
        )

    # -- types ---------------------------------------------------------------

    def _load_types(self, items: Any) -> List[SomeType]:
        return [self._load_type(item) for item in _as_list(items)]

    def _load_type(self, data: Any, owner: Optional[Reflection] = None) -> SomeType:
        if owner is not None:
            # Inline object declarations anywhere below this type belong to `owner`.
            previous, self._owner = self._owner, owner
            try:
                return self._load_type(data)
            finally:
                self._owner = previous
        if not isinstance(data, dict):
            return UnknownType(name=str(data) if data is not None else "unknown")
        kind = data.get("type")
        if kind == "reflection":
            return self._load_reflection_type(data)
        loader = self._type_loaders.get(str(kind))
        if loader is None:
            self.logger.debug("Unsupported type kind %r rendered as unknown", kind)
            return UnknownType(name=str(data.get("name", kind)))
        return loader(data)

    def _load_literal(self, data: Mapping[str, Any]) -> LiteralType:
        value = data.get("value")
        if isinstance(value, dict):
            # bigint literals are serialized as {negative, value}
            digits = str(value.get("value", "0"))
            return LiteralType(value=("-" if value.get("negative") else "") + digits, is_bigint=True)
        return LiteralType(value=value)

    def _load_reference(self, data: Mapping[str, Any]) -> ReferenceType:
        target = data.get("target")
        return ReferenceType(
            name=str(data.get("name", "")),
            target=target if isinstance(target, int) and not isinstance(target, bool) else None,
            type_arguments=self._load_types(data.get("typeArguments")),
            package=data.get("package"),
            external_url=data.get("externalUrl"),
        )

    def _load_query(self, data: Mapping[str, Any]) -> QueryType:
        query = data.get("queryType")
        reference = self._load_reference(query) if isinstance(query, dict) else ReferenceType()
        return QueryType(query_type=reference)

    def _load_mapped(self, data: Mapping[str, Any]) -> MappedType:
        return MappedType(
            parameter=str(data.get("parameter", "K")),
            parameter_type=self._load_type(data.get("parameterType")),
            template_type=self._load_type(data.get("templateType")),
            readonly_modifier=data.get("readonlyModifier"),
            optional_modifier=data.get("optionalModifier"),
            name_type=self._load_type(data["nameType"]) if data.get("nameType") else None,
        )

    def _load_template_literal(self, data: Mapping[str, Any]) -> TemplateLiteralType:
        tail = []
        for item in _as_list(data.get("tail")):
            if isinstance(item, Sequence) and len(item) == 2:
                tail.append((self._load_type(item[0]), str(item[1])))
        return TemplateLiteralType(head=str(data.get("head", "")), tail=tail)

    def _load_reflection_type(self, data: Mapping[str, Any]) -> ReflectionType:
        declaration_data = data.get("declaration")
        if not isinstance(declaration_data, dict):
            return ReflectionType(declaration=None)
        return ReflectionType(declaration=self._load_declaration(declaration_data, self._owner))


def load_project(
    source: Path | str,
    *,
    exclude_internal: bool = True,
    exclude_tags: Iterable[str] = (),
) -> ProjectReflection:
    """Load a TypeDoc JSON project from a path."""
    loader = ProjectLoader(exclude_internal=exclude_internal, exclude_tags=exclude_tags)
    return loader.load_path(Path(source))


def _load_display_parts(items: Any) -> List[CommentDisplayPart]:
    parts: List[CommentDisplayPart] = []
    for item in _as_list(items):
        if not isinstance(item, dict):
            continue
        target = item.get("target")
        parts.append(
            CommentDisplayPart(
                kind=str(item.get("kind", "text")),
                text=str(item.get("text", "")),
                tag=item.get("tag"),
                target=target if isinstance(target, int) and not isinstance(target, bool) else None,
            )
        )
    return parts


def _load_flags(data: Any) -> ReflectionFlags:
    flags = data if isinstance(data, dict) else {}
    return ReflectionFlags(
        is_optional=bool(flags.get("isOptional")),
        is_readonly=bool(flags.get("isReadonly")),
        is_rest=bool(flags.get("isRest")),
        is_static=bool(flags.get("isStatic")),
        is_abstract=bool(flags.get("isAbstract")),
        is_const=bool(flags.get("isConst")),
        is_private=bool(flags.get("isPrivate")),
        is_protected=bool(flags.get("isProtected")),
    )


def _load_sources(items: Any) -> List[SourceReference]:
    sources: List[SourceReference] = []
    for item in _as_list(items):
        if not isinstance(item, dict) or "fileName" not in item:
            continue
        sources.append(
            SourceReference(
                file_name=str(item["fileName"]),
                line=int(item.get("line", 0)),
                character=int(item.get("character", 0)),
                url=item.get("url"),
            )
        )
    return sources


def _as_kind(value: Any) -> ReflectionKind:
    try:
        return ReflectionKind(int(value))
    except (TypeError, ValueError) as exc:
        raise ReflectionLoadError(f"Invalid reflection kind: {value!r}") from exc


def _as_list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, list) else []


__all__ = ["INTERNAL_TAG", "ProjectLoader", "ReflectionLoadError", "load_project"]
