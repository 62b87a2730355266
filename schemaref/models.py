"""Reflection model shared across schemaref components.

The classes mirror the project model TypeDoc serializes with ``--json``. They are
built once by :mod:`schemaref.loader` and treated as read-only afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntFlag
from typing import Dict, Iterator, List, Optional, Set, Union


class ReflectionKind(IntFlag):
    """Kinds of reflections, using TypeDoc's numeric values."""

    Project = 0x1
    Module = 0x2
    Namespace = 0x4
    Enum = 0x8
    EnumMember = 0x10
    Variable = 0x20
    Function = 0x40
    Class = 0x80
    Interface = 0x100
    Constructor = 0x200
    Property = 0x400
    Method = 0x800
    CallSignature = 0x1000
    IndexSignature = 0x2000
    ConstructorSignature = 0x4000
    Parameter = 0x8000
    TypeLiteral = 0x10000
    TypeParameter = 0x20000
    Accessor = 0x40000
    GetSignature = 0x80000
    SetSignature = 0x100000
    TypeAlias = 0x200000
    Reference = 0x400000
    Document = 0x800000


SIGNATURE_KINDS = (
    ReflectionKind.CallSignature
    | ReflectionKind.ConstructorSignature
    | ReflectionKind.GetSignature
    | ReflectionKind.SetSignature
)

# Kinds which own a page of their own under the structure router.
PAGE_KINDS = (
    ReflectionKind.Module
    | ReflectionKind.Namespace
    | ReflectionKind.Enum
    | ReflectionKind.Class
    | ReflectionKind.Interface
    | ReflectionKind.TypeAlias
    | ReflectionKind.Function
    | ReflectionKind.Variable
)


@dataclass
class ReflectionFlags:
    """Boolean modifiers attached to a reflection."""

    is_optional: bool = False
    is_readonly: bool = False
    is_rest: bool = False
    is_static: bool = False
    is_abstract: bool = False
    is_const: bool = False
    is_private: bool = False
    is_protected: bool = False

    def keywords(self) -> List[str]:
        """Return the signature keywords implied by these flags, in display order."""
        words: List[str] = []
        if self.is_private:
            words.append("private")
        if self.is_protected:
            words.append("protected")
        if self.is_static:
            words.append("static")
        if self.is_abstract:
            words.append("abstract")
        if self.is_readonly:
            words.append("readonly")
        return words


@dataclass
class CommentDisplayPart:
    """One piece of a comment: plain text, inline code, or an inline tag."""

    kind: str
    text: str
    tag: Optional[str] = None
    target: Optional[int] = None


@dataclass
class CommentTag:
    """A block tag such as ``@category`` or ``@default``."""

    tag: str
    content: List[CommentDisplayPart] = field(default_factory=list)
    name: Optional[str] = None


@dataclass
class Comment:
    """Parsed documentation comment."""

    summary: List[CommentDisplayPart] = field(default_factory=list)
    block_tags: List[CommentTag] = field(default_factory=list)
    modifier_tags: Set[str] = field(default_factory=set)

    def get_tag(self, tag: str) -> Optional[CommentTag]:
        for block in self.block_tags:
            if block.tag == tag:
                return block
        return None

    def has_modifier(self, tag: str) -> bool:
        return tag in self.modifier_tags

    def has_visible_component(self) -> bool:
        """Return True when the summary has visible text or any block tag survives, even an empty one."""
        if any(part.kind != "text" or part.text.strip() for part in self.summary):
            return True
        return bool(self.block_tags)


@dataclass
class SourceReference:
    """Location a reflection was declared at."""

    file_name: str
    line: int
    character: int = 0
    url: Optional[str] = None


@dataclass(eq=False)
class Reflection:
    """Base class for every node of the reflection tree."""

    id: int
    name: str
    kind: ReflectionKind
    comment: Optional[Comment] = None
    parent: Optional["Reflection"] = field(default=None, repr=False)

    def kind_of(self, kind: ReflectionKind) -> bool:
        return bool(self.kind & kind)

    def is_project(self) -> bool:
        return False

    def has_comment(self) -> bool:
        return self.comment is not None and self.comment.has_visible_component()

    def get_full_name(self, separator: str = ".") -> str:
        """Return the name path from the first non-project ancestor."""
        if self.parent is not None and not self.parent.is_project():
            return self.parent.get_full_name(separator) + separator + self.name
        return self.name

    def get_friendly_full_name(self) -> str:
        """Like :meth:`get_full_name`, but signatures are named after their owner."""
        if self.parent is not None and not self.parent.is_project():
            if self.kind_of(SIGNATURE_KINDS):
                return self.parent.get_friendly_full_name()
            return self.parent.get_friendly_full_name() + "." + self.name
        return self.name

    def iter_children(self) -> Iterator["Reflection"]:
        return iter(())


@dataclass(eq=False)
class TypeParameterReflection(Reflection):
    """A generic type parameter with optional constraint and default."""

    type: Optional["SomeType"] = None
    default: Optional["SomeType"] = None


@dataclass(eq=False)
class ParameterReflection(Reflection):
    type: Optional["SomeType"] = None
    flags: ReflectionFlags = field(default_factory=ReflectionFlags)
    default_value: Optional[str] = None


@dataclass(eq=False)
class SignatureReflection(Reflection):
    """Call, construct, or accessor signature of a declaration."""

    type: Optional["SomeType"] = None
    parameters: List[ParameterReflection] = field(default_factory=list)
    type_parameters: List[TypeParameterReflection] = field(default_factory=list)
    sources: List[SourceReference] = field(default_factory=list)

    def iter_children(self) -> Iterator[Reflection]:
        yield from self.type_parameters
        yield from self.parameters


@dataclass(eq=False)
class DeclarationReflection(Reflection):
    """A named declaration: module, interface, property, type alias, ..."""

    flags: ReflectionFlags = field(default_factory=ReflectionFlags)
    type: Optional["SomeType"] = None
    children: List["DeclarationReflection"] = field(default_factory=list)
    signatures: List[SignatureReflection] = field(default_factory=list)
    index_signatures: List[SignatureReflection] = field(default_factory=list)
    get_signature: Optional[SignatureReflection] = None
    set_signature: Optional[SignatureReflection] = None
    type_parameters: List[TypeParameterReflection] = field(default_factory=list)
    extended_types: List["SomeType"] = field(default_factory=list)
    implemented_types: List["SomeType"] = field(default_factory=list)
    default_value: Optional[str] = None
    sources: List[SourceReference] = field(default_factory=list)

    def iter_children(self) -> Iterator[Reflection]:
        yield from self.type_parameters
        yield from self.children
        yield from self.signatures
        yield from self.index_signatures
        if self.get_signature is not None:
            yield self.get_signature
        if self.set_signature is not None:
            yield self.set_signature


@dataclass(eq=False)
class ProjectReflection(Reflection):
    """Root of the reflection tree."""

    children: List[DeclarationReflection] = field(default_factory=list)
    package_name: Optional[str] = None
    reflections: Dict[int, Reflection] = field(default_factory=dict, repr=False)

    def is_project(self) -> bool:
        return True

    def iter_children(self) -> Iterator[Reflection]:
        return iter(self.children)

    def get_reflection_by_id(self, reflection_id: Optional[int]) -> Optional[Reflection]:
        if reflection_id is None:
            return None
        return self.reflections.get(reflection_id)


# --- Types -------------------------------------------------------------------


@dataclass(eq=False)
class SomeType:
    """Base class for type nodes; ``type`` matches TypeDoc's discriminator."""

    type: str = field(default="unknown", init=False)


@dataclass(eq=False)
class IntrinsicType(SomeType):
    name: str = "any"

    def __post_init__(self) -> None:
        self.type = "intrinsic"


@dataclass(eq=False)
class LiteralType(SomeType):
    value: Union[str, int, float, bool, None] = None
    is_bigint: bool = False

    def __post_init__(self) -> None:
        self.type = "literal"


@dataclass(eq=False)
class ReferenceType(SomeType):
    name: str = ""
    target: Optional[int] = None
    type_arguments: List[SomeType] = field(default_factory=list)
    package: Optional[str] = None
    external_url: Optional[str] = None

    def __post_init__(self) -> None:
        self.type = "reference"


@dataclass(eq=False)
class ArrayType(SomeType):
    element_type: SomeType = field(default_factory=lambda: IntrinsicType("unknown"))

    def __post_init__(self) -> None:
        self.type = "array"


@dataclass(eq=False)
class UnionType(SomeType):
    types: List[SomeType] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.type = "union"


@dataclass(eq=False)
class IntersectionType(SomeType):
    types: List[SomeType] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.type = "intersection"


@dataclass(eq=False)
class TupleType(SomeType):
    elements: List[SomeType] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.type = "tuple"


@dataclass(eq=False)
class NamedTupleMemberType(SomeType):
    name: str = ""
    is_optional: bool = False
    element: SomeType = field(default_factory=lambda: IntrinsicType("unknown"))

    def __post_init__(self) -> None:
        self.type = "namedTupleMember"


@dataclass(eq=False)
class OptionalType(SomeType):
    element_type: SomeType = field(default_factory=lambda: IntrinsicType("unknown"))

    def __post_init__(self) -> None:
        self.type = "optional"


@dataclass(eq=False)
class RestType(SomeType):
    element_type: SomeType = field(default_factory=lambda: IntrinsicType("unknown"))

    def __post_init__(self) -> None:
        self.type = "rest"


@dataclass(eq=False)
class ReflectionType(SomeType):
    """Inline object type; its members live on ``declaration.children``."""

    declaration: Optional[DeclarationReflection] = None

    def __post_init__(self) -> None:
        self.type = "reflection"


@dataclass(eq=False)
class TypeOperatorType(SomeType):
    operator: str = "keyof"
    target: SomeType = field(default_factory=lambda: IntrinsicType("unknown"))

    def __post_init__(self) -> None:
        self.type = "typeOperator"


@dataclass(eq=False)
class IndexedAccessType(SomeType):
    object_type: SomeType = field(default_factory=lambda: IntrinsicType("unknown"))
    index_type: SomeType = field(default_factory=lambda: IntrinsicType("unknown"))

    def __post_init__(self) -> None:
        self.type = "indexedAccess"


@dataclass(eq=False)
class QueryType(SomeType):
    query_type: ReferenceType = field(default_factory=ReferenceType)

    def __post_init__(self) -> None:
        self.type = "query"


@dataclass(eq=False)
class ConditionalType(SomeType):
    check_type: SomeType = field(default_factory=lambda: IntrinsicType("unknown"))
    extends_type: SomeType = field(default_factory=lambda: IntrinsicType("unknown"))
    true_type: SomeType = field(default_factory=lambda: IntrinsicType("unknown"))
    false_type: SomeType = field(default_factory=lambda: IntrinsicType("unknown"))

    def __post_init__(self) -> None:
        self.type = "conditional"


@dataclass(eq=False)
class MappedType(SomeType):
    parameter: str = "K"
    parameter_type: SomeType = field(default_factory=lambda: IntrinsicType("unknown"))
    template_type: SomeType = field(default_factory=lambda: IntrinsicType("unknown"))
    readonly_modifier: Optional[str] = None
    optional_modifier: Optional[str] = None
    name_type: Optional[SomeType] = None

    def __post_init__(self) -> None:
        self.type = "mapped"


@dataclass(eq=False)
class TemplateLiteralType(SomeType):
    head: str = ""
    tail: List[tuple[SomeType, str]] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.type = "templateLiteral"


@dataclass(eq=False)
class PredicateType(SomeType):
    name: str = ""
    asserts: bool = False
    target_type: Optional[SomeType] = None

    def __post_init__(self) -> None:
        self.type = "predicate"


@dataclass(eq=False)
class InferredType(SomeType):
    name: str = ""

    def __post_init__(self) -> None:
        self.type = "inferred"


@dataclass(eq=False)
class UnknownType(SomeType):
    """Type TypeDoc could not convert; carries its source text."""

    name: str = ""

    def __post_init__(self) -> None:
        self.type = "unknown"
