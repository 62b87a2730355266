"""Comment inspection helpers: documentation presence and category tags."""

from __future__ import annotations

from .models import Reflection, ReflectionType

CATEGORY_TAG = "@category"


def has_documentation(reflection: Reflection) -> bool:
    """Return True when a reflection, or any member of its inline object type, is commented.

    A property typed as ``{ inner: { leaf: string } }`` counts as documented when only
    ``leaf`` carries a comment.
    """
    if reflection.has_comment():
        return True
    declaration_type = getattr(reflection, "type", None)
    if not isinstance(declaration_type, ReflectionType) or declaration_type.declaration is None:
        return False
    return any(has_documentation(child) for child in declaration_type.declaration.children)


def category_of(reflection: Reflection) -> str:
    """Return the ``@category`` label of a reflection, or ``""`` for the default bucket."""
    if reflection.comment is None:
        return ""
    tag = reflection.comment.get_tag(CATEGORY_TAG)
    if tag is None:
        return ""
    return " ".join(part.text for part in tag.content).strip()


__all__ = ["CATEGORY_TAG", "category_of", "has_documentation"]
