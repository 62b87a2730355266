"""Default theme used to render reflections into HTML fragments."""

from .renderer import DefaultTheme, DefaultThemeRenderContext
from .types import TypeFormatter

__all__ = ["DefaultTheme", "DefaultThemeRenderContext", "TypeFormatter"]
