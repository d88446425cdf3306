"""ESTree static analyzer and formatter: public API."""

from __future__ import annotations

from . import types
from .analyze import analyze
from .emit import format, to_source
from .emitter import Emitter, FormatOptions
from .errors import AnalyzerError, DuplicateDeclarationError, UnsupportedConstructError
from .scope import Scope
from .walk import walk

__all__ = [
    "AnalyzerError",
    "DuplicateDeclarationError",
    "Emitter",
    "FormatOptions",
    "Scope",
    "UnsupportedConstructError",
    "analyze",
    "format",
    "to_source",
    "types",
    "walk",
]
