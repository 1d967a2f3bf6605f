"""Core replaygen functionality: IR, schema registry, errors and string helpers."""

from . import ir
from .errors import (
    CompilationCancelled,
    ErrorContext,
    PreconditionError,
    ReplaygenError,
    SchemaError,
    UnsupportedConstructionError,
    ValueCoercionMismatch,
)

__all__ = [
    "ir",
    "ReplaygenError",
    "PreconditionError",
    "ValueCoercionMismatch",
    "CompilationCancelled",
    "UnsupportedConstructionError",
    "SchemaError",
    "ErrorContext",
]
