"""
replaygen - compile document object models into replayable build scripts.

An element tree or a graph of content parts goes in; a renderer-agnostic
instruction stream that rebuilds it from scratch comes out.
"""

from __future__ import annotations

import re
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _metadata_version
from pathlib import Path as _Path

from .core import ir
from .core.errors import (
    CompilationCancelled,
    PreconditionError,
    ReplaygenError,
    SchemaError,
    UnsupportedConstructionError,
    ValueCoercionMismatch,
)


def _get_version() -> str:
    """Get version from pyproject.toml (editable) or importlib.metadata (installed)."""
    pyproject = _Path(__file__).parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        content = pyproject.read_text()
        if match := re.search(r'^version\s*=\s*["\']([^"\']+)["\']', content, re.MULTILINE):
            return match.group(1)

    try:
        return _metadata_version("replaygen")
    except PackageNotFoundError:
        return "0.0.0"


__version__ = _get_version()

__all__ = [
    "__version__",
    "ir",
    "ReplaygenError",
    "PreconditionError",
    "ValueCoercionMismatch",
    "CompilationCancelled",
    "UnsupportedConstructionError",
    "SchemaError",
]
