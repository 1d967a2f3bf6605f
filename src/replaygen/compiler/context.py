"""
Per-run compilation context.

All mutable state shared across one compilation request lives here and is
created fresh for every request, so concurrent requests never interfere.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from replaygen.core.errors import PreconditionError
from replaygen.core.ir import SchemaRegistry

from .cancellation import CancellationToken
from .config import CompilerSettings
from .namespaces import NamespaceRegistry


@dataclass
class CompilationContext:
    """
    Shared state of one compilation run.

    Attributes:
        settings: Settings for this run
        schema: Resolved schema registry
        namespaces: Namespace and alias registry for this run
        token: Cancellation signal observed by every traversal step
    """

    settings: CompilerSettings
    schema: SchemaRegistry
    namespaces: NamespaceRegistry
    token: CancellationToken = field(default_factory=CancellationToken)

    @classmethod
    def create(
        cls,
        settings: CompilerSettings | None,
        schema: SchemaRegistry | None,
        token: CancellationToken | None = None,
    ) -> CompilationContext:
        if settings is None:
            raise PreconditionError("Compiler settings are required")
        if schema is None:
            raise PreconditionError("A schema registry is required")
        return cls(
            settings=settings,
            schema=schema,
            namespaces=NamespaceRegistry(schema, settings.alias_order),
            token=token or CancellationToken(),
        )
