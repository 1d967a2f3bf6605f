"""
Compilation entry points.

``ReplayCompiler`` turns an element tree, a part or a whole package into a
``CompilationUnit``. The traversal itself is synchronous; the module-level
functions run it on a single worker thread, and the ``*_async`` variants
await it from an event loop while forwarding task cancellation into the
run's ``CancellationToken``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

from replaygen.core.errors import PreconditionError
from replaygen.core.ir import (
    CompilationUnit,
    ElementNode,
    PackageNode,
    PartGraph,
    Routine,
    SchemaRegistry,
)
from replaygen.core.ir.instructions import var

from .cancellation import CancellationToken
from .config import CompilerSettings
from .context import CompilationContext
from .elements import ElementCompiler
from .parts import PartGraphCompiler

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ReplayCompiler:
    """
    Compiles document models into compilation units.

    A compiler instance holds only immutable inputs; every call creates its
    own ``CompilationContext``, so one instance may serve concurrent calls.

    Example:
        compiler = ReplayCompiler(SchemaRegistry(document))
        unit = compiler.compile_element(root)
        unit.entry.name  # "BuildDocument"
    """

    def __init__(self, schema: SchemaRegistry | None, settings: CompilerSettings | None = None):
        if schema is None:
            raise PreconditionError("A schema registry is required")
        self.schema = schema
        self.settings = settings if settings is not None else CompilerSettings()

    def _context(self, token: CancellationToken | None) -> CompilationContext:
        return CompilationContext.create(self.settings, self.schema, token)

    def compile_element(self, node: ElementNode | None, token: CancellationToken | None = None) -> CompilationUnit:
        """Compile an element tree into a ``Build<Type>`` routine returning the root."""
        if node is None:
            raise PreconditionError("An element node is required")

        ctx = self._context(token)
        logger.info("Compiling element tree rooted at %s", node.type)
        output = ElementCompiler(ctx).compile(node)

        routine = Routine(
            name=f"Build{node.type.name}",
            body=output.instructions,
            return_type=ctx.namespaces.type_name(node.type),
            returns=var(output.variable_name) if output.variable_name else None,
            public=True,
        )
        return self._unit(ctx, node.type.name, [routine])

    def compile_part(
        self,
        graph: PartGraph | None,
        uri: str,
        token: CancellationToken | None = None,
    ) -> CompilationUnit:
        """Compile one part of a graph, plus every part reachable from it."""
        if graph is None:
            raise PreconditionError("A part graph is required")
        part = graph.get(uri)
        if part is None:
            raise PreconditionError(f"Part '{uri}' is not in the graph")

        ctx = self._context(token)
        logger.info("Compiling part %s (%s)", part.uri, part.type)
        entry, helpers = PartGraphCompiler(ctx, graph).compile_entry(part)
        return self._unit(ctx, part.type.name, [entry, *helpers])

    def compile_package(self, package: PackageNode | None, token: CancellationToken | None = None) -> CompilationUnit:
        """Compile a whole package into ``CreatePackage``, ``CreateParts`` and helpers."""
        if package is None:
            raise PreconditionError("A package is required")

        ctx = self._context(token)
        logger.info("Compiling package %s with %d parts", package.type, len(package.graph.parts))
        entry, routines = PartGraphCompiler(ctx, package.graph).compile_package(package)
        return self._unit(ctx, package.type.name, [entry, *routines])

    def _unit(self, ctx: CompilationContext, type_name: str, routines: list[Routine]) -> CompilationUnit:
        unit = CompilationUnit(
            namespace=self.settings.generated_namespace_name,
            imports=ctx.namespaces.imports(),
            class_name=f"{type_name}BuilderClass",
            routines=routines,
        )
        logger.info(
            "Compiled %s: %d routines, %d instructions, %d imports",
            unit.class_name,
            len(unit.routines),
            unit.instruction_count(),
            len(unit.imports),
        )
        return unit


# =============================================================================
# Worker-backed entry points
# =============================================================================


def _run_on_worker(fn: Callable[..., T], *args: object) -> T:
    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="replaygen") as pool:
        return pool.submit(fn, *args).result()


async def _run_async(fn: Callable[..., T], *args: object, token: CancellationToken | None) -> T:
    token = token or CancellationToken()
    try:
        return await asyncio.to_thread(fn, *args, token)
    except asyncio.CancelledError:
        token.cancel()
        raise


def generate_element(
    node: ElementNode | None,
    schema: SchemaRegistry | None,
    settings: CompilerSettings | None = None,
    token: CancellationToken | None = None,
) -> CompilationUnit:
    return _run_on_worker(ReplayCompiler(schema, settings).compile_element, node, token)


def generate_part(
    graph: PartGraph | None,
    uri: str,
    schema: SchemaRegistry | None,
    settings: CompilerSettings | None = None,
    token: CancellationToken | None = None,
) -> CompilationUnit:
    return _run_on_worker(ReplayCompiler(schema, settings).compile_part, graph, uri, token)


def generate_package(
    package: PackageNode | None,
    schema: SchemaRegistry | None,
    settings: CompilerSettings | None = None,
    token: CancellationToken | None = None,
) -> CompilationUnit:
    return _run_on_worker(ReplayCompiler(schema, settings).compile_package, package, token)


async def generate_element_async(
    node: ElementNode | None,
    schema: SchemaRegistry | None,
    settings: CompilerSettings | None = None,
    token: CancellationToken | None = None,
) -> CompilationUnit:
    """Async variant of ``generate_element``; cancelling the task cancels the run."""
    return await _run_async(ReplayCompiler(schema, settings).compile_element, node, token=token)


async def generate_part_async(
    graph: PartGraph | None,
    uri: str,
    schema: SchemaRegistry | None,
    settings: CompilerSettings | None = None,
    token: CancellationToken | None = None,
) -> CompilationUnit:
    return await _run_async(ReplayCompiler(schema, settings).compile_part, graph, uri, token=token)


async def generate_package_async(
    package: PackageNode | None,
    schema: SchemaRegistry | None,
    settings: CompilerSettings | None = None,
    token: CancellationToken | None = None,
) -> CompilationUnit:
    return await _run_async(ReplayCompiler(schema, settings).compile_package, package, token=token)
