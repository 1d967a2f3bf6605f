"""
replaygen compiler.

Walks element trees and part graphs and emits the instruction stream
that rebuilds them.
"""

from .cancellation import CancellationToken
from .config import AliasOrderPolicy, CompilerSettings, load_compiler_settings
from .context import CompilationContext
from .elements import ElementCompiler
from .handlers import ElementHandler, ElementOutput, HandlerRegistry, PartHandler
from .namespaces import NamespaceRegistry
from .naming import NamePoolCollection, TypeCounter, VariableNamePool, generate_variable_name
from .parts import PartGraphCompiler
from .runner import (
    ReplayCompiler,
    generate_element,
    generate_element_async,
    generate_package,
    generate_package_async,
    generate_part,
    generate_part_async,
)

__all__ = [
    # Settings
    "AliasOrderPolicy",
    "CompilerSettings",
    "load_compiler_settings",
    # Run state
    "CancellationToken",
    "CompilationContext",
    "NamespaceRegistry",
    "NamePoolCollection",
    "TypeCounter",
    "VariableNamePool",
    "generate_variable_name",
    # Handlers
    "ElementHandler",
    "ElementOutput",
    "HandlerRegistry",
    "PartHandler",
    # Compilers
    "ElementCompiler",
    "PartGraphCompiler",
    "ReplayCompiler",
    # Entry points
    "generate_element",
    "generate_element_async",
    "generate_part",
    "generate_part_async",
    "generate_package",
    "generate_package_async",
]
