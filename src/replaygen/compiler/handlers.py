"""
Custom handler registry.

Handlers replace the default compilation of a specific element or part
type. A handler that returns None falls through to the default behavior.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

from replaygen.core.ir import Instruction, QualifiedType, Routine

if TYPE_CHECKING:
    from replaygen.core.ir import ElementNode, PartEdge, PartNode

    from .blueprints import PartBlueprint
    from .elements import ElementCompiler
    from .naming import NamePoolCollection
    from .parts import PartGraphCompiler


class ElementOutput(NamedTuple):
    """Instructions for one element subtree and the variable holding its root."""

    instructions: list[Instruction]
    variable_name: str


class ElementHandler:
    """
    Base class for custom element handlers.

    Example:
        class HyperlinkHandler(ElementHandler):
            def build_element(self, node, compiler, pools):
                name, _ = pools.pool(node.type).acquire(compiler.context.namespaces)
                return ElementOutput([...], name)
    """

    def build_element(
        self,
        node: ElementNode,
        compiler: ElementCompiler,
        pools: NamePoolCollection,
    ) -> ElementOutput | None:
        return None


class PartHandler:
    """Base class for custom part handlers."""

    def build_edge(
        self,
        parent: str,
        edge: PartEdge,
        part: PartNode,
        compiler: PartGraphCompiler,
    ) -> list[Instruction] | None:
        """Replace the entry-pass instructions for one edge."""
        return None

    def build_helper(
        self,
        blueprint: PartBlueprint,
        compiler: PartGraphCompiler,
    ) -> Routine | None:
        """Replace the helper routine of a part."""
        return None


class HandlerRegistry:
    """Maps type identities to custom handlers."""

    def __init__(self) -> None:
        self._elements: dict[QualifiedType, ElementHandler] = {}
        self._parts: dict[QualifiedType, PartHandler] = {}

    def __len__(self) -> int:
        return len(self._elements) + len(self._parts)

    def register_element(self, t: QualifiedType, handler: ElementHandler) -> None:
        self._elements[t] = handler

    def register_part(self, t: QualifiedType, handler: PartHandler) -> None:
        self._parts[t] = handler

    def element_handler(self, t: QualifiedType) -> ElementHandler | None:
        return self._elements.get(t)

    def part_handler(self, t: QualifiedType) -> PartHandler | None:
        return self._parts.get(t)
