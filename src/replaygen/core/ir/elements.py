"""
Element tree types for the replaygen IR.

An ElementNode is one typed node of a structured document. Its
construction strategy and the meaning of each property value come from
the schema registry; the node itself only carries raw values.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .types import QualifiedType


class MarkupCompatibility(BaseModel):
    """
    Markup-compatibility attribute bag attached to an element.

    Every field is an optional string and is copied verbatim into the
    generated bag object.
    """

    ignorable: str | None = Field(default=None, alias="Ignorable")
    process_content: str | None = Field(default=None, alias="ProcessContent")
    preserve_elements: str | None = Field(default=None, alias="PreserveElements")
    preserve_attributes: str | None = Field(default=None, alias="PreserveAttributes")
    must_understand: str | None = Field(default=None, alias="MustUnderstand")

    model_config = ConfigDict(populate_by_name=True)

    def string_fields(self) -> list[tuple[str, str]]:
        """Non-null fields as (property name, value), in declaration order."""
        result = []
        for name, info in type(self).model_fields.items():
            value = getattr(self, name)
            if value is not None:
                result.append((info.alias or name, value))
        return result


class ElementNode(BaseModel):
    """
    A node in an element tree.

    Attributes:
        type: Type identity, resolved against the schema registry
        children: Ordered child nodes
        properties: Raw property values keyed by property name (None = unset)
        namespace_declarations: Prefix to URI pairs introduced by this node
        text: Literal text payload of leaf-text nodes
        payload: Serialized payload of raw-payload and opaque nodes
        raw_kind: Sub-kind tag of raw-payload nodes
        mc_attributes: Markup-compatibility attribute bag, if present
    """

    type: QualifiedType
    children: list[ElementNode] = Field(default_factory=list)
    properties: dict[str, Any] = Field(default_factory=dict)
    namespace_declarations: dict[str, str] = Field(default_factory=dict)
    text: str | None = None
    payload: str | None = None
    raw_kind: str | None = None
    mc_attributes: MarkupCompatibility | None = None

    def depth_first(self) -> Iterator[ElementNode]:
        """Traverse tree depth-first, yielding self then children."""
        yield self
        for child in self.children:
            yield from child.depth_first()

    def add_child(self, child: ElementNode) -> ElementNode:
        """Add a child node and return it for chaining."""
        self.children.append(child)
        return child


ElementNode.model_rebuild()
