"""
Part graph types for the replaygen IR.

Parts form a graph, not a tree: the same part may be the target of
several edges. The graph therefore stores every part once, keyed by its
URI, and edges refer to their target by URI.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .elements import ElementNode
from .types import QualifiedType


class PartEdge(BaseModel):
    """A parent-to-child part relationship."""

    relationship_id: str
    target: str  # URI of the child part


class HyperlinkRelationship(BaseModel):
    """A hyperlink relationship record."""

    id: str
    uri: str
    is_external: bool = True


class ExternalRelationship(BaseModel):
    """A non-hyperlink external relationship record."""

    id: str
    uri: str
    relationship_type: str


class PartNode(BaseModel):
    """
    A content part.

    A part carries either a structured root element or an opaque binary
    payload, never both.
    """

    uri: str
    type: QualifiedType
    content_type: str | None = None
    root: ElementNode | None = None
    payload: bytes | None = None
    children: list[PartEdge] = Field(default_factory=list)
    hyperlinks: list[HyperlinkRelationship] = Field(default_factory=list)
    external_relationships: list[ExternalRelationship] = Field(default_factory=list)

    model_config = ConfigDict(ser_json_bytes="base64", val_json_bytes="base64")

    @model_validator(mode="after")
    def _check_content(self) -> PartNode:
        if self.root is not None and self.payload is not None:
            raise ValueError(f"Part '{self.uri}' cannot have both a root element and a binary payload")
        return self


class PartGraph(BaseModel):
    """All parts of a document, keyed by URI."""

    parts: dict[str, PartNode] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_keys(self) -> PartGraph:
        for key, part in self.parts.items():
            if key != part.uri:
                raise ValueError(f"Part keyed as '{key}' declares URI '{part.uri}'")
        return self

    def add(self, part: PartNode) -> PartNode:
        self.parts[part.uri] = part
        return part

    def get(self, uri: str) -> PartNode | None:
        return self.parts.get(uri)


class PackageNode(BaseModel):
    """
    The root container of a part graph.

    Attributes:
        type: Container type identity
        graph: Every part reachable from the container
        children: Root edges, in document order
        hyperlinks: Container-level hyperlink relationships
        external_relationships: Container-level external relationships
    """

    type: QualifiedType
    graph: PartGraph = Field(default_factory=PartGraph)
    children: list[PartEdge] = Field(default_factory=list)
    hyperlinks: list[HyperlinkRelationship] = Field(default_factory=list)
    external_relationships: list[ExternalRelationship] = Field(default_factory=list)
