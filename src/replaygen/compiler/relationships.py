"""
Relationship emission for parts and packages.
"""

from __future__ import annotations

from collections.abc import Iterable
from urllib.parse import urlparse

from replaygen.core.ir import (
    ConstantRef,
    Construct,
    Expression,
    ExternalRelationship,
    HyperlinkRelationship,
    Instruction,
    QualifiedType,
)
from replaygen.core.ir.instructions import invoke, lit, var

from .namespaces import NamespaceRegistry

_URI = QualifiedType(namespace="System", name="Uri")
_URI_KIND = QualifiedType(namespace="System", name="UriKind")


class RelationshipEmitter:
    """
    Turns hyperlink and external relationship records into instructions.

    Records are emitted in the order given; an empty input yields an empty
    result.
    """

    def __init__(self, namespaces: NamespaceRegistry):
        self.namespaces = namespaces

    def emit(
        self,
        relationships: Iterable[HyperlinkRelationship | ExternalRelationship],
        owner: str | Expression,
    ) -> list[Instruction]:
        target = var(owner) if isinstance(owner, str) else owner
        result: list[Instruction] = []

        for rel in relationships:
            if isinstance(rel, HyperlinkRelationship):
                result.append(
                    invoke(
                        target,
                        "AddHyperlinkRelationship",
                        self._uri(rel.uri),
                        lit(rel.is_external),
                        lit(rel.id),
                    )
                )
            else:
                result.append(
                    invoke(
                        target,
                        "AddExternalRelationship",
                        lit(rel.relationship_type),
                        self._uri(rel.uri),
                        lit(rel.id),
                    )
                )
        return result

    def _uri(self, uri: str) -> Construct:
        self.namespaces.register_namespace(_URI.namespace)
        kind = "Absolute" if urlparse(uri).scheme else "Relative"
        return Construct(
            type_name=self.namespaces.type_name(_URI),
            args=[lit(uri), ConstantRef(owner=self.namespaces.type_name(_URI_KIND), member=kind)],
        )
