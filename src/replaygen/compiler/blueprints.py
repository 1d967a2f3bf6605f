"""
Part blueprints: first-visit bookkeeping for the part graph.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from replaygen.core.ir import PartNode


@dataclass(frozen=True)
class PartBlueprint:
    """
    Binds a part identity to the names assigned on its first visit.

    Attributes:
        part: The part itself
        variable_name: Variable holding the constructed part
        routine_name: Helper routine that fills in the part's content
    """

    part: PartNode
    variable_name: str
    routine_name: str

    @property
    def uri(self) -> str:
        return self.part.uri


class PartBlueprintCollection:
    """Blueprints keyed by part URI, in first-visit order."""

    def __init__(self) -> None:
        self._items: dict[str, PartBlueprint] = {}

    def __contains__(self, uri: object) -> bool:
        return uri in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[PartBlueprint]:
        return iter(self._items.values())

    def get(self, uri: str) -> PartBlueprint | None:
        return self._items.get(uri)

    def add(self, blueprint: PartBlueprint) -> PartBlueprint:
        if blueprint.uri in self._items:
            raise KeyError(f"Part '{blueprint.uri}' already has a blueprint")
        self._items[blueprint.uri] = blueprint
        return blueprint
