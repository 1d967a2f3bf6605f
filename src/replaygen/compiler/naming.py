"""
Variable name synthesis and pooling.

Element variables follow block-scoped lifetimes: once a subtree has been
emitted and appended to its parent, its variable name is released and may
be reassigned to the next node of the same type. Part variables never are;
they use a plain per-type counter instead.
"""

from __future__ import annotations

from collections.abc import Iterator

from replaygen.core.ir import QualifiedType
from replaygen.core.strings import to_camel_case, to_title_case, upper_case_chars

from .namespaces import NamespaceRegistry


def generate_variable_name(t: QualifiedType, attempt: int, namespaces: NamespaceRegistry) -> str:
    """
    Build a variable name for a type.

    The lower-cased namespace alias (if any) prefixes the type name; for
    generic types each type argument contributes its title-cased upper-case
    letters; a non-zero attempt number is appended.

    Examples:
        Paragraph, attempt 0            -> paragraph
        Paragraph, attempt 2            -> paragraph2
        Run in namespace aliased "W14"  -> w14Run
        ListValue<StringValue>          -> listValueSv
    """
    prefix = namespaces.alias_of(t.namespace).lower()
    args = "".join(to_title_case(upper_case_chars(a.name)) for a in t.type_args)
    suffix = str(attempt) if attempt > 0 else ""
    return to_camel_case(f"{prefix}{t.name}{args}{suffix}")


class VariableNamePool:
    """
    Names synthesized for one type, each flagged free or consumed.

    Free names are handed out again last-in-first-out. In unique mode the
    pool only counts; no name is ever tracked for reuse.
    """

    def __init__(self, t: QualifiedType):
        self.type = t
        self._entries: dict[str, bool] = {}  # name -> free
        self._free: list[str] = []
        self._unique_count = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def is_free(self, name: str) -> bool:
        return self._entries.get(name, False)

    @property
    def live_count(self) -> int:
        """Number of names currently consumed."""
        return sum(1 for free in self._entries.values() if not free)

    def acquire(self, namespaces: NamespaceRegistry, unique: bool = False) -> tuple[str, bool]:
        """
        Get a variable name for a new value of this type.

        Returns:
            (name, existing) where ``existing`` is True when the name was
            already declared earlier in the same routine and must be
            reassigned rather than declared.
        """
        if unique:
            name = generate_variable_name(self.type, self._unique_count, namespaces)
            self._unique_count += 1
            return name, False

        if self._free:
            name = self._free.pop()
            self._entries[name] = False
            return name, True

        name = generate_variable_name(self.type, len(self._entries), namespaces)
        self._entries[name] = False
        return name, False

    def release(self, name: str) -> None:
        """Mark a name free again. Unknown or already free names are ignored."""
        if self._entries.get(name) is False:
            self._entries[name] = True
            self._free.append(name)


class NamePoolCollection:
    """One VariableNamePool per type, scoped to one generated routine."""

    def __init__(self) -> None:
        self._pools: dict[QualifiedType, VariableNamePool] = {}

    def __contains__(self, t: object) -> bool:
        return t in self._pools

    def __iter__(self) -> Iterator[VariableNamePool]:
        return iter(self._pools.values())

    def pool(self, t: QualifiedType) -> VariableNamePool:
        if t not in self._pools:
            self._pools[t] = VariableNamePool(t)
        return self._pools[t]

    def release(self, t: QualifiedType, name: str) -> None:
        if t in self._pools:
            self._pools[t].release(name)


class TypeCounter:
    """
    Per-full-type-name counter for part variables and helper routines.

    The first name for a type is the bare base name; later ones get a
    monotonically increasing suffix starting at 1.
    """

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}

    def next_name(self, base: str, key: str) -> str:
        if key in self._counts:
            name = f"{base}{self._counts[key]}"
            self._counts[key] += 1
            return name
        self._counts[key] = 1
        return base
