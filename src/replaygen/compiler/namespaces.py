"""
Namespace tracking and alias assignment.

Every type that appears in generated code has its namespace registered
here. A namespace receives an alias when one of its type names is
already resolvable through another registered namespace, so that the
generated imports never make a type name ambiguous.
"""

from __future__ import annotations

import logging
import re

from replaygen.core.ir import NamespaceImport, QualifiedType, SchemaRegistry
from replaygen.core.strings import upper_case_and_digit_chars

from .config import AliasOrderPolicy

logger = logging.getLogger(__name__)


class NamespaceRegistry:
    """
    Namespace to alias map for one compilation run.

    An empty alias means the namespace is imported without one. Once a
    namespace is registered its alias never changes for the rest of the
    run, so alias assignment depends only on registration order.
    """

    def __init__(
        self,
        schema: SchemaRegistry,
        order: AliasOrderPolicy = AliasOrderPolicy.BY_ALIAS_THEN_NAME,
    ):
        self._schema = schema
        self._order = order
        self._aliases: dict[str, str] = {}

    def __contains__(self, namespace: object) -> bool:
        return namespace in self._aliases

    def __len__(self) -> int:
        return len(self._aliases)

    def alias_of(self, namespace: str) -> str:
        """Alias of a registered namespace; empty when none or unregistered."""
        return self._aliases.get(namespace, "")

    def register(self, t: QualifiedType) -> str:
        """
        Register the namespace of a type and return its alias.

        Type arguments of generic types are registered as well.
        """
        for arg in t.type_args:
            self.register(arg)

        if t.namespace in self._aliases:
            return self._aliases[t.namespace]

        alias = ""
        if self._collides(t):
            alias = self._choose_alias(t)
        self._aliases[t.namespace] = alias

        if alias:
            logger.debug("Namespace %s aliased as %s (triggered by %s)", t.namespace, alias, t.name)
        else:
            logger.debug("Namespace %s registered", t.namespace)
        return alias

    def register_namespace(self, namespace: str) -> None:
        """Register a namespace needed by generated code, without an alias."""
        self._aliases.setdefault(namespace, "")

    def type_name(self, t: QualifiedType) -> str:
        """
        Render a type name the way generated code must refer to it.

        Returns ``Alias.Name`` for aliased namespaces, ``Name`` for
        registered ones, and the full name for unregistered namespaces or
        when no order policy is in effect.
        """
        if t.namespace not in self._aliases or self._order == AliasOrderPolicy.NONE:
            return t.full_name
        alias = self._aliases[t.namespace]
        if alias:
            return f"{alias}.{t.name}"
        return t.name

    def imports(self) -> list[NamespaceImport]:
        """Namespace imports, ordered according to the alias order policy."""
        result = [NamespaceImport(namespace=ns, alias=alias) for ns, alias in self._aliases.items()]
        if self._order == AliasOrderPolicy.BY_ALIAS_THEN_NAME:
            result.sort(key=lambda i: (i.alias or i.namespace, i.namespace))
        return result

    def _collides(self, t: QualifiedType) -> bool:
        others = [ns for ns in self._aliases if ns != t.namespace]
        if not others:
            return False

        # Same simple name already resolvable elsewhere
        for ns in others:
            if self._schema.has_type(ns, t.name):
                return True

        # A sibling type already resolvable elsewhere
        siblings = self._schema.names_in_namespace(t.namespace)
        return any(siblings & self._schema.names_in_namespace(ns) for ns in others)

    def _choose_alias(self, t: QualifiedType) -> str:
        prefix = self._schema.prefix_of(t)
        if prefix:
            alias = prefix.upper()
        else:
            alias = upper_case_and_digit_chars(t.namespace)
            # Aliases prefix variable names, so they must start with a letter
            if not alias or not alias[0].isalpha():
                alias = re.sub(r"\W", "", t.namespace).upper()

        taken = {a for a in self._aliases.values() if a}
        if alias in taken:
            counter = 2
            while f"{alias}{counter}" in taken:
                counter += 1
            alias = f"{alias}{counter}"
        return alias
