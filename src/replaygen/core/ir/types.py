"""
Type identity for the replaygen IR.

Every element, part, enum and complex property value is described by a
QualifiedType: the namespace it lives in plus its simple name, and for
parameterized types the list of type arguments.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class QualifiedType(BaseModel):
    """
    A namespace-qualified type identity.

    Examples:
        - QualifiedType(namespace="DocumentFormat.OpenXml.Wordprocessing", name="Paragraph")
        - QualifiedType(namespace="DocumentFormat.OpenXml", name="ListValue",
          type_args=[QualifiedType(namespace="DocumentFormat.OpenXml", name="StringValue")])
    """

    namespace: str
    name: str
    type_args: tuple[QualifiedType, ...] = Field(default_factory=tuple)

    model_config = ConfigDict(frozen=True)

    @property
    def full_name(self) -> str:
        """Namespace-qualified name, without type arguments."""
        if not self.namespace:
            return self.name
        return f"{self.namespace}.{self.name}"

    @property
    def is_generic(self) -> bool:
        return len(self.type_args) > 0

    @classmethod
    def parse(cls, value: str) -> QualifiedType:
        """
        Build a non-generic type from a dotted full name.

        Examples:
            >>> QualifiedType.parse("System.IO.Stream").namespace
            'System.IO'
        """
        namespace, _, name = value.rpartition(".")
        return cls(namespace=namespace, name=name)

    def __str__(self) -> str:
        if not self.type_args:
            return self.full_name
        args = ", ".join(str(a) for a in self.type_args)
        return f"{self.full_name}<{args}>"


QualifiedType.model_rebuild()
