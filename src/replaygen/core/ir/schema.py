"""
Declarative schema registry for the replaygen IR.

Instead of discovering property categories at runtime, every node-type
family is described once by a SchemaDocument: which element types exist,
how each one is constructed (its node category) and which of its
properties are simple values, complex values or enum-coded values. The
SchemaRegistry resolves that document into fast lookups once, so the
compilers never inspect types while traversing.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..errors import SchemaError
from .types import QualifiedType

# =============================================================================
# Tagged variants
# =============================================================================


class PrimitiveKind(str, Enum):
    """Primitive kinds a simple-value property can declare."""

    STRING = "string"
    BOOLEAN = "boolean"
    BYTE = "byte"
    SBYTE = "sbyte"
    INT16 = "int16"
    UINT16 = "uint16"
    INT32 = "int32"
    UINT32 = "uint32"
    INT64 = "int64"
    UINT64 = "uint64"
    SINGLE = "single"
    DOUBLE = "double"
    DECIMAL = "decimal"
    DATETIME = "datetime"


class PropertyKind(str, Enum):
    """How a property value is emitted."""

    SIMPLE = "simple"
    COMPLEX = "complex"
    ENUM = "enum"


class NodeCategory(str, Enum):
    """Construction strategy of an element type."""

    REGULAR = "regular"
    LEAF_TEXT = "leaf_text"
    RAW_PAYLOAD = "raw_payload"
    OPAQUE = "opaque"


# =============================================================================
# Schema document (serializable)
# =============================================================================


class PropertySpec(BaseModel):
    """
    A property declared by an element type.

    Simple properties declare a primitive kind; complex and enum
    properties declare the type of their value object.
    """

    name: str
    kind: PropertyKind
    primitive: PrimitiveKind | None = None
    type: QualifiedType | None = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_kind_payload(self) -> PropertySpec:
        if self.kind == PropertyKind.SIMPLE and self.primitive is None:
            raise ValueError(f"Simple property '{self.name}' must declare a primitive kind")
        if self.kind != PropertyKind.SIMPLE and self.type is None:
            raise ValueError(f"{self.kind.value.capitalize()} property '{self.name}' must declare a type")
        return self


class EnumSpec(BaseModel):
    """A closed set of named constants, keyed by their raw (serialized) code."""

    type: QualifiedType
    members: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    def constant_for(self, raw: object) -> str | None:
        """Return the constant name matching a raw code, or None."""
        return self.members.get(str(raw))


class ElementSpec(BaseModel):
    """
    Everything the compiler needs to know about one element type.

    Attributes:
        type: Type identity
        category: Construction strategy
        prefix: Schema-declared markup prefix (used for namespace aliases)
        properties: Declared properties, in emission order
        factory: Static factory operation used for opaque nodes
    """

    type: QualifiedType
    category: NodeCategory = NodeCategory.REGULAR
    prefix: str | None = None
    properties: list[PropertySpec] = Field(default_factory=list)
    factory: str = "CreateOpenXmlUnknownElement"

    model_config = ConfigDict(frozen=True)


class AddPartOperation(BaseModel):
    """A type-specific "create child part" operation exposed by a container."""

    child_type: QualifiedType
    operation: str
    accepts_content_type: bool = False
    accepts_relationship_id: bool = True

    model_config = ConfigDict(frozen=True)


class PartSpec(BaseModel):
    """
    A part type and its capability surface.

    Attributes:
        type: Part type identity
        properties: Element-typed properties, used to wire root content
        add_operations: Type-specific child creation operations
    """

    type: QualifiedType
    properties: dict[str, QualifiedType] = Field(default_factory=dict)
    add_operations: list[AddPartOperation] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class PackageSpec(BaseModel):
    """A root container type: how it is created and which parts it can add."""

    type: QualifiedType
    create_operation: str = "Create"
    add_operations: list[AddPartOperation] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class MetadataBagSpec(BaseModel):
    """Type and wiring property of the markup-compatibility attribute bag."""

    type: QualifiedType = QualifiedType(namespace="DocumentFormat.OpenXml", name="MarkupCompatibilityAttributes")
    property_name: str = "MCAttributes"

    model_config = ConfigDict(frozen=True)


class SchemaDocument(BaseModel):
    """Serializable description of a node-type family."""

    elements: list[ElementSpec] = Field(default_factory=list)
    enums: list[EnumSpec] = Field(default_factory=list)
    parts: list[PartSpec] = Field(default_factory=list)
    packages: list[PackageSpec] = Field(default_factory=list)
    types: list[QualifiedType] = Field(default_factory=list)
    raw_kind_type: QualifiedType = QualifiedType(namespace="System.Xml", name="XmlNodeType")
    metadata_bag: MetadataBagSpec = Field(default_factory=MetadataBagSpec)


# =============================================================================
# Resolved registry
# =============================================================================


@dataclass(frozen=True)
class ResolvedElement:
    """An ElementSpec with its properties partitioned by emission policy."""

    spec: ElementSpec
    simple: tuple[PropertySpec, ...]
    complex: tuple[PropertySpec, ...]
    enum: tuple[PropertySpec, ...]

    @property
    def type(self) -> QualifiedType:
        return self.spec.type

    @property
    def category(self) -> NodeCategory:
        return self.spec.category


class SchemaRegistry:
    """
    Lookup tables built once from a SchemaDocument.

    Complex properties whose value type is a declared enum are resolved to
    enum properties here, so the element compiler only ever sees three
    disjoint property sets.
    """

    def __init__(self, document: SchemaDocument | None = None):
        self.document = document or SchemaDocument()
        self._elements: dict[QualifiedType, ResolvedElement] = {}
        self._enums: dict[QualifiedType, EnumSpec] = {}
        self._parts: dict[QualifiedType, PartSpec] = {}
        self._packages: dict[QualifiedType, PackageSpec] = {}
        self._namespaces: dict[str, set[str]] = {}
        self._build()

    def _build(self) -> None:
        doc = self.document

        for enum in doc.enums:
            if enum.type in self._enums:
                raise SchemaError(f"Enum type '{enum.type}' is declared twice")
            self._enums[enum.type] = enum
            self._index(enum.type)

        for element in doc.elements:
            if element.type in self._elements:
                raise SchemaError(f"Element type '{element.type}' is declared twice")
            self._elements[element.type] = self._resolve_element(element)
            self._index(element.type)

        for part in doc.parts:
            if part.type in self._parts:
                raise SchemaError(f"Part type '{part.type}' is declared twice")
            self._parts[part.type] = part
            self._index(part.type)
            for op in part.add_operations:
                self._index(op.child_type)

        for package in doc.packages:
            if package.type in self._packages:
                raise SchemaError(f"Package type '{package.type}' is declared twice")
            self._packages[package.type] = package
            self._index(package.type)
            for op in package.add_operations:
                self._index(op.child_type)

        for extra in doc.types:
            self._index(extra)
        self._index(doc.raw_kind_type)
        self._index(doc.metadata_bag.type)

    def _resolve_element(self, element: ElementSpec) -> ResolvedElement:
        simple: list[PropertySpec] = []
        complex_: list[PropertySpec] = []
        enum: list[PropertySpec] = []

        for prop in element.properties:
            if prop.kind == PropertyKind.SIMPLE:
                simple.append(prop)
            elif prop.kind == PropertyKind.ENUM or prop.type in self._enums:
                if prop.type not in self._enums:
                    raise SchemaError(
                        f"Property '{prop.name}' of '{element.type}' references undeclared enum '{prop.type}'"
                    )
                enum.append(prop)
            else:
                complex_.append(prop)
                self._index(prop.type)

        return ResolvedElement(
            spec=element,
            simple=tuple(simple),
            complex=tuple(complex_),
            enum=tuple(enum),
        )

    def _index(self, t: QualifiedType | None) -> None:
        if t is None:
            return
        self._namespaces.setdefault(t.namespace, set()).add(t.name)
        for arg in t.type_args:
            self._index(arg)

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def element(self, t: QualifiedType) -> ResolvedElement | None:
        return self._elements.get(t)

    def enum(self, t: QualifiedType) -> EnumSpec | None:
        return self._enums.get(t)

    def part(self, t: QualifiedType) -> PartSpec | None:
        return self._parts.get(t)

    def package(self, t: QualifiedType) -> PackageSpec | None:
        return self._packages.get(t)

    def prefix_of(self, t: QualifiedType) -> str | None:
        """Schema-declared markup prefix of an element type, if any."""
        resolved = self._elements.get(t)
        if resolved is None:
            return None
        return resolved.spec.prefix or None

    def names_in_namespace(self, namespace: str) -> frozenset[str]:
        """All simple type names known in a namespace."""
        return frozenset(self._namespaces.get(namespace, ()))

    def has_type(self, namespace: str, name: str) -> bool:
        return name in self._namespaces.get(namespace, ())

    @property
    def raw_kind_type(self) -> QualifiedType:
        return self.document.raw_kind_type

    @property
    def metadata_bag(self) -> MetadataBagSpec:
        return self.document.metadata_bag
