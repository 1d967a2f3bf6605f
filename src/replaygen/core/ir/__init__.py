"""
replaygen Internal Representation (IR) types.

Input side: schema registry, element trees and part graphs.
Output side: the instruction stream grouped into routines and
compilation units.
"""

from .elements import ElementNode, MarkupCompatibility
from .instructions import (
    AssignProperty,
    BlankLine,
    ByRef,
    Call,
    Comment,
    CompilationUnit,
    Construct,
    ConstantRef,
    DeclareVariable,
    Expression,
    Instruction,
    InvokeOperation,
    NamespaceImport,
    Parameter,
    Primitive,
    Routine,
    ScopedBlock,
    TypeRef,
    VariableRef,
    walk_instructions,
)
from .parts import (
    ExternalRelationship,
    HyperlinkRelationship,
    PackageNode,
    PartEdge,
    PartGraph,
    PartNode,
)
from .schema import (
    AddPartOperation,
    ElementSpec,
    EnumSpec,
    MetadataBagSpec,
    NodeCategory,
    PackageSpec,
    PartSpec,
    PrimitiveKind,
    PropertyKind,
    PropertySpec,
    ResolvedElement,
    SchemaDocument,
    SchemaRegistry,
)
from .types import QualifiedType

__all__ = [
    # Types
    "QualifiedType",
    # Schema
    "AddPartOperation",
    "ElementSpec",
    "EnumSpec",
    "MetadataBagSpec",
    "NodeCategory",
    "PackageSpec",
    "PartSpec",
    "PrimitiveKind",
    "PropertyKind",
    "PropertySpec",
    "ResolvedElement",
    "SchemaDocument",
    "SchemaRegistry",
    # Elements
    "ElementNode",
    "MarkupCompatibility",
    # Parts
    "ExternalRelationship",
    "HyperlinkRelationship",
    "PackageNode",
    "PartEdge",
    "PartGraph",
    "PartNode",
    # Instructions
    "AssignProperty",
    "BlankLine",
    "ByRef",
    "Call",
    "Comment",
    "CompilationUnit",
    "Construct",
    "ConstantRef",
    "DeclareVariable",
    "Expression",
    "Instruction",
    "InvokeOperation",
    "NamespaceImport",
    "Parameter",
    "Primitive",
    "Routine",
    "ScopedBlock",
    "TypeRef",
    "VariableRef",
    "walk_instructions",
]
