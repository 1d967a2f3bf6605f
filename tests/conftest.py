"""Shared pytest fixtures for replaygen tests."""

import pytest

from replaygen.compiler import CompilationContext, CompilerSettings
from replaygen.core.ir import (
    AddPartOperation,
    ElementNode,
    ElementSpec,
    EnumSpec,
    NodeCategory,
    PackageSpec,
    PartEdge,
    PartGraph,
    PartNode,
    PartSpec,
    PrimitiveKind,
    PropertyKind,
    PropertySpec,
    QualifiedType,
    SchemaDocument,
    SchemaRegistry,
)

WORD = "DocumentFormat.OpenXml.Wordprocessing"
OPENXML = "DocumentFormat.OpenXml"
PACKAGING = "DocumentFormat.OpenXml.Packaging"


def word(name: str) -> QualifiedType:
    return QualifiedType(namespace=WORD, name=name)


def openxml(name: str) -> QualifiedType:
    return QualifiedType(namespace=OPENXML, name=name)


def packaging(name: str) -> QualifiedType:
    return QualifiedType(namespace=PACKAGING, name=name)


def simple(name: str, primitive: PrimitiveKind = PrimitiveKind.STRING) -> PropertySpec:
    return PropertySpec(name=name, kind=PropertyKind.SIMPLE, primitive=primitive)


@pytest.fixture
def schema_document() -> SchemaDocument:
    """A small word-processing schema: elements, one enum, parts and a package."""
    return SchemaDocument(
        elements=[
            ElementSpec(type=word("Document"), prefix="w"),
            ElementSpec(type=word("Body"), prefix="w"),
            ElementSpec(
                type=word("Paragraph"),
                prefix="w",
                properties=[
                    simple("Title"),
                    PropertySpec(
                        name="RsidParagraphAddition",
                        kind=PropertyKind.COMPLEX,
                        type=openxml("HexBinaryValue"),
                    ),
                ],
            ),
            ElementSpec(type=word("Run"), prefix="w"),
            ElementSpec(type=word("Group"), prefix="w"),
            ElementSpec(type=word("Text"), prefix="w", category=NodeCategory.LEAF_TEXT),
            ElementSpec(
                type=word("Justification"),
                prefix="w",
                properties=[
                    PropertySpec(name="Val", kind=PropertyKind.COMPLEX, type=word("JustificationValues")),
                ],
            ),
            ElementSpec(
                type=word("Comment"),
                prefix="w",
                properties=[
                    simple("Id", PrimitiveKind.INT32),
                    simple("Author"),
                    simple("Date", PrimitiveKind.DATETIME),
                    simple("Done", PrimitiveKind.BOOLEAN),
                ],
            ),
            ElementSpec(type=openxml("OpenXmlUnknownElement"), category=NodeCategory.OPAQUE),
            ElementSpec(type=openxml("OpenXmlMiscNode"), category=NodeCategory.RAW_PAYLOAD),
        ],
        enums=[
            EnumSpec(
                type=word("JustificationValues"),
                members={"left": "Left", "center": "Center", "right": "Right"},
            ),
        ],
        parts=[
            PartSpec(
                type=packaging("MainDocumentPart"),
                properties={"Document": word("Document")},
                add_operations=[
                    AddPartOperation(
                        child_type=packaging("ImagePart"),
                        operation="AddImagePart",
                        accepts_content_type=True,
                    ),
                    AddPartOperation(
                        child_type=packaging("CustomXmlPart"),
                        operation="AddCustomXmlPart",
                        accepts_content_type=True,
                        accepts_relationship_id=False,
                    ),
                ],
            ),
            PartSpec(type=packaging("ImagePart")),
            PartSpec(type=packaging("CustomXmlPart")),
        ],
        packages=[
            PackageSpec(
                type=packaging("WordprocessingDocument"),
                add_operations=[
                    AddPartOperation(
                        child_type=packaging("MainDocumentPart"),
                        operation="AddMainDocumentPart",
                        accepts_relationship_id=False,
                    ),
                ],
            ),
        ],
    )


@pytest.fixture
def schema(schema_document: SchemaDocument) -> SchemaRegistry:
    return SchemaRegistry(schema_document)


@pytest.fixture
def settings() -> CompilerSettings:
    return CompilerSettings()


@pytest.fixture
def context(settings: CompilerSettings, schema: SchemaRegistry) -> CompilationContext:
    return CompilationContext.create(settings, schema)


@pytest.fixture
def paragraph_tree() -> ElementNode:
    """Document > Body > two paragraphs with runs and text."""
    return ElementNode(
        type=word("Document"),
        namespace_declarations={"w": "http://schemas.openxmlformats.org/wordprocessingml/2006/main"},
        children=[
            ElementNode(
                type=word("Body"),
                children=[
                    ElementNode(
                        type=word("Paragraph"),
                        properties={"Title": "First"},
                        children=[
                            ElementNode(type=word("Run"), children=[ElementNode(type=word("Text"), text="Hello")]),
                            ElementNode(type=word("Run"), children=[ElementNode(type=word("Text"), text="World")]),
                        ],
                    ),
                    ElementNode(
                        type=word("Paragraph"),
                        children=[ElementNode(type=word("Run"))],
                    ),
                ],
            )
        ],
    )


@pytest.fixture
def part_graph() -> PartGraph:
    """A main document part with an image part holding a four byte payload."""
    graph = PartGraph()
    graph.add(
        PartNode(
            uri="/word/document.xml",
            type=packaging("MainDocumentPart"),
            root=ElementNode(type=word("Document"), children=[ElementNode(type=word("Body"))]),
            children=[PartEdge(relationship_id="rId1", target="/word/media/image1.png")],
        )
    )
    graph.add(
        PartNode(
            uri="/word/media/image1.png",
            type=packaging("ImagePart"),
            content_type="image/png",
            payload=bytes([0x01, 0x02, 0x03, 0x04]),
        )
    )
    return graph
