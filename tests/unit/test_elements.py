"""Tests for element tree compilation."""

import pytest

from replaygen.compiler import (
    CancellationToken,
    CompilationContext,
    CompilerSettings,
    ElementCompiler,
    ElementHandler,
    ElementOutput,
    NamePoolCollection,
)
from replaygen.core.errors import CompilationCancelled, PreconditionError, UnsupportedConstructionError
from replaygen.core.ir import (
    AssignProperty,
    BlankLine,
    Call,
    Comment,
    ConstantRef,
    Construct,
    DeclareVariable,
    ElementNode,
    MarkupCompatibility,
    QualifiedType,
    SchemaRegistry,
    TypeRef,
)
from replaygen.core.ir.instructions import assign, invoke, lit, var

WORD = "DocumentFormat.OpenXml.Wordprocessing"
OPENXML = "DocumentFormat.OpenXml"


def word(name: str) -> QualifiedType:
    return QualifiedType(namespace=WORD, name=name)


def node(name: str, **kwargs) -> ElementNode:
    return ElementNode(type=word(name), **kwargs)


def declare(name: str, type_name: str, *args) -> DeclareVariable:
    return DeclareVariable(name=name, type_name=type_name, value=Construct(type_name=type_name, args=list(args)))


def compile_tree(schema: SchemaRegistry, tree: ElementNode, **settings) -> tuple[list, str, CompilationContext]:
    context = CompilationContext.create(CompilerSettings(**settings), schema)
    instructions, name = ElementCompiler(context).compile(tree)
    return instructions, name, context


class TestElementOrdering:
    """Tests for the order of emitted instructions."""

    def test_title_and_child(self, schema: SchemaRegistry):
        """Test declare, assign, child, append, blank line in that order."""
        tree = node("Paragraph", properties={"Title": "Hi"}, children=[node("Run")])
        instructions, name, _ = compile_tree(schema, tree)

        assert name == "paragraph"
        assert instructions == [
            declare("paragraph", "Paragraph"),
            assign("paragraph", "Title", lit("Hi")),
            BlankLine(),
            declare("run", "Run"),
            BlankLine(),
            invoke(var("paragraph"), "Append", var("run")),
            BlankLine(),
        ]

    def test_complex_property_built_first(self, schema: SchemaRegistry):
        """Test complex values are constructed before and wired after the element."""
        tree = node("Paragraph", properties={"RsidParagraphAddition": "00A1B2C3"})
        instructions, _, _ = compile_tree(schema, tree)

        assert instructions == [
            declare("hexBinaryValue", "HexBinaryValue"),
            assign("hexBinaryValue", "InnerText", lit("00A1B2C3")),
            BlankLine(),
            declare("paragraph", "Paragraph"),
            assign("paragraph", "RsidParagraphAddition", var("hexBinaryValue")),
            BlankLine(),
        ]

    def test_markup_compatibility_bag(self, schema: SchemaRegistry):
        """Test the bag is built like a complex property and wired last."""
        tree = node("Paragraph", mc_attributes=MarkupCompatibility(Ignorable="w14"))
        instructions, _, _ = compile_tree(schema, tree)

        assert instructions == [
            declare("markupCompatibilityAttributes", "MarkupCompatibilityAttributes"),
            assign("markupCompatibilityAttributes", "Ignorable", lit("w14")),
            BlankLine(),
            declare("paragraph", "Paragraph"),
            assign("paragraph", "MCAttributes", var("markupCompatibilityAttributes")),
            BlankLine(),
        ]

    def test_namespace_declarations(self, schema: SchemaRegistry):
        """Test namespace declarations follow the element's creation."""
        uri = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
        instructions, _, _ = compile_tree(schema, node("Document", namespace_declarations={"w": uri}))

        assert instructions[1] == invoke(var("document"), "AddNamespaceDeclaration", lit("w"), lit(uri))

    def test_unset_properties_skipped(self, schema: SchemaRegistry):
        """Test None values produce no assignment."""
        instructions, _, _ = compile_tree(schema, node("Paragraph", properties={"Title": None}))
        assert instructions == [declare("paragraph", "Paragraph"), BlankLine()]


class TestNameReuse:
    """Tests for scoped variable lifetimes."""

    def test_siblings_reuse_names(self, schema: SchemaRegistry):
        """Test a released name is reassigned, not redeclared."""
        tree = node("Paragraph", children=[node("Run"), node("Run")])
        instructions, _, _ = compile_tree(schema, tree)

        assert instructions[6] == AssignProperty(target=var("run"), member=None, value=Construct(type_name="Run"))
        declared = [i.name for i in instructions if isinstance(i, DeclareVariable)]
        assert declared == ["paragraph", "run"]

    def test_unique_mode(self, schema: SchemaRegistry):
        """Test unique mode declares a fresh name every time."""
        tree = node("Paragraph", children=[node("Run"), node("Run"), node("Run")])
        instructions, _, _ = compile_tree(schema, tree, unique_variable_names=True)

        declared = [i.name for i in instructions if isinstance(i, DeclareVariable)]
        assert declared == ["paragraph", "run", "run1", "run2"]

    def test_live_names_bounded_by_depth(self, schema: SchemaRegistry):
        """Test nested groups need one name per nesting level only."""
        tree = node(
            "Group",
            children=[
                node("Group", children=[node("Group", children=[node("Run")]), node("Run")]),
                node("Group", children=[node("Run")]),
                node("Run"),
            ],
        )
        context = CompilationContext.create(CompilerSettings(), schema)
        pools = NamePoolCollection()
        instructions, _ = ElementCompiler(context).compile(tree, pools)

        groups = pools.pool(word("Group"))
        assert sorted(groups) == ["group", "group1", "group2"]
        assert len(pools.pool(word("Run"))) == 1
        assert all(groups.is_free(name) for name in groups)

        declared = [i.name for i in instructions if isinstance(i, DeclareVariable)]
        assert declared == ["group", "group1", "group2", "run"]


class TestNodeCategories:
    """Tests for category-specific construction."""

    def test_leaf_text(self, schema: SchemaRegistry):
        """Test leaf text nodes pass their text to the constructor."""
        instructions, name, _ = compile_tree(schema, node("Text", text="Hello"))
        assert name == "text"
        assert instructions == [declare("text", "Text", lit("Hello")), BlankLine()]

    def test_raw_payload(self, schema: SchemaRegistry):
        """Test raw payload nodes pass sub-kind constant and payload."""
        tree = ElementNode(
            type=QualifiedType(namespace=OPENXML, name="OpenXmlMiscNode"),
            raw_kind="Comment",
            payload="<!-- note -->",
        )
        instructions, _, context = compile_tree(schema, tree)

        assert instructions[0] == declare(
            "openXmlMiscNode",
            "OpenXmlMiscNode",
            ConstantRef(owner="XmlNodeType", member="Comment"),
            lit("<!-- note -->"),
        )
        assert "System.Xml" in context.namespaces

    def test_raw_payload_without_kind(self, schema: SchemaRegistry):
        """Test a raw payload node needs its sub-kind."""
        tree = ElementNode(type=QualifiedType(namespace=OPENXML, name="OpenXmlMiscNode"), payload="x")
        with pytest.raises(UnsupportedConstructionError):
            compile_tree(schema, tree)

    def test_ignored_raw_payload_kind(self, schema: SchemaRegistry):
        """Test ignored sub-kinds vanish along with their append call."""
        misc = ElementNode(
            type=QualifiedType(namespace=OPENXML, name="OpenXmlMiscNode"),
            raw_kind="Comment",
            payload="<!-- note -->",
        )
        instructions, _, _ = compile_tree(
            schema, node("Paragraph", children=[misc]), ignored_raw_payload_kinds={"Comment"}
        )
        assert instructions == [declare("paragraph", "Paragraph"), BlankLine()]

    def test_opaque_ignored(self, schema: SchemaRegistry):
        """Test opaque nodes are skipped by default."""
        unknown = ElementNode(type=QualifiedType(namespace=OPENXML, name="OpenXmlUnknownElement"), payload="<x/>")
        instructions, _, _ = compile_tree(schema, node("Paragraph", children=[unknown]))
        assert instructions == [declare("paragraph", "Paragraph"), BlankLine()]

        assert compile_tree(schema, unknown)[:2] == ([], "")

    def test_opaque_factory(self, schema: SchemaRegistry):
        """Test opaque nodes use the factory call and nothing else."""
        unknown = ElementNode(
            type=QualifiedType(namespace=OPENXML, name="OpenXmlUnknownElement"),
            payload="<x/>",
            properties={"Ignored": "yes"},
        )
        instructions, _, _ = compile_tree(
            schema, node("Paragraph", children=[unknown]), ignore_unknown_opaque_nodes=False
        )

        assert instructions[2:] == [
            DeclareVariable(
                name="openXmlUnknownElement",
                type_name="OpenXmlUnknownElement",
                value=Call(
                    target=TypeRef(type_name="OpenXmlUnknownElement"),
                    operation="CreateOpenXmlUnknownElement",
                    args=[lit("<x/>")],
                ),
            ),
            invoke(var("paragraph"), "Append", var("openXmlUnknownElement")),
            BlankLine(),
        ]

    def test_opaque_drops_markup_compatibility(self, schema: SchemaRegistry):
        """Test an opaque node's bag is neither built nor left holding a name."""
        unknown = ElementNode(
            type=QualifiedType(namespace=OPENXML, name="OpenXmlUnknownElement"),
            payload="<x/>",
            mc_attributes=MarkupCompatibility(Ignorable="w14"),
        )
        context = CompilationContext.create(CompilerSettings(ignore_unknown_opaque_nodes=False), schema)
        pools = NamePoolCollection()
        instructions, name = ElementCompiler(context).compile(unknown, pools)

        assert name == "openXmlUnknownElement"
        assert [i.name for i in instructions if isinstance(i, DeclareVariable)] == ["openXmlUnknownElement"]
        assert not any(isinstance(i, (AssignProperty, BlankLine)) for i in instructions)
        bag_type = schema.metadata_bag.type
        assert len(pools.pool(bag_type)) == 0


class TestPropertyValues:
    """Tests for simple and enum property emission."""

    def test_enum_constant(self, schema: SchemaRegistry):
        """Test enum codes become named constants."""
        instructions, _, _ = compile_tree(schema, node("Justification", properties={"Val": "center"}))
        assert assign("justification", "Val", ConstantRef(owner="JustificationValues", member="Center")) in instructions

    def test_enum_mismatch_becomes_comment(self, schema: SchemaRegistry):
        """Test an unknown enum code yields one comment and no assignment."""
        instructions, name, _ = compile_tree(schema, node("Justification", properties={"Val": "diagonal"}))

        comments = [i for i in instructions if isinstance(i, Comment)]
        assert name == "justification"
        assert comments == [
            Comment(
                text="Could not parse value of 'Val' property for variable `justification` - "
                "JustificationValues enum does not contain 'diagonal' field"
            )
        ]
        assert not any(isinstance(i, AssignProperty) for i in instructions)

    def test_simple_mismatch_becomes_comment(self, schema: SchemaRegistry):
        """Test a bad simple value is flagged while the others are still assigned."""
        instructions, _, _ = compile_tree(schema, node("Comment", properties={"Id": "abc", "Author": "Ann"}))

        assert Comment(text="'abc' is not a valid value for the Id property") in instructions
        assert assign("comment", "Author", lit("Ann")) in instructions

    def test_typed_values(self, schema: SchemaRegistry):
        """Test numbers and booleans are emitted as typed literals."""
        instructions, _, _ = compile_tree(schema, node("Comment", properties={"Id": "7", "Done": "true"}))

        assert assign("comment", "Id", lit(7)) in instructions
        assert assign("comment", "Done", lit(True)) in instructions

    def test_date_construct(self, schema: SchemaRegistry):
        """Test dates are built from ticks and kind."""
        instructions, _, context = compile_tree(
            schema, node("Comment", properties={"Date": "2000-01-01T00:00:00+00:00"})
        )

        expected = Construct(
            type_name="DateTime",
            args=[lit(630_822_816_000_000_000), ConstantRef(owner="DateTimeKind", member="Utc")],
        )
        assert assign("comment", "Date", expected) in instructions
        assert "System" in context.namespaces

    def test_offset_date_keeps_instant(self, schema: SchemaRegistry):
        """Test an offset date is emitted as its UTC instant."""
        instructions, _, _ = compile_tree(
            schema, node("Comment", properties={"Date": "2000-01-01T02:00:00+02:00"})
        )

        expected = Construct(
            type_name="DateTime",
            args=[lit(630_822_816_000_000_000), ConstantRef(owner="DateTimeKind", member="Utc")],
        )
        assert assign("comment", "Date", expected) in instructions


class TestHandlersAndFailures:
    """Tests for custom handlers, cancellation and unsupported nodes."""

    def test_custom_handler_replaces_subtree(self, schema: SchemaRegistry):
        """Test a handler's output is spliced in verbatim."""

        class RunHandler(ElementHandler):
            def build_element(self, node, compiler, pools):
                return ElementOutput([Comment(text="custom run")], "customRun")

        settings = CompilerSettings()
        settings.handlers.register_element(word("Run"), RunHandler())
        context = CompilationContext.create(settings, schema)
        instructions, _ = ElementCompiler(context).compile(node("Paragraph", children=[node("Run")]))

        assert instructions[2:] == [
            Comment(text="custom run"),
            invoke(var("paragraph"), "Append", var("customRun")),
            BlankLine(),
        ]

    def test_handler_output_without_variable(self, schema: SchemaRegistry):
        """Test instructions from a nameless handler result are kept without an append."""

        class RunHandler(ElementHandler):
            def build_element(self, node, compiler, pools):
                return ElementOutput([Comment(text="side effect")], "")

        settings = CompilerSettings()
        settings.handlers.register_element(word("Run"), RunHandler())
        context = CompilationContext.create(settings, schema)
        instructions, _ = ElementCompiler(context).compile(node("Paragraph", children=[node("Run")]))

        assert instructions == [declare("paragraph", "Paragraph"), BlankLine(), Comment(text="side effect")]

    def test_handler_returning_none_falls_through(self, schema: SchemaRegistry):
        """Test an empty handler result keeps the default behavior."""
        settings = CompilerSettings()
        settings.handlers.register_element(word("Run"), ElementHandler())
        context = CompilationContext.create(settings, schema)
        instructions, name = ElementCompiler(context).compile(node("Run"))

        assert name == "run"
        assert instructions == [declare("run", "Run"), BlankLine()]

    def test_unsupported_type(self, schema: SchemaRegistry):
        """Test a type with no schema entry and no handler fails with its path."""
        tree = node("Paragraph", children=[node("Mystery")])
        with pytest.raises(UnsupportedConstructionError, match="Paragraph/Mystery"):
            compile_tree(schema, tree)

    def test_precondition(self, context: CompilationContext):
        """Test a missing node fails fast."""
        with pytest.raises(PreconditionError):
            ElementCompiler(context).compile(None)

    def test_cancelled_before_start(self, schema: SchemaRegistry):
        """Test a cancelled token aborts without output."""
        token = CancellationToken()
        token.cancel()
        context = CompilationContext.create(CompilerSettings(), schema, token)

        with pytest.raises(CompilationCancelled):
            ElementCompiler(context).compile(node("Paragraph"))

    def test_cancelled_mid_tree(self, schema: SchemaRegistry):
        """Test cancellation observed deep in the tree propagates."""
        token = CancellationToken()

        class CancellingHandler(ElementHandler):
            def build_element(self, node, compiler, pools):
                token.cancel()
                return None

        settings = CompilerSettings()
        settings.handlers.register_element(word("Run"), CancellingHandler())
        context = CompilationContext.create(settings, schema, token)

        tree = node("Paragraph", children=[node("Run", children=[node("Text", text="x")])])
        with pytest.raises(CompilationCancelled):
            ElementCompiler(context).compile(tree)
