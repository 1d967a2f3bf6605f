"""
Element tree compilation.

Turns one element subtree into the instructions that rebuild it: nested
complex-property objects first, then the element itself, its namespace
declarations and property assignments, and finally every child, each
followed by an "append child" call on the element's variable.
"""

from __future__ import annotations

import logging
from datetime import datetime

from replaygen.core.errors import (
    CompilationCancelled,
    PreconditionError,
    ValueCoercionMismatch,
    make_unsupported_error,
)
from replaygen.core.ir import (
    AssignProperty,
    BlankLine,
    Call,
    Comment,
    ConstantRef,
    Construct,
    DeclareVariable,
    ElementNode,
    Expression,
    Instruction,
    NodeCategory,
    PropertySpec,
    QualifiedType,
    ResolvedElement,
    TypeRef,
)
from replaygen.core.ir.instructions import assign, invoke, lit, var

from .context import CompilationContext
from .handlers import ElementOutput
from .naming import NamePoolCollection
from .values import coerce_enum, coerce_simple, datetime_kind, datetime_ticks

logger = logging.getLogger(__name__)

_DATETIME = QualifiedType(namespace="System", name="DateTime")
_DATETIME_KIND = QualifiedType(namespace="System", name="DateTimeKind")


class ElementCompiler:
    """
    Recursive element-to-instruction compiler.

    Name pools are passed per call because they are scoped to the routine
    the instructions end up in; everything else comes from the run's
    CompilationContext.
    """

    def __init__(self, context: CompilationContext):
        self.context = context

    def compile(self, node: ElementNode | None, pools: NamePoolCollection | None = None) -> ElementOutput:
        """
        Compile an element subtree.

        Returns:
            ElementOutput with the instructions and the root variable name.
            Both are empty when the node is skipped by the settings.

        Raises:
            PreconditionError: if no node is given
            CompilationCancelled: if cancellation was requested
            UnsupportedConstructionError: if a node type has no strategy
        """
        if node is None:
            raise PreconditionError("An element node is required")
        return self._compile(node, pools if pools is not None else NamePoolCollection(), [])

    def _compile(self, node: ElementNode, pools: NamePoolCollection, path: list[str]) -> ElementOutput:
        ctx = self.context
        settings = ctx.settings
        path = [*path, node.type.name]
        result: list[Instruction] = []

        try:
            ctx.token.raise_if_cancelled()

            resolved = ctx.schema.element(node.type)
            category = resolved.category if resolved else None

            if category == NodeCategory.OPAQUE and settings.ignore_unknown_opaque_nodes:
                return ElementOutput([], "")
            if category == NodeCategory.RAW_PAYLOAD and node.raw_kind in settings.ignored_raw_payload_kinds:
                return ElementOutput([], "")

            handler = settings.handlers.element_handler(node.type)
            if handler is not None:
                custom = handler.build_element(node, self, pools)
                if custom is not None and custom.instructions:
                    logger.debug("Custom handler used for %s", node.type)
                    return custom

            if resolved is None:
                raise make_unsupported_error(f"No schema entry or handler for element type '{node.type}'", path)

            ctx.namespaces.register(node.type)

            if category == NodeCategory.OPAQUE:
                # Factory call only: no properties, bag or children
                element_name = self._declare(result, node.type, self._creation(node, resolved, path), pools)
                pools.release(node.type, element_name)
                return ElementOutput(result, element_name)

            # Nested objects wired into the element once it exists
            wiring: list[tuple[QualifiedType, str, str]] = []

            for prop in resolved.complex:
                value = node.properties.get(prop.name)
                if value is None:
                    continue
                prop_type = prop.type
                assert prop_type is not None
                ctx.namespaces.register(prop_type)
                name = self._declare(
                    result,
                    prop_type,
                    Construct(
                        type_name=ctx.namespaces.type_name(prop_type),
                        type_args=[a.name for a in prop_type.type_args],
                    ),
                    pools,
                )
                result.append(assign(name, "InnerText", lit(str(value))))
                result.append(BlankLine())
                wiring.append((prop_type, prop.name, name))

            if node.mc_attributes is not None:
                bag = ctx.schema.metadata_bag
                ctx.namespaces.register(bag.type)
                name = self._declare(
                    result, bag.type, Construct(type_name=ctx.namespaces.type_name(bag.type)), pools
                )
                for field_name, value in node.mc_attributes.string_fields():
                    result.append(assign(name, field_name, lit(value)))
                result.append(BlankLine())
                wiring.append((bag.type, bag.property_name, name))

            element_name = self._declare(result, node.type, self._creation(node, resolved, path), pools)

            for prefix, uri in node.namespace_declarations.items():
                result.append(invoke(var(element_name), "AddNamespaceDeclaration", lit(prefix), lit(uri)))

            for prop in resolved.simple:
                raw = node.properties.get(prop.name)
                if raw is None:
                    continue
                result.append(self._simple_assignment(element_name, prop, raw))

            for prop_type, prop_name, name in wiring:
                result.append(assign(element_name, prop_name, var(name)))
                pools.release(prop_type, name)

            for prop in resolved.enum:
                raw = node.properties.get(prop.name)
                if raw is None:
                    continue
                result.append(self._enum_assignment(element_name, prop, raw))

            result.append(BlankLine())

            ctx.token.raise_if_cancelled()

            for child in node.children:
                if settings.ignore_unknown_opaque_nodes and self._is_opaque(child):
                    continue
                child_output = self._compile(child, pools, path)
                result.extend(child_output.instructions)
                if not child_output.variable_name:
                    continue
                result.append(invoke(var(element_name), "Append", var(child_output.variable_name)))
                result.append(BlankLine())

            pools.release(node.type, element_name)
            return ElementOutput(result, element_name)

        except CompilationCancelled:
            result.clear()
            raise

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    def _declare(
        self,
        result: list[Instruction],
        t: QualifiedType,
        value: Expression,
        pools: NamePoolCollection,
    ) -> str:
        """Acquire a variable for ``t`` and emit its declaration or reassignment."""
        namespaces = self.context.namespaces
        name, existing = pools.pool(t).acquire(namespaces, self.context.settings.unique_variable_names)
        if existing:
            result.append(AssignProperty(target=var(name), member=None, value=value))
        else:
            result.append(
                DeclareVariable(
                    name=name,
                    type_name=namespaces.type_name(t),
                    type_args=[a.name for a in t.type_args],
                    value=value,
                )
            )
        return name

    def _creation(self, node: ElementNode, resolved: ResolvedElement, path: list[str]) -> Expression:
        """Creation expression for the node's own category."""
        namespaces = self.context.namespaces
        type_name = namespaces.type_name(node.type)
        category = resolved.category

        if category == NodeCategory.OPAQUE:
            return Call(
                target=TypeRef(type_name=type_name),
                operation=resolved.spec.factory,
                args=[lit(node.payload or "")],
            )

        if category == NodeCategory.RAW_PAYLOAD:
            if not node.raw_kind:
                raise make_unsupported_error(f"Raw payload node '{node.type}' has no sub-kind", path)
            kind_type = self.context.schema.raw_kind_type
            namespaces.register(kind_type)
            return Construct(
                type_name=type_name,
                args=[
                    ConstantRef(owner=namespaces.type_name(kind_type), member=node.raw_kind),
                    lit(node.payload or ""),
                ],
            )

        if category == NodeCategory.LEAF_TEXT:
            return Construct(type_name=type_name, args=[lit(node.text or "")])

        return Construct(type_name=type_name)

    def _is_opaque(self, node: ElementNode) -> bool:
        resolved = self.context.schema.element(node.type)
        return resolved is not None and resolved.category == NodeCategory.OPAQUE

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    def _simple_assignment(self, element_name: str, prop: PropertySpec, raw: object) -> Instruction:
        assert prop.primitive is not None
        try:
            value = coerce_simple(prop.primitive, raw, prop.name)
        except ValueCoercionMismatch as exc:
            logger.warning("%s (variable %s)", exc.message, element_name)
            return Comment(text=exc.message)

        if isinstance(value, datetime):
            return assign(element_name, prop.name, self._datetime(value))
        return assign(element_name, prop.name, lit(value))  # type: ignore[arg-type]

    def _enum_assignment(self, element_name: str, prop: PropertySpec, raw: object) -> Instruction:
        namespaces = self.context.namespaces
        enum_type = prop.type
        assert enum_type is not None
        enum = self.context.schema.enum(enum_type)
        assert enum is not None

        namespaces.register(enum_type)
        owner = namespaces.type_name(enum_type)
        try:
            constant = coerce_enum(enum, raw, prop.name)
        except ValueCoercionMismatch:
            text = (
                f"Could not parse value of '{prop.name}' property for variable "
                f"`{element_name}` - {owner} enum does not contain '{raw}' field"
            )
            logger.warning(text)
            return Comment(text=text)
        return assign(element_name, prop.name, ConstantRef(owner=owner, member=constant))

    def _datetime(self, value: datetime) -> Construct:
        namespaces = self.context.namespaces
        namespaces.register_namespace(_DATETIME.namespace)
        return Construct(
            type_name=namespaces.type_name(_DATETIME),
            args=[
                lit(datetime_ticks(value)),
                ConstantRef(owner=namespaces.type_name(_DATETIME_KIND), member=datetime_kind(value)),
            ],
        )
