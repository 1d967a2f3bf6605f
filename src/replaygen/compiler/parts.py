"""
Part graph compilation.

The part graph is walked depth-first from an entry point. Every distinct
part is constructed once, in the entry pass, and gets a helper routine
that fills in its content; any later edge to an already-visited part only
attaches the existing variable by reference.
"""

from __future__ import annotations

import base64
import logging

from replaygen.core.errors import (
    CompilationCancelled,
    PreconditionError,
    make_unsupported_error,
)
from replaygen.core.ir import (
    AddPartOperation,
    BlankLine,
    ByRef,
    Call,
    Construct,
    DeclareVariable,
    ExternalRelationship,
    HyperlinkRelationship,
    Instruction,
    PackageNode,
    Parameter,
    PartEdge,
    PartGraph,
    PartNode,
    QualifiedType,
    Routine,
    ScopedBlock,
    TypeRef,
)
from replaygen.core.ir.instructions import assign, invoke, lit, var
from replaygen.core.strings import to_camel_case, to_pascal_case

from .blueprints import PartBlueprint, PartBlueprintCollection
from .context import CompilationContext
from .elements import ElementCompiler
from .naming import NamePoolCollection, TypeCounter
from .relationships import RelationshipEmitter

logger = logging.getLogger(__name__)

PART_PARAM = "part"
PACKAGE_VAR = "pkg"
STREAM_PARAM = "stream"
CREATE_PARTS = "CreateParts"

_STREAM = QualifiedType(namespace="System.IO", name="Stream")
_MEMORY_STREAM = QualifiedType(namespace="System.IO", name="MemoryStream")
_CONVERT = QualifiedType(namespace="System", name="Convert")


class PartGraphCompiler:
    """
    Compiles a part graph into an entry routine plus helper routines.

    One instance serves one compilation run: the blueprint collection and
    the per-type counters live as long as the instance does.
    """

    def __init__(self, context: CompilationContext, graph: PartGraph):
        self.context = context
        self.graph = graph
        self.blueprints = PartBlueprintCollection()
        self.type_counts = TypeCounter()
        self.relationships = RelationshipEmitter(context.namespaces)
        self.elements = ElementCompiler(context)

    # -------------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------------

    def compile_entry(self, part: PartNode | None) -> tuple[Routine, list[Routine]]:
        """
        Compile a single part and everything reachable from it.

        Returns:
            (entry routine ``Create<PartType>(part)``, helper routines)
        """
        if part is None:
            raise PreconditionError("A part is required")

        ctx = self.context
        ctx.token.raise_if_cancelled()
        ctx.namespaces.register(part.type)

        routine_name = "Generate" + to_pascal_case(self._variable_name(part.type))
        self.blueprints.add(PartBlueprint(part=part, variable_name=PART_PARAM, routine_name=routine_name))

        body: list[Instruction] = [invoke(None, routine_name, ByRef(name=PART_PARAM))]
        body.extend(self._relationship_block(part.hyperlinks, part.external_relationships, PART_PARAM))
        if part.children:
            body.append(BlankLine())
        for edge in part.children:
            body.extend(self.compile_child_edge(PART_PARAM, part.type, edge))

        entry = Routine(
            name=f"Create{part.type.name}",
            parameters=[Parameter(name=PART_PARAM, type_name=ctx.namespaces.type_name(part.type))],
            body=body,
            public=True,
        )
        return entry, self.compile_helpers()

    def compile_package(self, package: PackageNode | None) -> tuple[Routine, list[Routine]]:
        """
        Compile a whole package.

        Returns:
            (entry routine ``CreatePackage(stream)``, [``CreateParts`` and helper routines])
        """
        if package is None:
            raise PreconditionError("A package is required")

        ctx = self.context
        ctx.token.raise_if_cancelled()
        namespaces = ctx.namespaces
        namespaces.register_namespace(_STREAM.namespace)
        namespaces.register(package.type)

        spec = ctx.schema.package(package.type)
        create_operation = spec.create_operation if spec else "Create"
        package_type_name = namespaces.type_name(package.type)

        entry = Routine(
            name="CreatePackage",
            parameters=[Parameter(name=STREAM_PARAM, type_name=namespaces.type_name(_STREAM))],
            body=[
                ScopedBlock(
                    acquire=[
                        DeclareVariable(
                            name=PACKAGE_VAR,
                            type_name=package_type_name,
                            value=Call(
                                target=TypeRef(type_name=package_type_name),
                                operation=create_operation,
                                args=[var(STREAM_PARAM)],
                            ),
                        )
                    ],
                    body=[BlankLine(), invoke(None, CREATE_PARTS, var(PACKAGE_VAR))],
                    release=[invoke(var(PACKAGE_VAR), "Dispose")],
                )
            ],
            public=True,
        )

        body: list[Instruction] = []
        for edge in package.children:
            body.extend(self.compile_child_edge(PACKAGE_VAR, package.type, edge))
        body.extend(self._relationship_block(package.hyperlinks, package.external_relationships, PACKAGE_VAR))

        create_parts = Routine(
            name=CREATE_PARTS,
            parameters=[Parameter(name=PACKAGE_VAR, type_name=package_type_name)],
            body=body,
        )
        return entry, [create_parts, *self.compile_helpers()]

    # -------------------------------------------------------------------------
    # Entry pass
    # -------------------------------------------------------------------------

    def compile_child_edge(self, parent: str, parent_type: QualifiedType, edge: PartEdge) -> list[Instruction]:
        """
        Instructions that create (or attach) the target of one edge.

        Args:
            parent: Variable holding the parent container
            parent_type: Type of the parent container
            edge: The edge to compile
        """
        ctx = self.context
        result: list[Instruction] = []

        try:
            ctx.token.raise_if_cancelled()

            part = self.graph.get(edge.target)
            if part is None:
                raise PreconditionError(
                    f"Relationship '{edge.relationship_id}' targets unknown part '{edge.target}'"
                )

            handler = ctx.settings.handlers.part_handler(part.type)
            if handler is not None:
                custom = handler.build_edge(parent, edge, part, self)
                if custom:
                    logger.debug("Custom handler used for part %s", part.uri)
                    return custom

            existing = self.blueprints.get(part.uri)
            if existing is not None:
                logger.debug("Part %s already constructed as %s, attaching by reference", part.uri, existing.variable_name)
                return [invoke(var(parent), "AddPart", var(existing.variable_name), lit(edge.relationship_id))]

            ctx.namespaces.register(part.type)
            variable_name = self._variable_name(part.type)
            routine_name = "Generate" + to_pascal_case(variable_name)

            result.extend(self._creation(parent, parent_type, edge, part, variable_name))
            self.blueprints.add(PartBlueprint(part=part, variable_name=variable_name, routine_name=routine_name))
            logger.debug("Part %s constructed as %s", part.uri, variable_name)

            result.append(invoke(None, routine_name, ByRef(name=variable_name)))
            result.extend(self._relationship_block(part.hyperlinks, part.external_relationships, variable_name))
            result.append(BlankLine())

            for child_edge in part.children:
                result.extend(self.compile_child_edge(variable_name, part.type, child_edge))

            return result

        except CompilationCancelled:
            result.clear()
            raise

    def _variable_name(self, t: QualifiedType) -> str:
        alias = self.context.namespaces.alias_of(t.namespace).lower()
        return self.type_counts.next_name(to_camel_case(f"{alias}{t.name}"), t.full_name)

    def _add_operation(self, parent_type: QualifiedType, child_type: QualifiedType) -> AddPartOperation | None:
        schema = self.context.schema
        container = schema.part(parent_type) or schema.package(parent_type)
        if container is None:
            return None
        for op in container.add_operations:
            if op.child_type == child_type:
                return op
        return None

    def _creation(
        self,
        parent: str,
        parent_type: QualifiedType,
        edge: PartEdge,
        part: PartNode,
        variable_name: str,
    ) -> list[Instruction]:
        type_name = self.context.namespaces.type_name(part.type)
        op = self._add_operation(parent_type, part.type)

        if op is None:
            call = Call(
                target=var(parent),
                operation="AddNewPart",
                type_args=[type_name],
                args=[lit(edge.relationship_id)],
            )
            return [DeclareVariable(name=variable_name, type_name=type_name, value=call)]

        args = []
        if op.accepts_content_type:
            args.append(lit(part.content_type or ""))
        if op.accepts_relationship_id:
            args.append(lit(edge.relationship_id))

        result: list[Instruction] = [
            DeclareVariable(
                name=variable_name,
                type_name=type_name,
                value=Call(target=var(parent), operation=op.operation, args=args),
            )
        ]
        if not op.accepts_relationship_id:
            result.append(invoke(var(parent), "ChangeIdOfPart", var(variable_name), lit(edge.relationship_id)))
        return result

    def _relationship_block(
        self,
        hyperlinks: list[HyperlinkRelationship],
        externals: list[ExternalRelationship],
        owner: str,
    ) -> list[Instruction]:
        result: list[Instruction] = []
        if hyperlinks:
            result.append(BlankLine())
            result.extend(self.relationships.emit(hyperlinks, owner))
        if externals:
            result.append(BlankLine())
            result.extend(self.relationships.emit(externals, owner))
        return result

    # -------------------------------------------------------------------------
    # Helper routines
    # -------------------------------------------------------------------------

    def compile_helpers(self) -> list[Routine]:
        """One helper routine per blueprint, in first-visit order."""
        routines: list[Routine] = []
        for blueprint in self.blueprints:
            self.context.token.raise_if_cancelled()

            handler = self.context.settings.handlers.part_handler(blueprint.part.type)
            if handler is not None:
                custom = handler.build_helper(blueprint, self)
                if custom is not None:
                    logger.debug("Custom helper used for part %s", blueprint.uri)
                    routines.append(custom)
                    continue

            routines.append(self._helper(blueprint))
        return routines

    def _helper(self, blueprint: PartBlueprint) -> Routine:
        part = blueprint.part
        body: list[Instruction] = []

        if part.root is not None:
            output = self.elements.compile(part.root, NamePoolCollection())
            body.extend(output.instructions)
            if output.variable_name:
                body.append(assign(PART_PARAM, self._root_property(part), var(output.variable_name)))
        elif part.payload is not None:
            body.extend(self._payload_feed(part.payload))

        return Routine(
            name=blueprint.routine_name,
            parameters=[
                Parameter(
                    name=PART_PARAM,
                    type_name=self.context.namespaces.type_name(part.type),
                    by_ref=True,
                )
            ],
            body=body,
        )

    def _root_property(self, part: PartNode) -> str:
        assert part.root is not None
        root_type = part.root.type
        spec = self.context.schema.part(part.type)
        if spec is not None:
            for name, t in spec.properties.items():
                if t == root_type:
                    return name
        raise make_unsupported_error(
            f"Part type '{part.type}' declares no property of type '{root_type}'",
            part_uri=part.uri,
        )

    def _payload_feed(self, payload: bytes) -> list[Instruction]:
        namespaces = self.context.namespaces
        namespaces.register_namespace(_CONVERT.namespace)
        namespaces.register_namespace(_STREAM.namespace)

        encoded = base64.b64encode(payload).decode("ascii")
        from_base64 = Call(
            target=TypeRef(type_name=namespaces.type_name(_CONVERT)),
            operation="FromBase64String",
            args=[var("base64")],
        )
        return [
            DeclareVariable(name="base64", type_name="string", value=lit(encoded)),
            BlankLine(),
            ScopedBlock(
                acquire=[
                    DeclareVariable(
                        name="mem",
                        type_name=namespaces.type_name(_STREAM),
                        value=Construct(
                            type_name=namespaces.type_name(_MEMORY_STREAM),
                            args=[from_base64, lit(False)],
                        ),
                    )
                ],
                body=[invoke(var(PART_PARAM), "FeedData", var("mem"))],
                release=[invoke(var("mem"), "Dispose")],
            ),
        ]
