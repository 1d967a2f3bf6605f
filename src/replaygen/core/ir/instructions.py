"""
Instruction stream types for the replaygen IR.

The compiler's output is a renderer-agnostic sequence of instructions.
Order is the replay order of the reconstructed program and is never
changed once emitted. Instructions refer to values through a small set of
expressions; a rendering backend maps both onto host-language syntax.
"""

from __future__ import annotations

from collections.abc import Iterator
from decimal import Decimal
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# Expressions
# =============================================================================


class Primitive(BaseModel):
    """A literal value: string, number, boolean or null."""

    kind: Literal["primitive"] = "primitive"
    value: bool | int | float | Decimal | str | None = None

    model_config = ConfigDict(frozen=True)


class VariableRef(BaseModel):
    """A reference to a local variable or routine parameter."""

    kind: Literal["variable"] = "variable"
    name: str

    model_config = ConfigDict(frozen=True)


class TypeRef(BaseModel):
    """A reference to a type, used as the target of static operations."""

    kind: Literal["type"] = "type"
    type_name: str

    model_config = ConfigDict(frozen=True)


class ConstantRef(BaseModel):
    """A named constant of an enum-like type, e.g. ``JustificationValues.Center``."""

    kind: Literal["constant"] = "constant"
    owner: str
    member: str

    model_config = ConfigDict(frozen=True)


class ByRef(BaseModel):
    """A variable passed by mutable reference."""

    kind: Literal["by_ref"] = "by_ref"
    name: str

    model_config = ConfigDict(frozen=True)


class Construct(BaseModel):
    """Construction of a new object through a constructor."""

    kind: Literal["construct"] = "construct"
    type_name: str
    type_args: list[str] = Field(default_factory=list)
    args: list[Expression] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class Call(BaseModel):
    """
    An operation call.

    A call without a target invokes a routine of the generated class
    itself (a helper routine).
    """

    kind: Literal["call"] = "call"
    target: Expression | None = None
    operation: str
    type_args: list[str] = Field(default_factory=list)
    args: list[Expression] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


Expression = Annotated[
    Primitive | VariableRef | TypeRef | ConstantRef | ByRef | Construct | Call,
    Field(discriminator="kind"),
]

# =============================================================================
# Instructions
# =============================================================================


class DeclareVariable(BaseModel):
    """Declare a new variable, optionally initialized."""

    kind: Literal["declare"] = "declare"
    name: str
    type_name: str
    type_args: list[str] = Field(default_factory=list)
    value: Expression | None = None

    model_config = ConfigDict(frozen=True)


class AssignProperty(BaseModel):
    """
    Assign a value to a member of a target.

    When ``member`` is None the target variable itself is reassigned.
    """

    kind: Literal["assign"] = "assign"
    target: Expression
    member: str | None = None
    value: Expression

    model_config = ConfigDict(frozen=True)


class InvokeOperation(BaseModel):
    """Invoke an operation for its side effects."""

    kind: Literal["invoke"] = "invoke"
    call: Call

    model_config = ConfigDict(frozen=True)


class Comment(BaseModel):
    """A comment flagging something for manual follow-up."""

    kind: Literal["comment"] = "comment"
    text: str

    model_config = ConfigDict(frozen=True)


class BlankLine(BaseModel):
    """A visual separator."""

    kind: Literal["blank"] = "blank"

    model_config = ConfigDict(frozen=True)


class ScopedBlock(BaseModel):
    """
    Scoped acquisition: ``release`` runs on every exit path of ``body``.

    Failures raised by ``body`` are rethrown after ``release`` completes.
    """

    kind: Literal["scoped"] = "scoped"
    acquire: list[Instruction] = Field(default_factory=list)
    body: list[Instruction] = Field(default_factory=list)
    release: list[Instruction] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


Instruction = Annotated[
    DeclareVariable | AssignProperty | InvokeOperation | Comment | BlankLine | ScopedBlock,
    Field(discriminator="kind"),
]

# =============================================================================
# Routines and compilation units
# =============================================================================


class Parameter(BaseModel):
    """A routine parameter."""

    name: str
    type_name: str
    by_ref: bool = False


class Routine(BaseModel):
    """A named routine of the generated builder class."""

    name: str
    parameters: list[Parameter] = Field(default_factory=list)
    body: list[Instruction] = Field(default_factory=list)
    return_type: str | None = None
    returns: Expression | None = None
    public: bool = False

    def walk(self) -> Iterator[Instruction]:
        """Yield every instruction, descending into scoped blocks."""
        yield from walk_instructions(self.body)


class NamespaceImport(BaseModel):
    """A namespace the generated code imports, with its optional alias."""

    namespace: str
    alias: str = ""


class CompilationUnit(BaseModel):
    """
    Everything a rendering backend needs for one compilation request.

    Attributes:
        namespace: Name of the generated namespace
        imports: Sorted namespace imports
        class_name: Name of the generated builder class
        routines: Entry routine first, then helper routines
    """

    namespace: str
    imports: list[NamespaceImport] = Field(default_factory=list)
    class_name: str
    routines: list[Routine] = Field(default_factory=list)

    @property
    def entry(self) -> Routine:
        return self.routines[0]

    def routine(self, name: str) -> Routine | None:
        for routine in self.routines:
            if routine.name == name:
                return routine
        return None

    def instruction_count(self) -> int:
        return sum(1 for routine in self.routines for _ in routine.walk())


def walk_instructions(instructions: list[Instruction]) -> Iterator[Instruction]:
    """Yield instructions depth-first, descending into scoped blocks."""
    for instruction in instructions:
        yield instruction
        if isinstance(instruction, ScopedBlock):
            yield from walk_instructions(instruction.acquire)
            yield from walk_instructions(instruction.body)
            yield from walk_instructions(instruction.release)


# =============================================================================
# Builders
# =============================================================================


def var(name: str) -> VariableRef:
    return VariableRef(name=name)


def lit(value: bool | int | float | Decimal | str | None) -> Primitive:
    return Primitive(value=value)


def invoke(
    target: Expression | None,
    operation: str,
    *args: Expression,
    type_args: list[str] | None = None,
) -> InvokeOperation:
    """Build an InvokeOperation in one call."""
    return InvokeOperation(
        call=Call(target=target, operation=operation, args=list(args), type_args=type_args or [])
    )


def assign(target: str, member: str | None, value: Expression) -> AssignProperty:
    """Build an AssignProperty on a variable."""
    return AssignProperty(target=VariableRef(name=target), member=member, value=value)


Construct.model_rebuild()
Call.model_rebuild()
DeclareVariable.model_rebuild()
AssignProperty.model_rebuild()
ScopedBlock.model_rebuild()
Routine.model_rebuild()
