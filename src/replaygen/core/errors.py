"""
Error types for replaygen compilation.
"""

from __future__ import annotations

from dataclasses import dataclass, field


class ReplaygenError(Exception):
    """Base exception for all replaygen errors."""

    def __init__(self, message: str, context: ErrorContext | None = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class PreconditionError(ReplaygenError):
    """
    Raised when a required input is missing.

    Examples:
    - No element, part or package supplied
    - Settings or schema registry not supplied
    - Edge pointing at a part URI that is not in the graph
    """

    pass


class ValueCoercionMismatch(ReplaygenError):
    """
    Raised when a raw property value does not fit its declared kind.

    The element compiler always recovers from this error by emitting a
    comment instruction in place of the assignment.
    """

    def __init__(self, property_name: str, raw_value: object, message: str | None = None):
        self.property_name = property_name
        self.raw_value = raw_value
        super().__init__(message or f"'{raw_value}' is not a valid value for the {property_name} property")


class CompilationCancelled(ReplaygenError):
    """Raised when a cooperative cancellation request is observed."""

    def __init__(self, message: str = "Compilation was cancelled", context: ErrorContext | None = None):
        super().__init__(message, context)


class UnsupportedConstructionError(ReplaygenError):
    """
    Raised when a node or part has no construction strategy.

    Examples:
    - Element type missing from the schema registry with no custom handler
    - Part type missing from the schema registry with no custom handler
    """

    pass


class SchemaError(ReplaygenError):
    """
    Raised when a schema document is inconsistent.

    Examples:
    - Same type declared twice
    - Enum property referencing an undeclared enum type
    - Property kind without its required type information
    """

    pass


@dataclass
class ErrorContext:
    """
    Location of an error inside the compiled object graph.

    Attributes:
        path: Type names from the compilation root down to the failing node
        part_uri: URI of the part being compiled, if any
    """

    path: list[str] = field(default_factory=list)
    part_uri: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "Document/Body/Paragraph in part /word/document.xml"
        """
        location = "/".join(self.path) if self.path else "<root>"
        if self.part_uri:
            location += f" in part {self.part_uri}"
        return location


def make_unsupported_error(
    message: str,
    path: list[str] | None = None,
    part_uri: str | None = None,
) -> UnsupportedConstructionError:
    """
    Helper to create an UnsupportedConstructionError with optional context.

    Args:
        message: Error description
        path: Optional type-name path to the failing node
        part_uri: Optional URI of the owning part

    Returns:
        UnsupportedConstructionError with context if a location was provided
    """
    if path or part_uri:
        return UnsupportedConstructionError(message, ErrorContext(path=list(path or []), part_uri=part_uri))
    return UnsupportedConstructionError(message)
