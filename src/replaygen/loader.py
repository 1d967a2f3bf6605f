"""
JSON document model loading.

A document model bundles a schema with one compilation target: an
element tree, one part of a part graph, or a whole package. This is the
input format of the command line interface.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from replaygen.compiler import (
    CancellationToken,
    CompilerSettings,
    generate_element,
    generate_package,
    generate_part,
)
from replaygen.core.errors import PreconditionError
from replaygen.core.ir import (
    CompilationUnit,
    ElementNode,
    PackageNode,
    PartGraph,
    SchemaDocument,
    SchemaRegistry,
)

logger = logging.getLogger(__name__)


class DocumentKind(str, Enum):
    """What a document model asks to compile."""

    ELEMENT = "element"
    PART = "part"
    PACKAGE = "package"


class DocumentModel(BaseModel):
    """
    A schema plus exactly one compilation target.

    Attributes:
        schema_document: The node-type family (JSON key ``schema``)
        element: Element tree to compile
        graph: Part graph holding ``part``
        part: URI of the part to compile
        package: Package to compile
    """

    model_config = ConfigDict(populate_by_name=True)

    schema_document: SchemaDocument = Field(default_factory=SchemaDocument, alias="schema")
    element: ElementNode | None = None
    graph: PartGraph | None = None
    part: str | None = None
    package: PackageNode | None = None

    @model_validator(mode="after")
    def _check_target(self) -> DocumentModel:
        targets = [t for t in (self.element, self.part, self.package) if t is not None]
        if len(targets) != 1:
            raise ValueError("Exactly one of 'element', 'part' or 'package' must be given")
        if self.part is not None and self.graph is None:
            raise ValueError("A 'part' target requires a 'graph'")
        return self

    @property
    def kind(self) -> DocumentKind:
        if self.element is not None:
            return DocumentKind.ELEMENT
        if self.part is not None:
            return DocumentKind.PART
        return DocumentKind.PACKAGE


def load_document_model(path: Path) -> DocumentModel:
    """
    Load a document model from a JSON file.

    Raises:
        PreconditionError: If the file is missing or not a valid model
    """
    if not path.exists():
        raise PreconditionError(f"Document model not found: {path}")

    try:
        model = DocumentModel.model_validate_json(path.read_bytes())
    except ValidationError as e:
        raise PreconditionError(f"Invalid document model {path}:\n{e}") from e

    logger.debug("Loaded %s document model from %s", model.kind.value, path)
    return model


def compile_document(
    model: DocumentModel,
    settings: CompilerSettings | None = None,
    token: CancellationToken | None = None,
) -> CompilationUnit:
    """Compile whatever target a document model carries."""
    schema = SchemaRegistry(model.schema_document)

    if model.kind == DocumentKind.ELEMENT:
        return generate_element(model.element, schema, settings, token)
    if model.kind == DocumentKind.PART:
        assert model.part is not None
        return generate_part(model.graph, model.part, schema, settings, token)
    return generate_package(model.package, schema, settings, token)
