"""
Compiler configuration models.

Parses the [replaygen] section from a TOML file and provides typed
settings for a compilation run. Settings are per run: nothing here is
process-wide state.
"""

from __future__ import annotations

import tomllib
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .handlers import HandlerRegistry


class AliasOrderPolicy(str, Enum):
    """How namespace imports are ordered and type names qualified."""

    NONE = "none"
    BY_ALIAS_THEN_NAME = "by-alias-then-name"


class CompilerSettings(BaseModel):
    """
    Settings consumed by the element and part-graph compilers.

    Attributes:
        ignore_unknown_opaque_nodes: Skip opaque nodes entirely
        ignored_raw_payload_kinds: Raw-payload sub-kinds to skip
        unique_variable_names: Never reuse variable names within a routine
        alias_order: Import ordering and type-name qualification policy
        generated_namespace_name: Namespace of the generated builder class
        handlers: Custom per-type overrides (not serialized)
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    ignore_unknown_opaque_nodes: bool = True
    ignored_raw_payload_kinds: set[str] = Field(default_factory=set)
    unique_variable_names: bool = False
    alias_order: AliasOrderPolicy = AliasOrderPolicy.BY_ALIAS_THEN_NAME
    generated_namespace_name: str = "OpenXmlSample"
    handlers: HandlerRegistry = Field(default_factory=HandlerRegistry, exclude=True)


def load_compiler_settings(toml_path: Path) -> CompilerSettings:
    """
    Load compiler settings from a TOML file.

    Args:
        toml_path: Path to a TOML file with a [replaygen] table

    Returns:
        CompilerSettings with parsed values or defaults
    """
    if not toml_path.exists():
        return CompilerSettings()

    with open(toml_path, "rb") as f:
        data = tomllib.load(f)

    section = data.get("replaygen", {})

    if not section:
        return CompilerSettings()

    config_dict: dict[str, Any] = {}

    if "ignore_unknown_opaque_nodes" in section:
        config_dict["ignore_unknown_opaque_nodes"] = bool(section["ignore_unknown_opaque_nodes"])
    if "ignored_raw_payload_kinds" in section:
        config_dict["ignored_raw_payload_kinds"] = set(section["ignored_raw_payload_kinds"])
    if "unique_variable_names" in section:
        config_dict["unique_variable_names"] = bool(section["unique_variable_names"])
    if "alias_order" in section:
        config_dict["alias_order"] = AliasOrderPolicy(section["alias_order"])
    if "namespace" in section:
        config_dict["generated_namespace_name"] = str(section["namespace"])

    return CompilerSettings(**config_dict)
