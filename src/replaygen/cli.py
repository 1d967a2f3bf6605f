"""
replaygen command line interface.

    replaygen compile MODEL.json [--config replaygen.toml] [--output OUT.json]
    replaygen inspect MODEL.json
"""

import logging
import tomllib
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from replaygen import __version__
from replaygen.cli_ui import display_unit_summary, print_error, print_success
from replaygen.compiler import AliasOrderPolicy, CompilerSettings, load_compiler_settings
from replaygen.core.errors import ReplaygenError
from replaygen.core.ir import CompilationUnit
from replaygen.loader import compile_document, load_document_model

app = typer.Typer(
    help="""replaygen - compile document models into replayable build scripts

  • compile: write the compilation unit as JSON
  • inspect: summarize routines, imports and flagged values
""",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"replaygen {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """replaygen CLI main callback for global options."""
    pass


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _build_settings(
    config: Path | None,
    unique_names: bool,
    alias_order: AliasOrderPolicy | None,
    namespace: str | None,
) -> CompilerSettings:
    try:
        settings = load_compiler_settings(config) if config else CompilerSettings()
    except (tomllib.TOMLDecodeError, ValueError) as e:
        print_error(f"Invalid configuration {config}: {e}")
        raise typer.Exit(code=1)

    updates: dict[str, object] = {}
    if unique_names:
        updates["unique_variable_names"] = True
    if alias_order is not None:
        updates["alias_order"] = alias_order
    if namespace:
        updates["generated_namespace_name"] = namespace
    return settings.model_copy(update=updates)


def _compile(model: Path, settings: CompilerSettings) -> CompilationUnit:
    try:
        return compile_document(load_document_model(model), settings)
    except ReplaygenError as e:
        print_error(str(e))
        raise typer.Exit(code=1)


@app.command(name="compile")
def compile_command(
    model: Path = typer.Argument(..., help="Document model JSON file"),
    config: Path | None = typer.Option(None, "--config", "-c", help="TOML file with a [replaygen] table"),
    unique_names: bool = typer.Option(False, "--unique-names", help="Never reuse variable names"),
    alias_order: AliasOrderPolicy | None = typer.Option(
        None, "--alias-order", help="Import ordering and type-name qualification"
    ),
    namespace: str | None = typer.Option(None, "--namespace", "-n", help="Generated namespace name"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write JSON here instead of stdout"),
    verbose: bool = typer.Option(False, "--verbose", help="Debug logging"),
) -> None:
    """
    Compile a document model and emit its compilation unit as JSON.
    """
    _configure_logging(verbose)
    unit = _compile(model, _build_settings(config, unique_names, alias_order, namespace))

    payload = unit.model_dump_json(indent=2)
    if output is None:
        typer.echo(payload)
        return

    output.write_text(payload + "\n")
    print_success(f"Wrote {unit.class_name} ({unit.instruction_count()} instructions) to {output}")


@app.command(name="inspect")
def inspect_command(
    model: Path = typer.Argument(..., help="Document model JSON file"),
    config: Path | None = typer.Option(None, "--config", "-c", help="TOML file with a [replaygen] table"),
    unique_names: bool = typer.Option(False, "--unique-names", help="Never reuse variable names"),
    verbose: bool = typer.Option(False, "--verbose", help="Debug logging"),
) -> None:
    """
    Compile a document model and summarize the result.
    """
    _configure_logging(verbose)
    unit = _compile(model, _build_settings(config, unique_names, None, None))
    display_unit_summary(unit)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
