"""
Rich console output for the replaygen CLI.
"""

from rich import box
from rich.console import Console
from rich.style import Style
from rich.table import Table
from rich.text import Text

from replaygen.core.ir import CompilationUnit, Comment

console = Console()

STYLES = {
    "title": Style(color="bright_cyan", bold=True),
    "subtitle": Style(color="bright_black"),
    "success": Style(color="green", bold=True),
    "error": Style(color="red", bold=True),
    "warning": Style(color="yellow"),
    "info": Style(color="cyan"),
    "muted": Style(color="bright_black"),
}


def print_header(title: str, subtitle: str = "") -> None:
    """Print a styled header."""
    console.print()
    console.print(Text(title, style=STYLES["title"]))
    if subtitle:
        console.print(Text(subtitle, style=STYLES["subtitle"]))
    console.print()


def print_success(message: str) -> None:
    console.print(Text(f"✓ {message}", style=STYLES["success"]))


def print_error(message: str) -> None:
    console.print(Text(f"✗ {message}", style=STYLES["error"]))


def print_warning(message: str) -> None:
    console.print(Text(f"⚠ {message}", style=STYLES["warning"]))


def display_unit_summary(unit: CompilationUnit) -> None:
    """
    Show routines, imports and flagged values of a compilation unit.

    Comments in the instruction stream mark values that could not be
    reproduced and need manual follow-up; each one is listed as a warning.
    """
    print_header(f"{unit.namespace}.{unit.class_name}", f"{unit.instruction_count()} instructions")

    routines = Table(box=box.ROUNDED, show_header=True, header_style="bold cyan")
    routines.add_column("Routine", style="white bold", no_wrap=True)
    routines.add_column("Parameters", style="bright_black")
    routines.add_column("Instructions", justify="right")
    routines.add_column("Visibility", style="bright_black")

    flagged: list[str] = []
    for routine in unit.routines:
        params = ", ".join(
            f"{'ref ' if p.by_ref else ''}{p.type_name} {p.name}" for p in routine.parameters
        )
        count = 0
        for instruction in routine.walk():
            count += 1
            if isinstance(instruction, Comment):
                flagged.append(f"{routine.name}: {instruction.text}")
        routines.add_row(routine.name, params, str(count), "public" if routine.public else "private")

    console.print(routines)

    if unit.imports:
        imports = Table(box=box.SIMPLE, show_header=True, header_style="bold cyan")
        imports.add_column("Namespace", style="white")
        imports.add_column("Alias", style="cyan")
        for imp in unit.imports:
            imports.add_row(imp.namespace, imp.alias)
        console.print(imports)

    for text in flagged:
        print_warning(text)
    console.print()
