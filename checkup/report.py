"""Group diagnostics by file and render them with Rich."""
from typing import Dict, Iterable, List
from rich.console import Console
from rich.markup import escape

from .analyzer.diagnostics import Diagnostic, Level

GENERAL = 'General'

LEVEL_STYLES = {
    Level.ERROR: 'red',
    Level.WARN: 'yellow',
    Level.INFO: None,
}


def group_by_file(diagnostics: Iterable[Diagnostic]) -> Dict[str, List[Diagnostic]]:
    """Group diagnostics by file, keeping first-seen order.

    Diagnostics without a file are collected under "General", which always
    comes first.
    """
    groups: Dict[str, List[Diagnostic]] = {GENERAL: []}
    for diagnostic in diagnostics:
        groups.setdefault(diagnostic.file or GENERAL, []).append(diagnostic)
    return {key: value for key, value in groups.items() if value}


def format_message(diagnostic: Diagnostic) -> str:
    """Rich markup for one diagnostic line, coloured by level."""
    text = escape(diagnostic.message)
    style = LEVEL_STYLES.get(diagnostic.level)
    return f"[{style}]{text}[/{style}]" if style else text


def render(diagnostics: Iterable[Diagnostic], console: Console) -> None:
    """Print grouped diagnostics: bold file heading, then one line per finding."""
    for file, group in group_by_file(diagnostics).items():
        console.print(f"[bold]{escape(file)}[/bold]")
        for diagnostic in group:
            console.print(f"➜ {format_message(diagnostic)}")
        console.print()


def render_json(diagnostics: Iterable[Diagnostic], console: Console) -> None:
    console.print_json(data=[diagnostic.to_dict() for diagnostic in diagnostics])
