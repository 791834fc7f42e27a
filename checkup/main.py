"""checkup CLI - repository health checks for TypeScript/JavaScript projects."""
from pathlib import Path
from typing import List, Optional
import typer
from rich.markup import escape
from rich.table import Table

from .analyzer.diagnostics import Diagnostic, Level, ProjectConfigError
from .analyzer.engine import ExportUsageAnalyzer
from .analyzer.project import ProjectConfig, discover_projects
from .config import Config, ReexportPolicy
from .report import render, render_json
from .utils.safe_console import SafeConsole

app = typer.Typer(
    name="checkup",
    help="Repository health checks: dead exports and unused locals in TypeScript/JavaScript projects",
    add_completion=False
)
# Use SafeConsole for Windows Unicode compatibility
console = SafeConsole(highlight=False, soft_wrap=True)


def _resolve_base(project_path: str) -> Path:
    base = Path(project_path).resolve()
    if not base.exists():
        console.print(f"[bold red]Error:[/bold red] Project path does not exist: {escape(str(base))}")
        raise typer.Exit(1)
    return base


def _print_summary(diagnostics: List[Diagnostic]):
    if not diagnostics:
        console.print("[bold green]✓ Your codebase is clean![/bold green]")
        return

    errors = sum(1 for d in diagnostics if d.level == Level.ERROR)
    warnings = sum(1 for d in diagnostics if d.level == Level.WARN)
    console.print(f"[bold yellow]Summary:[/bold yellow] {errors} error(s), {warnings} warning(s)")


@app.command()
def check(
    project_path: str = typer.Argument(".", help="Directory containing one or more tsconfig.json/jsconfig.json projects"),
    reexport_policy: Optional[ReexportPolicy] = typer.Option(
        None, "--reexport-policy", case_sensitive=False,
        help="How 'export ... from' counts as usage: direct (default) or transitive"),
    jobs: Optional[int] = typer.Option(None, "--jobs", "-j", min=1, help="Worker threads for parsing and diagnosis"),
    dead_locals: Optional[bool] = typer.Option(
        None, "--dead-locals/--no-dead-locals", help="Report modules containing unused local symbols"),
    class_components: Optional[bool] = typer.Option(
        None, "--class-components/--no-class-components", help="Warn about class-based React components"),
    json_output: bool = typer.Option(False, "--json", help="Print diagnostics as JSON"),
    strict: bool = typer.Option(False, "--strict", help="Exit with code 1 when any error is reported"),
):
    """Find unused exports and non-minimal modules in every project below PROJECT_PATH."""
    base = _resolve_base(project_path)

    try:
        context = Config().to_context(
            base,
            reexport_policy=reexport_policy,
            jobs=jobs,
            check_dead_locals=dead_locals,
            check_class_components=class_components,
        )
    except ValueError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(1)

    analyzer = ExportUsageAnalyzer(context)
    config_paths = discover_projects(base)

    diagnostics: List[Diagnostic] = []
    if not config_paths:
        diagnostics = analyzer.analyze(base)
    for config_path in config_paths:
        if json_output:
            diagnostics.extend(analyzer.analyze_config(config_path))
            continue
        with console.status(f"[bold blue]Analyzing {escape(context.display_path(config_path))}..."):
            diagnostics.extend(analyzer.analyze_config(config_path))

    if json_output:
        render_json(diagnostics, console)
    else:
        render(diagnostics, console)
        _print_summary(diagnostics)

    if strict and any(d.level == Level.ERROR for d in diagnostics):
        raise typer.Exit(1)


@app.command()
def projects(
    project_path: str = typer.Argument(".", help="Directory to search for tsconfig.json/jsconfig.json"),
):
    """List the project roots that `check` would analyze."""
    base = _resolve_base(project_path)
    config_paths = discover_projects(base)

    if not config_paths:
        console.print("[bold yellow]No tsconfig.json or jsconfig.json found.[/bold yellow]")
        return

    table = Table(title="Projects")
    table.add_column("Config", style="cyan", no_wrap=False)
    table.add_column("Modules", justify="right", style="green")
    table.add_column("JavaScript", style="magenta")

    for config_path in config_paths:
        try:
            display_path = config_path.relative_to(base).as_posix()
        except ValueError:
            display_path = str(config_path)

        try:
            project = ProjectConfig.load(config_path)
        except ProjectConfigError as exc:
            table.add_row(escape(display_path), "-", f"[red]{escape(exc.reason)}[/red]")
            continue
        table.add_row(escape(display_path), str(len(project.modules)), "yes" if project.allow_js else "no")

    console.print(table)


if __name__ == "__main__":
    app()
