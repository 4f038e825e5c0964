"""refactor command — apply one intent across several source files."""

from __future__ import annotations

import json
from pathlib import Path

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.syntax import Syntax

from codepolish_cli.context import get_config
from codepolish_core.errors import ReviewError
from codepolish_core.request import REFACTOR_MODEL, RefactorRequest, SourceFile
from codepolish_core.reviewer import run_refactor
from codepolish_core.schema import RefactorResult

console = Console()


def _target_path(name: str) -> Path:
    """Resolve a returned file name, refusing anything outside the working directory."""
    path = Path(name)
    if path.is_absolute() or ".." in path.parts:
        raise click.ClickException(f"Refusing to write {name}: path is outside the working directory.")
    return path


def _render(result: RefactorResult, originals: dict[str, str]) -> None:
    console.print(Panel(Markdown(result.explanation), title="Explanation"))
    console.print(Panel(Markdown(result.dependency_graph), title="Dependency graph"))

    if not result.modified_files:
        console.print("[yellow]No files were modified.[/yellow]")
        return
    for f in result.modified_files:
        status = "modified" if f.name in originals else "new"
        lexer = Syntax.guess_lexer(f.name, code=f.content)
        console.print(
            Panel(Syntax(f.content, lexer, line_numbers=True, word_wrap=True), title=f"{f.name} ({status})")
        )


@click.command("refactor")
@click.argument("intent")
@click.argument("sources", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--model", default=REFACTOR_MODEL, show_default=True, help="Model identifier.")
@click.option("--json", "as_json", is_flag=True, help="Print the raw result as JSON.")
@click.option("--apply", "apply_changes", is_flag=True, help="Write modified and new files to disk.")
@click.pass_context
def refactor_cmd(ctx, intent: str, sources: tuple[Path, ...], model: str, as_json: bool, apply_changes: bool):
    """Apply INTENT across SOURCES in a single cross-file refactor.

    \b
    Example:
      codepolish refactor "rename User.email to User.email_address" models.py views.py
    """
    config = get_config(ctx)
    originals = {str(p): p.read_text() for p in sources}
    request = RefactorRequest(
        intent=intent,
        files=tuple(SourceFile(name=name, content=content) for name, content in originals.items()),
        model=model,
    )

    try:
        with console.status("Refactoring...", spinner="dots"):
            result = run_refactor(request, config)
    except ReviewError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(json.dumps(result.to_wire(), indent=2))
    else:
        _render(result, originals)

    if not apply_changes:
        return
    targets = [(_target_path(f.name), f.content) for f in result.modified_files]
    for path, content in targets:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    if not as_json:
        console.print(f"[green]Wrote {len(targets)} file(s).[/green]")
