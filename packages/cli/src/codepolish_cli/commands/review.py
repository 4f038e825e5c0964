"""review command — review a source file and persist the improved pair."""

from __future__ import annotations

import json
from pathlib import Path

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from codepolish_cli.context import get_config, get_store
from codepolish_core.config import load_house_style
from codepolish_core.errors import ReviewError
from codepolish_core.options import REVIEW_MODES, STYLES, TONES, VERBOSITY_LEVELS
from codepolish_core.request import AUTO_LANGUAGE, ReviewRequest
from codepolish_core.reviewer import run_review
from codepolish_core.schema import ReviewResult
from codepolish_store.errors import StoreError
from codepolish_store.models import Complexity

console = Console()

_SEVERITY_STYLE = {"critical": "bold red", "high": "red", "medium": "yellow", "low": "blue"}


def _score_style(score: float) -> str:
    if score >= 8:
        return "green"
    if score >= 5:
        return "yellow"
    return "red"


def _lexer_for(request: ReviewRequest, result: ReviewResult) -> str:
    # Converted code is highlighted as the target language, not the source.
    return request.target_language if request.is_conversion else result.detected_language


def _render(result: ReviewResult, lexer: str, show_explanation: bool) -> None:
    console.print(f"\n[bold]Detected language:[/bold] {result.detected_language}")

    if result.issues:
        table = Table(title="Issues", show_header=True, header_style="bold cyan")
        table.add_column("Line", justify="right", width=6)
        table.add_column("Type", width=14)
        table.add_column("Severity", width=10)
        table.add_column("Description", max_width=50)
        table.add_column("Suggestion", max_width=50)
        for issue in result.issues:
            style = _SEVERITY_STYLE.get(issue.severity.lower(), "white")
            table.add_row(
                str(issue.line) if issue.line is not None else "-",
                issue.type,
                f"[{style}]{issue.severity}[/{style}]",
                issue.description,
                issue.suggestion,
            )
        console.print(table)
    else:
        console.print("[green]No issues found.[/green]")

    scores = Table(title="Scores (0-10)", show_header=True)
    scores.add_column("Metric", style="bold")
    scores.add_column("Score", justify="right")
    for label, value in result.detailed_scores.model_dump().items():
        style = _score_style(value)
        scores.add_row(label.replace("_", " ").title(), f"[{style}]{value:g}[/{style}]")
    scores.add_row("[bold]Overall[/bold]", f"[bold]{result.overall_score:g}[/bold]")
    console.print(scores)

    c = result.complexity
    console.print(f"[bold]Complexity:[/bold] time {c.time}, space {c.space}, cyclomatic {c.cyclomatic}")

    console.print(
        Panel(
            Syntax(result.optimized_code, lexer, line_numbers=True, word_wrap=True),
            title="Optimized code",
        )
    )
    if show_explanation:
        console.print(Panel(Markdown(result.explanation), title="Explanation"))


@click.command("review")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--language", default=AUTO_LANGUAGE, show_default=True, help="Source language, or 'auto' to detect.")
@click.option("--mode", type=click.Choice(REVIEW_MODES), default="industry", show_default=True)
@click.option("--target", "target_language", default=None, help="Convert the code to this language.")
@click.option("--style", type=click.Choice(STYLES), default="default", show_default=True)
@click.option("--model", default=None, help="Model identifier. Overrides config file.")
@click.option(
    "--error-log",
    "error_log_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="File containing an error log or stack trace.",
)
@click.option(
    "--house-style",
    "house_style_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Markdown house style guidelines. Overrides config file.",
)
@click.option("--verbosity", type=click.Choice(VERBOSITY_LEVELS), default="normal", show_default=True)
@click.option("--tone", type=click.Choice(TONES), default="professional", show_default=True)
@click.option("--json", "as_json", is_flag=True, help="Print the raw result as JSON.")
@click.option("--explain", is_flag=True, help="Also print the Markdown explanation.")
@click.option("--no-save", is_flag=True, help="Do not record the result in the history store.")
@click.pass_context
def review_cmd(
    ctx,
    source: Path,
    language: str,
    mode: str,
    target_language: str | None,
    style: str,
    model: str | None,
    error_log_path: Path | None,
    house_style_path: Path | None,
    verbosity: str,
    tone: str,
    as_json: bool,
    explain: bool,
    no_save: bool,
):
    """Review SOURCE with the configured AI provider.

    \b
    Required environment variable (per provider):
      GEMINI_API_KEY       --provider gemini (default)
      OPENAI_API_KEY       --provider openai
      ANTHROPIC_API_KEY    --provider anthropic
    """
    config = get_config(ctx)
    code = source.read_text()
    if not code.strip():
        raise click.UsageError(f"{source} is empty.")

    house_style = house_style_path.read_text() if house_style_path else load_house_style(config)
    request = ReviewRequest(
        code=code,
        language=language,
        mode=mode,
        target_language=target_language,
        style=style,
        model=model or config["model"],
        error_log=error_log_path.read_text() if error_log_path else "",
        house_style=house_style,
        verbosity=verbosity,
        tone=tone,
    )

    try:
        with console.status("Reviewing...", spinner="dots"):
            result = run_review(request, config)
    except ReviewError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(json.dumps(result.to_wire(), indent=2))
    else:
        _render(result, _lexer_for(request, result), show_explanation=explain)

    if no_save:
        return
    try:
        inserted = get_store(ctx).record(
            code,
            result.optimized_code,
            language=result.detected_language,
            complexity=Complexity.from_dict(result.complexity.model_dump()),
        )
    except StoreError as e:
        # The review itself succeeded; losing the history entry is not fatal.
        console.print(f"[yellow]Warning: could not save review history ({e}).[/yellow]")
        return
    if not as_json:
        console.print("[dim]Saved to history.[/dim]" if inserted else "[dim]Already in history.[/dim]")
