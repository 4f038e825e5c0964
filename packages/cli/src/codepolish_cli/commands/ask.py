"""ask command — one follow-up question about a file.

The transcript is a JSON file owned by the caller: it is read, replayed to
the provider and then rewritten with the new exchange appended. Omitting
--transcript asks a one-off question with no history.
"""

from __future__ import annotations

import json
from pathlib import Path

import click
from rich.console import Console
from rich.markdown import Markdown

from codepolish_cli.context import get_config
from codepolish_core.conversation import ChatMessage, append_exchange
from codepolish_core.errors import ReviewError
from codepolish_core.reviewer import run_chat

console = Console()


def _read_transcript(path: Path | None) -> list[ChatMessage]:
    if path is None or not path.exists():
        return []
    try:
        data = json.loads(path.read_text() or "[]")
        if not isinstance(data, list):
            raise ValueError("expected a JSON list of messages")
        return [ChatMessage.from_dict(m) for m in data]
    except ValueError as e:
        raise click.UsageError(f"Could not read transcript {path}: {e}") from e


@click.command("ask")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("question")
@click.option(
    "--transcript",
    "transcript_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="JSON file holding the conversation so far; created if missing and updated after each answer.",
)
@click.option("--model", default=None, help="Model identifier. Overrides config file.")
@click.option(
    "--error-log",
    "error_log_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="File containing an error log or stack trace.",
)
@click.pass_context
def ask_cmd(ctx, source: Path, question: str, transcript_path: Path | None, model: str | None, error_log_path):
    """Ask QUESTION about the code in SOURCE."""
    config = get_config(ctx)
    transcript = _read_transcript(transcript_path)

    try:
        with console.status("Thinking...", spinner="dots"):
            answer = run_chat(
                config,
                source.read_text(),
                question,
                transcript,
                model=model,
                error_log=error_log_path.read_text() if error_log_path else "",
            )
    except ReviewError as e:
        raise click.ClickException(str(e)) from e

    console.print(Markdown(answer))

    if transcript_path is not None:
        updated = append_exchange(transcript, question, answer)
        transcript_path.write_text(json.dumps([m.to_dict() for m in updated], indent=2))
