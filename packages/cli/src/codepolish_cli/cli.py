"""CLI entry point for codepolish.

Commands:
  serve    — run the HTTP API (and the pre-built UI, if configured)
  review   — review a source file and print issues, scores and optimized code
  refactor — apply one intent across several files in a single cross-file refactor
  ask      — ask a follow-up question about a file, with a caller-owned transcript
  history  — display recent (original, improved) pairs from the store
  stats    — aggregate languages and complexities across the history
  init     — interactive setup wizard that writes .codepolish.yml
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from codepolish_cli.commands.ask import ask_cmd
from codepolish_cli.commands.history import history_cmd
from codepolish_cli.commands.init import init_cmd
from codepolish_cli.commands.refactor import refactor_cmd
from codepolish_cli.commands.review import review_cmd
from codepolish_cli.commands.serve import serve_cmd
from codepolish_cli.commands.stats import stats_cmd


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


@click.group()
@click.version_option(
    version=importlib.metadata.version("codepolish"),
    prog_name="codepolish",
)
@click.option(
    "--config",
    "config_path",
    default=".codepolish.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="CODEPOLISH_CONFIG",
)
@click.option(
    "--provider",
    type=click.Choice(["gemini", "openai", "anthropic"]),
    default=None,
    help="AI provider. Overrides config file.",
)
@click.option("--log-level", default=None, help="Logging level (DEBUG, INFO, WARNING...). Overrides config file.")
@click.pass_context
def main(ctx: click.Context, config_path: str, provider: str | None, log_level: str | None):
    """AI code review assistant with a deduplicated review history."""
    from codepolish_core.config import load_config

    ctx.ensure_object(dict)

    config = load_config(config_path, cli_overrides={"provider": provider, "log_level": log_level})
    _configure_logging(config["log_level"])

    ctx.obj["config"] = config


main.add_command(serve_cmd)
main.add_command(review_cmd)
main.add_command(refactor_cmd)
main.add_command(ask_cmd)
main.add_command(history_cmd)
main.add_command(stats_cmd)
main.add_command(init_cmd)
