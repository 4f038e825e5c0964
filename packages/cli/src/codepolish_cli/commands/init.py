"""init command — interactive setup wizard.

Runs once per checkout and writes .codepolish.yml, so later `codepolish
serve` / `codepolish review` calls need no flags.
"""

from __future__ import annotations

from pathlib import Path

import click
import yaml
from rich.console import Console

from codepolish_core.config import DEFAULT_CONFIG, PROVIDER_KEY_ENV

console = Console()

_DEFAULT_MODELS = {
    "gemini": "gemini-3-flash-preview",
    "openai": "gpt-4o",
    "anthropic": "claude-4",
}


@click.command("init")
@click.option(
    "--path",
    "config_file",
    default=".codepolish.yml",
    show_default=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Where to write the configuration.",
)
def init_cmd(config_file: Path):
    """Set up codepolish for this directory.

    Asks for the AI provider, default model, history database path and an
    optional house style file, then writes them to .codepolish.yml.
    """
    console.print("\n[bold cyan]codepolish init[/bold cyan] — setup wizard\n")

    # --- Choose provider ---
    provider = click.prompt(
        "AI provider",
        type=click.Choice(sorted(PROVIDER_KEY_ENV)),
        default="gemini",
    )
    model = click.prompt("Default model", default=_DEFAULT_MODELS[provider])

    # --- History store ---
    store_path = click.prompt("History database path", default=DEFAULT_CONFIG["store_path"])

    # --- House style ---
    house_style = click.prompt("House style file (blank for none)", default="", show_default=False).strip()
    if house_style and not Path(house_style).exists():
        console.print(f"[yellow]{house_style} does not exist yet — create it before running a review.[/yellow]")

    port = click.prompt("HTTP port", type=int, default=DEFAULT_CONFIG["port"])

    config: dict = {"provider": provider, "model": model, "store_path": store_path, "port": port}
    if house_style:
        config["house_style"] = house_style

    _write_config(config_file, config)
    console.print(f"[green]Wrote {config_file}[/green]")

    api_key_env = PROVIDER_KEY_ENV[provider]
    console.print(f"\n[yellow]Remember to export [bold]{api_key_env}[/bold] before reviewing.[/yellow]")
    console.print("\n[bold green]Setup complete![/bold green]")
    console.print("Start the server with: [bold]codepolish serve[/bold]")


def _write_config(path: Path, config: dict) -> None:
    """Write or update the config file, preserving any existing keys."""
    existing: dict = {}
    if path.exists():
        existing = yaml.safe_load(path.read_text()) or {}
    existing.update(config)
    path.write_text(yaml.dump(existing, default_flow_style=False, sort_keys=False))
