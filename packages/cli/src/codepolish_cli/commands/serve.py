"""serve command — run the HTTP API with uvicorn."""

from __future__ import annotations

import click
import uvicorn
from rich.console import Console

from codepolish_cli.context import get_config
from codepolish_core.config import PROVIDER_KEY_ENV, api_key_for

console = Console()


@click.command("serve")
@click.option("--host", default=None, help="Interface to bind. Overrides config file.")
@click.option("--port", type=int, default=None, help="Port to listen on. Overrides config file.")
@click.option("--static-dir", default=None, help="Directory of a pre-built UI to serve at /.")
@click.pass_context
def serve_cmd(ctx, host: str | None, port: int | None, static_dir: str | None):
    """Serve /api/history, /api/review and /api/chat."""
    from codepolish_server.app import create_app

    config = get_config(ctx)
    for key, value in (("host", host), ("port", port), ("static_dir", static_dir)):
        if value is not None:
            config[key] = value

    if not api_key_for(config):
        # History still works without a key; reviews will fail per request.
        env = PROVIDER_KEY_ENV.get(config["provider"], "the provider API key")
        console.print(f"[yellow]{env} is not set — /api/review and /api/chat will fail until it is.[/yellow]")

    app = create_app(config)
    console.print(f"Server running on [bold]http://localhost:{config['port']}[/bold]")
    uvicorn.run(app, host=config["host"], port=config["port"], log_level=config["log_level"].lower())
