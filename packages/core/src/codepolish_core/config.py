import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "provider": "gemini",
    "model": "gemini-3-flash-preview",
    "store_path": "history.db",
    "host": "0.0.0.0",
    "port": 3000,
    "static_dir": None,  # directory of a pre-built UI to serve at /; None = API only
    "house_style": None,  # None = no house style; set to a path string to inject one
    "history_limit": 100,
    "log_level": "INFO",
}

PROVIDER_KEY_ENV = {
    "gemini": "GEMINI_API_KEY",
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}


def load_config(config_path: str = ".codepolish.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .codepolish.yml in the current directory
      3. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # Resolve credentials from environment variables
    config["gemini_api_key"] = os.environ.get("GEMINI_API_KEY")
    config["openai_api_key"] = os.environ.get("OPENAI_API_KEY")
    config["anthropic_api_key"] = os.environ.get("ANTHROPIC_API_KEY")

    return config


def api_key_for(config: dict) -> Optional[str]:
    """Return the API key of the configured provider, or None."""
    return config.get(f"{config['provider']}_api_key")


def load_house_style(config: dict) -> str:
    """
    Load house style guidelines.

    If ``house_style`` is set in config, loads from that path (relative to cwd).
    Otherwise returns an empty string, which the prompt treats as "follow
    general industry best practices".
    """
    custom_path = config.get("house_style")
    if not custom_path:
        return ""
    p = Path(custom_path)
    if not p.exists():
        raise FileNotFoundError(f"House style file not found: {custom_path}")
    return p.read_text()
