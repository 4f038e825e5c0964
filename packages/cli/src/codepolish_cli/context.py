"""Shared click context helpers.

The history store is opened on first use so commands that never touch it
(init, serve) do not create a database file as a side effect.
"""

from __future__ import annotations

import click

from codepolish_store.base import BaseStore


def _build_store(config: dict) -> BaseStore:
    """Instantiate the history store from .codepolish.yml settings.

    This factory lives in the CLI so neither codepolish_core nor
    codepolish_store know about the CLI config format.
    """
    from codepolish_store.sqlite import SQLiteStore

    return SQLiteStore(db_path=config.get("store_path", "history.db"))


def get_config(ctx: click.Context) -> dict:
    return ctx.find_root().obj["config"]


def get_store(ctx: click.Context) -> BaseStore:
    root = ctx.find_root()
    store = root.obj.get("store")
    if store is None:
        store = _build_store(root.obj["config"])
        root.obj["store"] = store
        root.call_on_close(store.close)
    return store
