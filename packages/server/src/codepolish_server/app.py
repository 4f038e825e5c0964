"""HTTP API for the review UI.

Routes:
  POST /api/history  — persist an (original, improved) pair, idempotently
  GET  /api/history  — most recent records, newest first
  POST /api/review   — run one structured review
  POST /api/refactor — apply an intent across several files in one call
  POST /api/chat     — answer one follow-up question (caller sends the transcript)
  GET  /api/health   — liveness

Every error is answered as ``{"error": message}``. Store faults are logged
where they happen and reported with a generic message.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from codepolish_core.config import load_config, load_house_style
from codepolish_core.errors import ReviewError
from codepolish_core.providers.base import BaseReviewer
from codepolish_core.reviewer import get_reviewer, run_chat, run_refactor, run_review
from codepolish_server.schemas import ChatIn, HistoryIn, RefactorIn, ReviewIn
from codepolish_store.base import BaseStore
from codepolish_store.errors import InternalError
from codepolish_store.errors import ValidationError as StoreValidationError
from codepolish_store.models import Complexity
from codepolish_store.sqlite import SQLiteStore

logger = logging.getLogger(__name__)


def create_app(
    config: dict | None = None,
    store: BaseStore | None = None,
    reviewer_factory: Callable[[dict], BaseReviewer] | None = None,
) -> FastAPI:
    """Build the application.

    ``store`` and ``reviewer_factory`` default to the SQLite store at
    ``config["store_path"]`` and get_reviewer(); tests inject their own.
    A store passed in is left open on shutdown; one created here is closed.
    """
    config = config or load_config()
    owns_store = store is None
    store = store or SQLiteStore(db_path=config["store_path"])
    reviewer_factory = reviewer_factory or get_reviewer
    house_style = load_house_style(config)
    history_limit = config.get("history_limit", 100)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if owns_store:
            store.close()

    app = FastAPI(title="codepolish", description="AI code review assistant API", lifespan=lifespan)
    app.state.store = store
    app.state.config = config

    # ------------------------------------------------------------------ #
    # Error handlers                                                       #
    # ------------------------------------------------------------------ #

    @app.exception_handler(RequestValidationError)
    async def _invalid_body(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    @app.exception_handler(StoreValidationError)
    async def _invalid_record(request: Request, exc: StoreValidationError):
        return JSONResponse(status_code=400, content={"error": str(exc) or "Missing required fields"})

    @app.exception_handler(InternalError)
    async def _store_fault(request: Request, exc: InternalError):
        return JSONResponse(status_code=500, content={"error": str(exc)})

    @app.exception_handler(ReviewError)
    async def _review_failed(request: Request, exc: ReviewError):
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc), "kind": exc.code})

    # ------------------------------------------------------------------ #
    # Routes                                                               #
    # ------------------------------------------------------------------ #

    @app.get("/api/health")
    def health():
        return {"status": "ok"}

    @app.post("/api/history")
    def save_history(body: HistoryIn):
        complexity = Complexity.from_dict(body.complexity.model_dump()) if body.complexity else None
        inserted = store.record(
            body.original_code,
            body.improved_code,
            language=body.language,
            complexity=complexity,
        )
        return {"success": True, "inserted": inserted}

    @app.get("/api/history")
    def list_history():
        return [r.to_dict() for r in store.list_history(limit=history_limit)]

    @app.post("/api/review")
    def review(body: ReviewIn):
        request = body.to_request(default_house_style=house_style)
        # Reviewer built per call so a missing key fails the call, not startup.
        result = run_review(request, config, reviewer=reviewer_factory(config))
        return result.to_wire()

    @app.post("/api/refactor")
    def refactor(body: RefactorIn):
        result = run_refactor(body.to_request(), config, reviewer=reviewer_factory(config))
        return result.to_wire()

    @app.post("/api/chat")
    def chat(body: ChatIn):
        answer = run_chat(
            config,
            body.code,
            body.question,
            [m.to_dict() for m in body.history],
            model=body.model,
            error_log=body.error_log,
            reviewer=reviewer_factory(config),
        )
        return {"answer": answer}

    static_dir = config.get("static_dir")
    if static_dir and Path(static_dir).is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="ui")
    elif static_dir:
        logger.warning("static_dir %s does not exist; serving the API only", static_dir)

    return app
