"""Provider selection and the review, refactor and chat entry points used by the server and CLI."""

from __future__ import annotations

import logging
import time
from typing import Iterable

from codepolish_core.config import PROVIDER_KEY_ENV, api_key_for
from codepolish_core.conversation import ChatMessage
from codepolish_core.errors import ValidationError
from codepolish_core.providers.anthropic import AnthropicReviewer
from codepolish_core.providers.base import BaseReviewer
from codepolish_core.providers.gemini import GeminiReviewer
from codepolish_core.providers.openai import OpenAIReviewer
from codepolish_core.request import RefactorRequest, ReviewRequest
from codepolish_core.schema import RefactorResult, ReviewResult

logger = logging.getLogger(__name__)

_PROVIDERS: dict[str, type[BaseReviewer]] = {
    "gemini": GeminiReviewer,
    "openai": OpenAIReviewer,
    "anthropic": AnthropicReviewer,
}


def get_reviewer(config: dict) -> BaseReviewer:
    """Build the reviewer for ``config["provider"]``.

    Raises MissingCredentialsError before any client is created when the
    provider's API key is absent.
    """
    provider = config["provider"]
    cls = _PROVIDERS.get(provider)
    if cls is None:
        raise ValidationError(f"Unknown provider: {provider!r}. Choose one of: {', '.join(sorted(PROVIDER_KEY_ENV))}.")
    return cls(api_key=api_key_for(config))


def run_review(request: ReviewRequest, config: dict, reviewer: BaseReviewer | None = None) -> ReviewResult:
    """Run one review, logging how long the provider took."""
    reviewer = reviewer or get_reviewer(config)
    start = time.monotonic()
    result = reviewer.review(request)
    logger.info(
        "Review finished in %.1fs: language=%s issues=%d score=%s",
        time.monotonic() - start,
        result.detected_language,
        len(result.issues),
        result.overall_score,
    )
    return result


def run_chat(
    config: dict,
    code: str,
    question: str,
    prior_messages: Iterable[ChatMessage | dict] = (),
    model: str | None = None,
    error_log: str = "",
    reviewer: BaseReviewer | None = None,
) -> str:
    """Answer one follow-up question; the caller keeps the transcript."""
    reviewer = reviewer or get_reviewer(config)
    return reviewer.ask(code, question, prior_messages, model=model or config.get("model"), error_log=error_log)


def run_refactor(request: RefactorRequest, config: dict, reviewer: BaseReviewer | None = None) -> RefactorResult:
    """Run one cross-file refactor, logging how long the provider took."""
    reviewer = reviewer or get_reviewer(config)
    start = time.monotonic()
    result = reviewer.refactor(request)
    logger.info(
        "Refactor finished in %.1fs: %d of %d files modified",
        time.monotonic() - start,
        len(result.modified_files),
        len(request.files),
    )
    return result
