"""Base reviewer implementing the Template Method pattern.

All providers share the same algorithms:
    review()   → validate request → resolve model → build_review_prompt()
               → _call_api()   ← only this differs per provider
               → parse_review_result()
    refactor() → same steps with build_refactor_prompt() and REFACTOR_SCHEMA
    ask()      → prepare_transcript() + build_chat_instruction()
               → _call_chat()  ← only this differs per provider

Subclasses implement three things only:
  - __init__: check the credential and store the SDK client
  - _call_api: make one raw structured-output call for the given schema and
    return the text
  - _call_chat: make one raw conversational call and return the text

A single attempt is made per call. SDK exceptions are translated into the
codepolish_core.errors taxonomy here, once, for every provider.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Callable, Iterable, Mapping, TypeVar

from codepolish_core.conversation import FALLBACK_ANSWER, ChatMessage, prepare_transcript
from codepolish_core.errors import ReviewError, ValidationError, classify_upstream_error
from codepolish_core.prompts import (
    build_chat_instruction,
    build_refactor_prompt,
    build_review_prompt,
    build_schema_instructions,
)
from codepolish_core.request import RefactorRequest, ReviewRequest
from codepolish_core.schema import (
    REFACTOR_SCHEMA,
    RESPONSE_SCHEMA,
    RefactorResult,
    ReviewResult,
    parse_refactor_result,
    parse_review_result,
)

logger = logging.getLogger(__name__)

_MAX_TOKENS = 8192

T = TypeVar("T")


class BaseReviewer(ABC):
    DEFAULT_MODEL: str = ""
    # Logical model identifier → concrete model served by this provider.
    MODEL_ALIASES: Mapping[str, str] = MappingProxyType({})
    # True when the SDK enforces RESPONSE_SCHEMA itself; otherwise the schema
    # is appended to the prompt.
    NATIVE_SCHEMA: bool = False
    MAX_TOKENS: int = _MAX_TOKENS

    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    def review(self, request: ReviewRequest) -> ReviewResult:
        """Run one structured review and return the validated result."""
        request.validate()
        model = self.resolve_model(request.model)
        prompt = build_review_prompt(request)
        if not self.NATIVE_SCHEMA:
            prompt = f"{prompt}\n\n{build_schema_instructions()}"

        logger.info(
            "%s review: model=%s mode=%s conversion=%s",
            self.__class__.__name__,
            model,
            request.mode,
            request.is_conversion,
        )
        raw = self._invoke(self._call_api, model, prompt, RESPONSE_SCHEMA)
        return parse_review_result(raw)

    def refactor(self, request: RefactorRequest) -> RefactorResult:
        """Apply ``request.intent`` across the workspace files in one call."""
        request.validate()
        model = self.resolve_model(request.model)
        prompt = build_refactor_prompt(request)
        if not self.NATIVE_SCHEMA:
            prompt = f"{prompt}\n\n{build_schema_instructions(REFACTOR_SCHEMA)}"

        logger.info("%s refactor: model=%s files=%d", self.__class__.__name__, model, len(request.files))
        raw = self._invoke(self._call_api, model, prompt, REFACTOR_SCHEMA)
        return parse_refactor_result(raw)

    def ask(
        self,
        code: str,
        question: str,
        prior_messages: Iterable[ChatMessage | dict] = (),
        model: str | None = None,
        error_log: str = "",
    ) -> str:
        """Answer a follow-up question about ``code``.

        ``prior_messages`` is replayed in order before ``question``; nothing is
        remembered between calls.
        """
        if not isinstance(question, str) or not question.strip():
            raise ValidationError("question must be a non-empty string")
        transcript = prepare_transcript(prior_messages)
        system = build_chat_instruction(code or "", error_log)
        resolved = self.resolve_model(model or self.DEFAULT_MODEL)

        logger.info("%s chat: model=%s turns=%d", self.__class__.__name__, resolved, len(transcript))
        answer = self._invoke(self._call_chat, resolved, system, transcript, question)
        if not answer or not answer.strip():
            return FALLBACK_ANSWER
        return answer

    def resolve_model(self, model: str | None) -> str:
        """Map a logical model identifier to this provider's model name.

        Unknown identifiers pass through unchanged.
        """
        if not model:
            return self.DEFAULT_MODEL
        return self.MODEL_ALIASES.get(model, model)

    # ------------------------------------------------------------------ #
    # Abstract: implement in each provider                                #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def _call_api(self, model: str, prompt: str, schema: dict) -> str | None:
        """Make a single structured-output call and return the raw text.

        ``schema`` is only needed by NATIVE_SCHEMA providers; for the others
        it is already embedded in ``prompt``. Should raise on failure;
        _invoke translates the exception.
        """

    @abstractmethod
    def _call_chat(
        self, model: str, system_instruction: str, transcript: list[ChatMessage], question: str
    ) -> str | None:
        """Make a single conversational call and return the raw answer text."""

    # ------------------------------------------------------------------ #
    # Shared implementations                                               #
    # ------------------------------------------------------------------ #

    def _invoke(self, call: Callable[..., T], *args) -> T:
        try:
            return call(*args)
        except ReviewError:
            raise
        except Exception as e:
            error = classify_upstream_error(e)
            logger.error("%s API error (%s): %s", self.__class__.__name__, error.code, e)
            raise error from e
