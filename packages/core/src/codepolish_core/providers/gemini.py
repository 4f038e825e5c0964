from __future__ import annotations

from types import MappingProxyType

from google import genai
from google.genai import types

from codepolish_core.conversation import ChatMessage
from codepolish_core.errors import MissingCredentialsError, SafetyBlockedError
from codepolish_core.providers.base import BaseReviewer
from codepolish_core.request import DEFAULT_MODEL

_BLOCKED_MESSAGE = "The code review was blocked by safety filters. Please ensure your code follows safety guidelines."


class GeminiReviewer(BaseReviewer):
    DEFAULT_MODEL = DEFAULT_MODEL
    MODEL_ALIASES = MappingProxyType(
        {
            "claude-4": "gemini-3-flash-preview",
            "gpt-5": "gemini-3.1-pro-preview",
        }
    )
    NATIVE_SCHEMA = True
    THINKING_LEVEL = "LOW"

    def __init__(self, api_key: str | None):
        if not api_key:
            raise MissingCredentialsError("GEMINI_API_KEY is not set")
        self.client = genai.Client(api_key=api_key)

    def _call_api(self, model: str, prompt: str, schema: dict) -> str | None:
        response = self.client.models.generate_content(
            model=model,
            contents=prompt,
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=schema,
                thinking_config=types.ThinkingConfig(thinking_level=self.THINKING_LEVEL),
            ),
        )
        self._raise_if_blocked(response)
        return response.text

    def _call_chat(
        self, model: str, system_instruction: str, transcript: list[ChatMessage], question: str
    ) -> str | None:
        contents = [types.Content(role=m.role, parts=[types.Part(text=m.text)]) for m in transcript]
        contents.append(types.Content(role="user", parts=[types.Part(text=question)]))
        response = self.client.models.generate_content(
            model=model,
            contents=contents,
            config=types.GenerateContentConfig(system_instruction=system_instruction),
        )
        self._raise_if_blocked(response)
        return response.text

    @staticmethod
    def _raise_if_blocked(response) -> None:
        # A blocked prompt or candidate comes back as a normal response with
        # no text, not as an exception.
        feedback = getattr(response, "prompt_feedback", None)
        if feedback is not None and getattr(feedback, "block_reason", None):
            raise SafetyBlockedError(_BLOCKED_MESSAGE)
        for candidate in getattr(response, "candidates", None) or []:
            reason = getattr(candidate, "finish_reason", None)
            if getattr(reason, "value", reason) in ("SAFETY", "PROHIBITED_CONTENT", "BLOCKLIST"):
                raise SafetyBlockedError(_BLOCKED_MESSAGE)
