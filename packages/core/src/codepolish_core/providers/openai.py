from __future__ import annotations

from types import MappingProxyType

try:
    from openai import OpenAI as _OpenAI
except ImportError:
    _OpenAI = None  # type: ignore[assignment,misc]

from codepolish_core.conversation import MODEL, ChatMessage
from codepolish_core.errors import MissingCredentialsError
from codepolish_core.providers.base import BaseReviewer


class OpenAIReviewer(BaseReviewer):
    DEFAULT_MODEL = "gpt-4o"
    MODEL_ALIASES = MappingProxyType(
        {
            "gemini-3-flash-preview": "gpt-4o-mini",
            "gemini-3.1-pro-preview": "gpt-4o",
            "claude-4": "gpt-4o",
            "gpt-5": "gpt-4o",
        }
    )
    # temperature=0.2 leans toward deterministic, structured JSON output.
    TEMPERATURE = 0.2

    def __init__(self, api_key: str | None):
        if not api_key:
            raise MissingCredentialsError("OPENAI_API_KEY is not set")
        if _OpenAI is None:
            raise ImportError(
                "The 'openai' package is required for this provider. "
                "Install it with: pip install 'codepolish[openai]'"
            )
        self.client = _OpenAI(api_key=api_key)

    def _call_api(self, model: str, prompt: str, schema: dict) -> str | None:
        response = self.client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
            response_format={"type": "json_object"},
            temperature=self.TEMPERATURE,
            max_tokens=self.MAX_TOKENS,
        )
        return response.choices[0].message.content

    def _call_chat(
        self, model: str, system_instruction: str, transcript: list[ChatMessage], question: str
    ) -> str | None:
        messages = [{"role": "system", "content": system_instruction}]
        messages += [{"role": "assistant" if m.role == MODEL else "user", "content": m.text} for m in transcript]
        messages.append({"role": "user", "content": question})
        response = self.client.chat.completions.create(
            model=model,
            messages=messages,
            temperature=self.TEMPERATURE,
            max_tokens=self.MAX_TOKENS,
        )
        return response.choices[0].message.content
