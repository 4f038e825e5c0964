from __future__ import annotations

from types import MappingProxyType

from codepolish_core.conversation import MODEL, ChatMessage
from codepolish_core.errors import MissingCredentialsError
from codepolish_core.providers.base import BaseReviewer

_SONNET = "claude-sonnet-4-20250514"
_OPUS = "claude-opus-4-20250514"


class AnthropicReviewer(BaseReviewer):
    DEFAULT_MODEL = _SONNET
    MODEL_ALIASES = MappingProxyType(
        {
            "gemini-3-flash-preview": _SONNET,
            "gemini-3.1-pro-preview": _OPUS,
            "claude-4": _SONNET,
            "gpt-5": _OPUS,
        }
    )
    # Slightly higher than OpenAI's 0.2 for more natural explanations while
    # keeping the JSON structure stable.
    TEMPERATURE = 0.3

    def __init__(self, api_key: str | None):
        if not api_key:
            raise MissingCredentialsError("ANTHROPIC_API_KEY is not set")
        try:
            from anthropic import Anthropic
        except ImportError:
            raise ImportError(
                "The 'anthropic' package is required for this provider. "
                "Install it with: pip install 'codepolish[anthropic]'"
            )
        self.client = Anthropic(api_key=api_key)

    def _call_api(self, model: str, prompt: str, schema: dict) -> str | None:
        return self._create(model, None, [{"role": "user", "content": prompt}])

    def _call_chat(
        self, model: str, system_instruction: str, transcript: list[ChatMessage], question: str
    ) -> str | None:
        messages = [{"role": "assistant" if m.role == MODEL else "user", "content": m.text} for m in transcript]
        messages.append({"role": "user", "content": question})
        return self._create(model, system_instruction, messages)

    def _create(self, model: str, system: str | None, messages: list[dict]) -> str:
        # Imported inside the method because the anthropic package is optional;
        # __init__ already validated it is installed before we reach here.
        from anthropic.types import TextBlock

        kwargs = {"system": system} if system else {}
        response = self.client.messages.create(
            model=model,
            messages=messages,
            temperature=self.TEMPERATURE,
            max_tokens=self.MAX_TOKENS,
            **kwargs,
        )
        text_blocks = [block.text for block in response.content if isinstance(block, TextBlock)]
        return "".join(text_blocks).strip()
