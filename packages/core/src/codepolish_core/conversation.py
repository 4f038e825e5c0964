"""Caller-owned chat transcripts.

The chat component keeps no session state: callers pass the full transcript
on every ask() and append the new exchange themselves.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from codepolish_core.errors import ValidationError

logger = logging.getLogger(__name__)

USER = "user"
MODEL = "model"
ROLES = (USER, MODEL)

# Older turns beyond this are dropped before replay; shorter transcripts are
# always replayed verbatim.
MAX_TRANSCRIPT_MESSAGES = 50

FALLBACK_ANSWER = "I'm sorry, I couldn't generate a response."


@dataclass(frozen=True)
class ChatMessage:
    role: str
    text: str

    @classmethod
    def from_dict(cls, d: dict) -> ChatMessage:
        """Accept ``{"role", "text"}`` or the SDK shape ``{"role", "parts": [{"text"}]}``."""
        if not isinstance(d, dict):
            raise ValidationError("each message must be an object with 'role' and 'text' or 'parts'")
        role = d.get("role")
        if role not in ROLES:
            raise ValidationError(f"Unknown message role {role!r}. Expected 'user' or 'model'.")
        if "text" in d:
            text = d["text"]
        else:
            text = "".join(_part_text(p) for p in _parts(d))
        if not isinstance(text, str):
            raise ValidationError("message text must be a string")
        return cls(role=role, text=text)

    def to_dict(self) -> dict:
        return {"role": self.role, "text": self.text}


def _parts(d: dict) -> list:
    parts = d.get("parts") or []
    if not isinstance(parts, list):
        raise ValidationError("message parts must be a list")
    return parts


def _part_text(part) -> str:
    if not isinstance(part, dict):
        raise ValidationError("each message part must be an object with 'text'")
    text = part.get("text", "")
    if not isinstance(text, str):
        raise ValidationError("message part text must be a string")
    return text


def prepare_transcript(prior_messages: Iterable[ChatMessage | dict]) -> list[ChatMessage]:
    """Normalize a caller transcript, keeping order and the newest turns."""
    messages = [m if isinstance(m, ChatMessage) else ChatMessage.from_dict(m) for m in prior_messages]
    for m in messages:
        if m.role not in ROLES:
            raise ValidationError(f"Unknown message role {m.role!r}. Expected 'user' or 'model'.")
    if len(messages) > MAX_TRANSCRIPT_MESSAGES:
        logger.debug("Trimming transcript from %d to %d messages", len(messages), MAX_TRANSCRIPT_MESSAGES)
        messages = messages[-MAX_TRANSCRIPT_MESSAGES:]
    return messages


def append_exchange(transcript: list[ChatMessage], question: str, answer: str) -> list[ChatMessage]:
    """Return a new transcript with one user/model exchange appended."""
    return [*transcript, ChatMessage(USER, question), ChatMessage(MODEL, answer)]
