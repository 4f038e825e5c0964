"""Request bodies accepted by the HTTP API (camelCase on the wire)."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from codepolish_core.request import (
    AUTO_LANGUAGE,
    DEFAULT_MODEL,
    REFACTOR_MODEL,
    RefactorRequest,
    ReviewRequest,
    SourceFile,
)


class _Body(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ComplexityIn(_Body):
    time: Optional[str] = None
    space: Optional[str] = None
    cyclomatic: Optional[Any] = None


class HistoryIn(_Body):
    # Left optional so a missing field reaches the store's own validation and
    # is answered with 400 {"error"} rather than FastAPI's 422.
    original_code: Optional[Any] = None
    improved_code: Optional[Any] = None
    language: Optional[str] = None
    complexity: Optional[ComplexityIn] = None


class ReviewIn(_Body):
    code: str
    language: str = AUTO_LANGUAGE
    mode: str = "industry"
    target_language: Optional[str] = None
    style: str = "default"
    model: str = DEFAULT_MODEL
    error_log: str = ""
    house_style: str = ""
    verbosity: str = "normal"
    tone: str = "professional"

    def to_request(self, default_house_style: str = "") -> ReviewRequest:
        return ReviewRequest(
            code=self.code,
            language=self.language,
            mode=self.mode,
            target_language=self.target_language,
            style=self.style,
            model=self.model,
            error_log=self.error_log,
            house_style=self.house_style or default_house_style,
            verbosity=self.verbosity,
            tone=self.tone,
        )


class MessagePartIn(_Body):
    text: str = ""


class MessageIn(_Body):
    # Either ``text`` or the SDK-shaped ``parts``; the role is checked by
    # ChatMessage.from_dict so both surfaces report the same message.
    role: str
    text: Optional[str] = None
    parts: Optional[list[MessagePartIn]] = None

    def to_dict(self) -> dict:
        return self.model_dump(exclude_none=True)


class ChatIn(_Body):
    code: str = ""
    question: str
    history: list[MessageIn] = []
    model: Optional[str] = None
    error_log: str = ""


class FileIn(_Body):
    name: str
    content: str


class RefactorIn(_Body):
    intent: str
    files: list[FileIn]
    model: str = REFACTOR_MODEL

    def to_request(self) -> RefactorRequest:
        return RefactorRequest(
            intent=self.intent,
            files=tuple(SourceFile(name=f.name, content=f.content) for f in self.files),
            model=self.model,
        )
