"""Requests carried from the caller to a provider."""

from __future__ import annotations

from dataclasses import dataclass

from codepolish_core.errors import ValidationError
from codepolish_core.options import instruction_for

AUTO_LANGUAGE = "auto"
NO_TARGET = "none"
DEFAULT_MODEL = "gemini-3-flash-preview"
# Cross-file work defaults to the larger model.
REFACTOR_MODEL = "gemini-3.1-pro-preview"


@dataclass(frozen=True)
class ReviewRequest:
    """Everything a single review call needs. Only ``code`` is required."""

    code: str
    language: str = AUTO_LANGUAGE
    mode: str = "industry"
    target_language: str | None = None
    style: str = "default"
    model: str = DEFAULT_MODEL
    error_log: str = ""
    house_style: str = ""
    verbosity: str = "normal"
    tone: str = "professional"

    @property
    def is_auto(self) -> bool:
        return self.language == AUTO_LANGUAGE

    @property
    def is_conversion(self) -> bool:
        """True when the code must be converted to another language."""
        return bool(self.target_language) and self.target_language not in (NO_TARGET, self.language)

    def validate(self) -> None:
        """Raise ValidationError for empty code or an unknown option value."""
        if not isinstance(self.code, str) or not self.code.strip():
            raise ValidationError("code must be a non-empty string")
        for kind, value in (
            ("mode", self.mode),
            ("style", self.style),
            ("verbosity", self.verbosity),
            ("tone", self.tone),
        ):
            instruction_for(kind, value)


@dataclass(frozen=True)
class SourceFile:
    """One workspace file sent for a cross-file refactor."""

    name: str
    content: str


@dataclass(frozen=True)
class RefactorRequest:
    """A high-level intent applied across a set of workspace files."""

    intent: str
    files: tuple[SourceFile, ...]
    model: str = REFACTOR_MODEL

    def validate(self) -> None:
        if not isinstance(self.intent, str) or not self.intent.strip():
            raise ValidationError("intent must be a non-empty string")
        if not self.files:
            raise ValidationError("at least one file is required")
        seen = set()
        for f in self.files:
            if not isinstance(f.name, str) or not f.name.strip():
                raise ValidationError("every file needs a non-empty name")
            if not isinstance(f.content, str):
                raise ValidationError(f"content of {f.name} must be a string")
            if f.name in seen:
                raise ValidationError(f"duplicate file name {f.name!r}")
            seen.add(f.name)
