"""Structured review and refactor results, and the output schemas requested from providers.

Provider output is never trusted: the parse_* functions validate the raw
text against the result model and raise MalformedResponseError on any mismatch,
so callers only ever see a fully-populated result.
"""

from __future__ import annotations

import logging
import re
from typing import Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from codepolish_core.errors import EmptyResponseError, MalformedResponseError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class _CamelModel(BaseModel):
    # Wire format is camelCase; Python attributes stay snake_case.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CodeIssue(_CamelModel):
    type: str
    severity: str
    line: Optional[int] = None
    description: str
    suggestion: str


class DetailedScores(_CamelModel):
    quality: float = Field(ge=0, le=10)
    readability: float = Field(ge=0, le=10)
    optimization: float = Field(ge=0, le=10)
    security: float = Field(ge=0, le=10)
    technical_debt: float = Field(ge=0, le=10)
    style_consistency: float = Field(ge=0, le=10)


class ComplexityAnalysis(_CamelModel):
    time: str
    space: str
    cyclomatic: int = Field(ge=0)


class ReviewResult(_CamelModel):
    detected_language: str
    issues: list[CodeIssue]
    optimized_code: str
    explanation: str
    documentation: str
    overall_score: float = Field(ge=0)
    detailed_scores: DetailedScores
    complexity: ComplexityAnalysis

    def to_wire(self) -> dict:
        """JSON-ready dict with camelCase keys, as the UI consumes it."""
        return self.model_dump(by_alias=True)


class ModifiedFile(_CamelModel):
    name: str
    content: str


class RefactorResult(_CamelModel):
    explanation: str
    dependency_graph: str
    modified_files: list[ModifiedFile]

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


_STRING = {"type": "STRING"}
_NUMBER = {"type": "NUMBER"}

# OpenAPI-subset schema understood by Gemini's response_schema. Providers
# without native schema support get it embedded in the prompt instead.
RESPONSE_SCHEMA: dict = {
    "type": "OBJECT",
    "properties": {
        "detectedLanguage": {
            "type": "STRING",
            "description": "The programming language of the code (e.g., javascript, python, java, c, cpp, css)",
        },
        "issues": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "type": _STRING,
                    "severity": _STRING,
                    "line": _NUMBER,
                    "description": _STRING,
                    "suggestion": _STRING,
                },
                "required": ["type", "severity", "description", "suggestion"],
            },
        },
        "optimizedCode": _STRING,
        "explanation": _STRING,
        "documentation": _STRING,
        "overallScore": _NUMBER,
        "detailedScores": {
            "type": "OBJECT",
            "properties": {
                "quality": _NUMBER,
                "readability": _NUMBER,
                "optimization": _NUMBER,
                "security": _NUMBER,
                "technicalDebt": _NUMBER,
                "styleConsistency": _NUMBER,
            },
            "required": ["quality", "readability", "optimization", "security", "technicalDebt", "styleConsistency"],
        },
        "complexity": {
            "type": "OBJECT",
            "properties": {"time": _STRING, "space": _STRING, "cyclomatic": _NUMBER},
            "required": ["time", "space", "cyclomatic"],
        },
    },
    "required": [
        "detectedLanguage",
        "issues",
        "optimizedCode",
        "explanation",
        "documentation",
        "overallScore",
        "detailedScores",
        "complexity",
    ],
}


# Cross-file refactor output: only files that were changed or created.
REFACTOR_SCHEMA: dict = {
    "type": "OBJECT",
    "properties": {
        "explanation": _STRING,
        "dependencyGraph": {
            "type": "STRING",
            "description": "Markdown (bulleted list or mermaid) dependency graph between the files",
        },
        "modifiedFiles": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {"name": _STRING, "content": _STRING},
                "required": ["name", "content"],
            },
        },
    },
    "required": ["explanation", "dependencyGraph", "modifiedFiles"],
}


def strip_json_fence(raw: str) -> str:
    """Strip only the outer ```json ... ``` fence, not backticks inside values."""
    cleaned = re.sub(r"^```(?:json)?\s*", "", raw.strip(), flags=re.IGNORECASE)
    return re.sub(r"\s*```$", "", cleaned.strip())


def _parse(model: type[T], raw: str | None) -> T:
    if raw is None or not raw.strip():
        raise EmptyResponseError("The AI model returned an empty response. Please try again.")
    try:
        return model.model_validate_json(strip_json_fence(raw))
    except PydanticValidationError as e:
        logger.warning(
            "Response did not match the %s schema (%d errors): %s", model.__name__, e.error_count(), raw[:200]
        )
        raise MalformedResponseError(
            "Failed to process the AI's response. The generated content was not in the expected format."
        ) from e


def parse_review_result(raw: str | None) -> ReviewResult:
    """Validate a provider's raw text response into a ReviewResult."""
    return _parse(ReviewResult, raw)


def parse_refactor_result(raw: str | None) -> RefactorResult:
    """Validate a provider's raw text response into a RefactorResult."""
    return _parse(RefactorResult, raw)
