"""Fixed option tables that shape the review prompt.

Each table maps an enumerated option value to the instruction interpolated
into the prompt. The tables are read-only views built once at import time.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from codepolish_core.errors import ValidationError

MODE_INSTRUCTIONS: Mapping[str, str] = MappingProxyType(
    {
        "student": (
            "Focus on beginner-friendly explanations, explaining basic concepts, "
            "and simplifying logic for a 1st-year student."
        ),
        "interview": (
            "Focus on FAANG standards, competitive coding style, optimal time/space complexity, "
            "and edge case handling."
        ),
        "industry": (
            "Focus on production-ready code, clean architecture, scalability, robust error handling, "
            "and industry best practices."
        ),
    }
)

STYLE_INSTRUCTIONS: Mapping[str, str] = MappingProxyType(
    {
        "default": "Use the most idiomatic and effective implementation style for the target language.",
        "functional": (
            "Prioritize a functional programming style (e.g., pure functions, immutability, "
            "higher-order functions like map/filter/reduce)."
        ),
        "recursive": "Prioritize using recursion for any repetitive or iterative logic where appropriate.",
        "flat": (
            "Write the code in a flat, procedural style WITHOUT using any functions or recursions. "
            "Use simple loops and global/local variables directly in the main execution flow."
        ),
    }
)

VERBOSITY_INSTRUCTIONS: Mapping[str, str] = MappingProxyType(
    {
        "concise": "Keep explanations short and to the point.",
        "normal": "Provide standard, balanced explanations.",
        "detailed": "Provide in-depth explanations, covering all edge cases and reasoning.",
    }
)

TONE_INSTRUCTIONS: Mapping[str, str] = MappingProxyType(
    {
        "professional": "Maintain a formal, objective, and professional tone.",
        "casual": "Use a friendly, conversational tone.",
        "encouraging": "Be highly supportive, positive, and encouraging.",
    }
)

_TABLES: Mapping[str, Mapping[str, str]] = MappingProxyType(
    {
        "mode": MODE_INSTRUCTIONS,
        "style": STYLE_INSTRUCTIONS,
        "verbosity": VERBOSITY_INSTRUCTIONS,
        "tone": TONE_INSTRUCTIONS,
    }
)

REVIEW_MODES = tuple(MODE_INSTRUCTIONS)
STYLES = tuple(STYLE_INSTRUCTIONS)
VERBOSITY_LEVELS = tuple(VERBOSITY_INSTRUCTIONS)
TONES = tuple(TONE_INSTRUCTIONS)


def instruction_for(kind: str, value: str) -> str:
    """Return the instruction for ``value`` in the ``kind`` table.

    Raises ValidationError if the value is not one of the enumerated options.
    """
    table = _TABLES[kind]
    try:
        return table[value]
    except KeyError:
        raise ValidationError(f"Unknown {kind} {value!r}. Choose one of: {', '.join(table)}.") from None
