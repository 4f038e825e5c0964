"""Prompt text for review, refactor and chat calls.

Pure functions of their inputs: every provider sends exactly the same text,
so switching provider never changes what the model is asked to do.
"""

from __future__ import annotations

import json

from codepolish_core.options import instruction_for
from codepolish_core.request import RefactorRequest, ReviewRequest
from codepolish_core.schema import RESPONSE_SCHEMA

_PERSONA = (
    "You are a dual-stage AI Refinement Agent. Your goal is to process a code snippet AND its "
    "corresponding error/bug log to produce exactly two distinct sections: CORRECTION and OPTIMIZATION."
)


def _option_line(label: str, kind: str, value: str) -> str:
    return f"{label}: {value.upper()} - {instruction_for(kind, value)}"


def build_review_prompt(request: ReviewRequest) -> str:
    """Build the single prompt sent for a review call."""
    lines = [_PERSONA, "", "Review the following code."]

    if request.is_auto:
        lines.append("First, detect the programming language of the code.")
    else:
        lines.append(f"Source Language: {request.language}")

    if request.is_conversion:
        lines.append(
            f"TARGET LANGUAGE FOR CONVERSION: {request.target_language}. "
            f"You MUST convert the code to {request.target_language} while optimizing it."
        )

    lines += [
        _option_line("Mode", "mode", request.mode),
        _option_line("Implementation Style", "style", request.style),
        _option_line("Verbosity", "verbosity", request.verbosity),
        _option_line("Tone", "tone", request.tone),
        "",
    ]

    if request.error_log:
        lines += ["ERROR/BUG LOG:", request.error_log, ""]
    else:
        lines.append("No error log provided. Please infer potential errors from the code itself.")

    if request.house_style:
        lines += ["HOUSE STYLE GUIDELINES:", request.house_style, ""]
    else:
        lines.append("No specific house style provided. Follow general industry best practices.")

    lines += ["", "Tasks:"]
    lines += _numbered(_review_tasks(request))
    lines += ["", "Code to review:", "```", request.code, "```"]
    return "\n".join(lines)


def _review_tasks(request: ReviewRequest) -> list[str]:
    documented = request.target_language if request.is_conversion else "optimized"
    analysed = "converted" if request.is_conversion else "optimized"

    tasks = []
    if request.is_auto:
        tasks.append("Identify the source programming language and report it in `detectedLanguage`.")
    tasks += [
        "Identify bugs, performance issues, best-practice violations, and security vulnerabilities "
        "(e.g., SQL injection, XSS, hardcoded secrets) in the original code.",
        "Provide the best overall optimized/corrected code in the `optimizedCode` field. "
        "Ensure it strictly adheres to the HOUSE STYLE GUIDELINES if provided.",
        "In the `explanation` field, you MUST follow this exact structure:\n"
        "   - Phase 1: Mandatory Correction (P0)\n"
        '     - Provide a 1-sentence "Root Cause Analysis" explaining why it failed '
        "(based on the error log or obvious bugs).\n"
        '     - Provide a block titled "### 🛠️ CORRECTED CODE" containing a hotfix that solves the bug '
        "while changing as little of the original logic as possible.\n"
        "   - Phase 2: Triple Optimization (P1)\n"
        '     - Provide a block titled "### 🚀 OPTIMIZED VERSIONS" with exactly three variants:\n'
        "       1. **Option 1: Clean/Readable** (Focus on naming, comments, and simplicity).\n"
        "       2. **Option 2: High Performance** (Focus on time complexity and memory).\n"
        "       3. **Option 3: Modern Agentic** (Focus on current best practices like immutability "
        "or specific framework hooks).",
        f"Generate professional documentation (Docstrings/README format) for the {documented} code. "
        "**Use structured Markdown with clear sections.**",
        f"Analyze Time, Space, and Cyclomatic complexity of the {analysed} code.",
        "Provide detailed scores (0-10) for Quality, Readability, Optimization, Security, "
        "Technical Debt (10 = no debt, 0 = high debt), and Style Consistency.",
    ]
    return tasks


def _numbered(items: list[str]) -> list[str]:
    return [f"{i}. {item}" for i, item in enumerate(items, start=1)]


def build_schema_instructions(schema: dict = RESPONSE_SCHEMA) -> str:
    """Output-format block for providers that cannot enforce a response schema."""
    return (
        "### Output Format:\n"
        "Respond with **only** a single valid JSON object matching this schema "
        "(OpenAPI subset; every field listed in `required` must be present):\n\n"
        f"{json.dumps(schema, indent=2)}\n\n"
        "Do not return any text outside the JSON object."
    )


def build_chat_instruction(code: str, error_log: str = "") -> str:
    """System instruction for a follow-up conversation about ``code``."""
    parts = [
        _PERSONA,
        "",
        "Phase 1: Mandatory Correction (P0)",
        "1. First, analyze the provided error_log (if any) or the user's issue.",
        "2. Identify the single line or block causing the failure.",
        '3. Provide a block titled "### 🛠️ CORRECTED CODE" (hotfix, minimal changes).',
        '4. Provide a 1-sentence "Root Cause Analysis".',
        "",
        "Phase 2: Triple Optimization (P1)",
        'Only after providing the correction, generate "### 🚀 OPTIMIZED VERSIONS" with exactly three variants:',
        "1. Option 1: Clean/Readable",
        "2. Option 2: High Performance",
        "3. Option 3: Modern Agentic",
        "",
        "Guardrails:",
        "- NEVER skip the Correction phase.",
        "- If no error log is provided, ask for it before optimizing.",
        "",
    ]
    if error_log:
        parts += ["ERROR/BUG LOG:", error_log, ""]
    parts += ["CONTEXT CODE:", "```", code, "```"]
    return "\n".join(parts)


def build_refactor_prompt(request: RefactorRequest) -> str:
    """Prompt for a repository-wide refactor driven by ``request.intent``."""
    lines = [
        "You are a Repository-Wide Contextual Intelligence Agent.",
        "Your goal is to perform cross-file refactoring based on the user's high-level intent.",
        "",
        f'USER INTENT: "{request.intent}"',
        "",
        "WORKSPACE FILES:",
    ]
    for f in request.files:
        lines += [f"--- FILE: {f.name} ---", "```", f.content, "```", ""]
    lines.append("Tasks:")
    lines += _numbered(
        [
            "Analyze the relationships between the provided files and map their dependencies.",
            "Identify which files need to be modified to fulfill the user's intent.",
            "Perform the necessary cross-file refactoring, keeping types and names consistent across the project.",
            "Return a JSON object containing:\n"
            "   - `explanation`: how the changes propagate across the files.\n"
            "   - `dependencyGraph`: a Markdown bulleted list or mermaid diagram of the dependencies between files.\n"
            "   - `modifiedFiles`: the `name` and full new `content` of every file that was changed or created. "
            "Leave out files that were not changed.",
        ]
    )
    return "\n".join(lines)
