"""Tests for prompt construction and the option tables."""

import pytest

from codepolish_core.errors import ValidationError
from codepolish_core.options import MODE_INSTRUCTIONS, STYLE_INSTRUCTIONS, instruction_for
from codepolish_core.prompts import (
    build_chat_instruction,
    build_refactor_prompt,
    build_review_prompt,
    build_schema_instructions,
)
from codepolish_core.request import RefactorRequest, ReviewRequest, SourceFile
from codepolish_core.schema import REFACTOR_SCHEMA


class TestOptionTables:
    def test_tables_are_read_only(self):
        with pytest.raises(TypeError):
            MODE_INSTRUCTIONS["student"] = "changed"  # type: ignore[index]

    def test_interview_mode_mentions_complexity(self):
        assert "time/space complexity" in instruction_for("mode", "interview")

    def test_unknown_value_raises_validation_error(self):
        with pytest.raises(ValidationError, match="mode"):
            instruction_for("mode", "expert")

    def test_every_style_is_documented(self):
        assert set(STYLE_INSTRUCTIONS) == {"default", "functional", "recursive", "flat"}


class TestReviewRequest:
    def test_defaults(self):
        request = ReviewRequest(code="x = 1")
        assert request.is_auto
        assert request.mode == "industry"
        assert request.style == "default"
        assert request.verbosity == "normal"
        assert request.tone == "professional"
        assert not request.is_conversion

    @pytest.mark.parametrize(
        "language, target, expected",
        [
            ("python", None, False),
            ("python", "none", False),
            ("python", "python", False),
            ("python", "rust", True),
            ("auto", "go", True),
        ],
    )
    def test_is_conversion(self, language, target, expected):
        assert ReviewRequest(code="x", language=language, target_language=target).is_conversion is expected

    @pytest.mark.parametrize("code", ["", "   "])
    def test_empty_code_rejected(self, code):
        with pytest.raises(ValidationError):
            ReviewRequest(code=code).validate()

    def test_unknown_tone_rejected(self):
        with pytest.raises(ValidationError, match="tone"):
            ReviewRequest(code="x", tone="sarcastic").validate()


class TestBuildReviewPrompt:
    def test_contains_code_block(self):
        prompt = build_review_prompt(ReviewRequest(code="print('hi')"))
        assert "```\nprint('hi')\n```" in prompt

    def test_auto_language_asks_for_detection(self):
        prompt = build_review_prompt(ReviewRequest(code="x"))
        assert "detect the programming language" in prompt
        assert "Source Language" not in prompt

    def test_explicit_language(self):
        prompt = build_review_prompt(ReviewRequest(code="x", language="java"))
        assert "Source Language: java" in prompt
        assert "detect the programming language" not in prompt

    def test_conversion_instruction(self):
        prompt = build_review_prompt(ReviewRequest(code="x", language="python", target_language="rust"))
        assert "TARGET LANGUAGE FOR CONVERSION: rust" in prompt
        assert "documentation (Docstrings/README format) for the rust code" in prompt

    def test_no_conversion_when_target_matches_source(self):
        prompt = build_review_prompt(ReviewRequest(code="x", language="python", target_language="python"))
        assert "TARGET LANGUAGE" not in prompt

    def test_option_instructions_interpolated(self):
        prompt = build_review_prompt(
            ReviewRequest(code="x", mode="student", style="flat", verbosity="concise", tone="casual")
        )
        assert "Mode: STUDENT - " + MODE_INSTRUCTIONS["student"] in prompt
        assert "Implementation Style: FLAT" in prompt
        assert "Verbosity: CONCISE - Keep explanations short" in prompt
        assert "Tone: CASUAL - Use a friendly" in prompt

    def test_error_log_block(self):
        prompt = build_review_prompt(ReviewRequest(code="x", error_log="ZeroDivisionError: division by zero"))
        assert "ERROR/BUG LOG:\nZeroDivisionError: division by zero" in prompt
        assert "No error log provided" not in prompt

    def test_missing_error_log_asks_for_inference(self):
        prompt = build_review_prompt(ReviewRequest(code="x"))
        assert "No error log provided" in prompt

    def test_house_style_block(self):
        prompt = build_review_prompt(ReviewRequest(code="x", house_style="Use tabs."))
        assert "HOUSE STYLE GUIDELINES:\nUse tabs." in prompt

    def test_tasks_are_numbered_without_gaps(self):
        prompt = build_review_prompt(ReviewRequest(code="x", language="python"))
        assert "1. Identify bugs" in prompt
        assert "6. Provide detailed scores" in prompt

    def test_schema_instructions_list_required_fields(self):
        block = build_schema_instructions()
        assert "optimizedCode" in block
        assert "complexity" in block


class TestBuildChatInstruction:
    def test_embeds_code(self):
        assert "def f(): pass" in build_chat_instruction("def f(): pass")

    def test_error_log_optional(self):
        assert "ERROR/BUG LOG" not in build_chat_instruction("x")
        assert "ERROR/BUG LOG:\nTraceback" in build_chat_instruction("x", error_log="Traceback")


class TestRefactorRequest:
    def test_defaults_to_larger_model(self):
        request = RefactorRequest(intent="x", files=(SourceFile("a.py", ""),))
        assert request.model == "gemini-3.1-pro-preview"

    @pytest.mark.parametrize("intent", ["", "   "])
    def test_empty_intent_rejected(self, intent):
        with pytest.raises(ValidationError, match="intent"):
            RefactorRequest(intent=intent, files=(SourceFile("a.py", "x"),)).validate()

    def test_no_files_rejected(self):
        with pytest.raises(ValidationError, match="file"):
            RefactorRequest(intent="x", files=()).validate()

    def test_duplicate_names_rejected(self):
        files = (SourceFile("a.py", "x"), SourceFile("a.py", "y"))
        with pytest.raises(ValidationError, match="duplicate"):
            RefactorRequest(intent="x", files=files).validate()

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            RefactorRequest(intent="x", files=(SourceFile(" ", "x"),)).validate()


class TestBuildRefactorPrompt:
    def test_intent_and_every_file_included_in_order(self):
        request = RefactorRequest(
            intent="rename total", files=(SourceFile("b.py", "total = 1"), SourceFile("a.py", "print(total)"))
        )
        prompt = build_refactor_prompt(request)

        assert 'USER INTENT: "rename total"' in prompt
        assert "--- FILE: b.py ---\n```\ntotal = 1\n```" in prompt
        assert prompt.index("--- FILE: b.py ---") < prompt.index("--- FILE: a.py ---")

    def test_asks_for_every_result_field(self):
        prompt = build_refactor_prompt(RefactorRequest(intent="x", files=(SourceFile("a.py", ""),)))
        for field in ("explanation", "dependencyGraph", "modifiedFiles"):
            assert f"`{field}`" in prompt

    def test_schema_instructions_for_refactor(self):
        block = build_schema_instructions(REFACTOR_SCHEMA)
        assert "modifiedFiles" in block
        assert "optimizedCode" not in block
