"""
Prompt validation tests.

Run with:
    python -m pytest tests/test_validation.py -v
"""

import pytest

from services.generation.validation import MAX_PROMPT_LENGTH, strip_tags, validate_prompt


class TestValidatePrompt:
    """Test prompt validation and sanitization."""

    @pytest.mark.parametrize("prompt", ["a", "A cat surfing at sunset", "x" * MAX_PROMPT_LENGTH])
    def test_valid_prompts_pass_through(self, prompt):
        result = validate_prompt(prompt)

        assert result.valid
        assert result.error is None
        assert result.sanitized == prompt

    def test_surrounding_whitespace_is_trimmed(self):
        result = validate_prompt("   a foggy harbor  \n")

        assert result.valid
        assert result.sanitized == "a foggy harbor"

    def test_length_measured_after_trim(self):
        result = validate_prompt("  " + "y" * MAX_PROMPT_LENGTH + "  ")

        assert result.valid
        assert len(result.sanitized) == MAX_PROMPT_LENGTH

    @pytest.mark.parametrize("prompt", ["", " ", "   ", "\t\n "])
    def test_whitespace_only_is_empty(self, prompt):
        result = validate_prompt(prompt)

        assert not result.valid
        assert result.error == "Prompt cannot be empty"
        assert result.sanitized is None

    def test_empty_string_is_empty_not_missing(self):
        result = validate_prompt("")

        assert not result.valid
        assert result.error == "Prompt cannot be empty"

    @pytest.mark.parametrize("prompt", [None, 42, ["a prompt"], {"prompt": "x"}])
    def test_missing_or_non_string_is_required(self, prompt):
        result = validate_prompt(prompt)

        assert not result.valid
        assert result.error == "Prompt is required"

    def test_too_long_prompt_rejected(self):
        result = validate_prompt("z" * (MAX_PROMPT_LENGTH + 1))

        assert not result.valid
        assert result.error == "Prompt must be 240 characters or less"

    def test_script_tags_are_stripped(self):
        result = validate_prompt("<script>hi</script>world")

        assert result.valid
        assert result.sanitized == "hiworld"

    def test_tags_are_stripped_after_trimming(self):
        result = validate_prompt("  <b>bold</b> move ")

        assert result.sanitized == "bold move"


class TestStripTags:
    """Test tag stripping helper."""

    def test_nested_angle_content_removed(self):
        assert strip_tags('<img src="x" onerror="alert(1)">cat') == "cat"

    def test_unclosed_bracket_kept(self):
        assert strip_tags("a < b") == "a < b"

    def test_plain_text_unchanged(self):
        assert strip_tags("nothing to see") == "nothing to see"
