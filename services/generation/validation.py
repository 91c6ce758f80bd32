"""Prompt validation and sanitization."""

import re
from dataclasses import dataclass
from typing import Any, Optional

MAX_PROMPT_LENGTH = 240

_TAG_RE = re.compile(r"<[^>]*>")


@dataclass
class PromptValidation:
    valid: bool
    error: Optional[str] = None
    sanitized: Optional[str] = None


def strip_tags(text: str) -> str:
    """Remove every <...> bracketed substring."""
    return _TAG_RE.sub("", text)


def validate_prompt(prompt: Any) -> PromptValidation:
    """
    Validate and sanitize a user prompt.

    The length limit applies to the trimmed text before tags are stripped.
    """
    if not isinstance(prompt, str):
        return PromptValidation(valid=False, error="Prompt is required")

    trimmed = prompt.strip()

    if not trimmed:
        return PromptValidation(valid=False, error="Prompt cannot be empty")

    if len(trimmed) > MAX_PROMPT_LENGTH:
        return PromptValidation(
            valid=False,
            error=f"Prompt must be {MAX_PROMPT_LENGTH} characters or less",
        )

    return PromptValidation(valid=True, sanitized=strip_tags(trimmed))
