"""Prompt templates for the LLM word-validity oracle."""

from .system_prompt import SYSTEM_PROMPT, get_system_prompt
from .validity_prompt import build_validity_prompt

__all__ = [
    "SYSTEM_PROMPT",
    "get_system_prompt",
    "build_validity_prompt",
]
