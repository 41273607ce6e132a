"""Prompt Templates Package"""

from sage.prompts.builder import (
    CommitStyle,
    PromptContext,
    STYLE_NAMES,
    STYLE_INSTRUCTIONS,
    OPENAI_SYSTEM_PROMPT,
    get_style_instructions,
    build_commit_prompt,
    build_branch_prompt,
)

__all__ = [
    "CommitStyle",
    "PromptContext",
    "STYLE_NAMES",
    "STYLE_INSTRUCTIONS",
    "OPENAI_SYSTEM_PROMPT",
    "get_style_instructions",
    "build_commit_prompt",
    "build_branch_prompt",
]
