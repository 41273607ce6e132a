"""Prompt Builder - Construct LLM prompts for commit messages and branch names."""

import re
from dataclasses import dataclass
from enum import Enum


class CommitStyle(Enum):
    """Commit message style. Closed set; extend by adding a STYLE_INSTRUCTIONS entry."""
    STANDARD = "standard"
    DETAILED = "detailed"
    SHORT = "short"

    @classmethod
    def parse(cls, value: 'str | CommitStyle | None') -> 'CommitStyle | None':
        """Accept enum members, names from config files, or None."""
        if value is None or isinstance(value, cls):
            return value
        normalized = value.strip().lower()
        if normalized == "conventional":
            normalized = "standard"
        return cls(normalized)


STYLE_NAMES = [s.value for s in CommitStyle]

# System prompt for OpenAI (sets the AI's role and behavior)
OPENAI_SYSTEM_PROMPT = (
    "You are a helpful assistant that generates concise git commit messages "
    "and branch names. You MUST output PLAIN TEXT ONLY with NO markdown "
    "formatting whatsoever."
)

COMMIT_PROMPT_TEMPLATE = """Generate a concise and descriptive git commit message for the following changes.

IMPORTANT RULES:
- Follow the conventional commits format: type(scope): description
- Use PLAIN TEXT ONLY - no markdown formatting
- Do NOT use asterisks (**), underscores (__), backticks (`), or any other formatting
- Do NOT wrap the message in code blocks
- Output only the commit message text, nothing else
- Keep it concise and focused on WHAT changed and WHY

{style_instructions}

Additional context: {context}

Files changed:
{files_changed}

Diff:
{diff}"""

BRANCH_PROMPT_TEMPLATE = """Generate a concise and descriptive git branch name for the following changes.

IMPORTANT RULES:
- Use kebab-case format (lowercase with hyphens): feature/add-user-auth
- Start with a type prefix: feature/, bugfix/, hotfix/, refactor/, docs/, test/, chore/
- Keep it SHORT and descriptive (max 50 characters total)
- Use PLAIN TEXT ONLY - no markdown, asterisks, or special characters
- Only use letters, numbers, hyphens, and forward slashes
- Output ONLY the branch name, nothing else

Common patterns:
- feature/add-authentication
- bugfix/fix-login-error
- refactor/simplify-api-calls
- docs/update-readme

Additional context: {context}

Files changed:
{files_changed}

Diff:
{diff}"""

_STANDARD_INSTRUCTIONS = """\
Use standard conventional commits format: 'type(scope): description'
Common types: feat, fix, docs, style, refactor, test, chore"""

_DETAILED_INSTRUCTIONS = """\
Create a detailed multi-line commit message following Git convention:
- First line: Short summary in conventional commits format (max 50 chars)
- Second line: MUST be blank
- Following lines: Detailed explanation of what changed and why
- Use bullet points with '- ' for listing changes
- Wrap lines at 72 characters

Example format:
feat(auth): add JWT token validation

- Implement token verification middleware
- Add expiration checking
- Handle refresh token logic"""

_SHORT_INSTRUCTIONS = """\
Create an extremely concise one-line commit message.
Maximum 50 characters. Be direct and specific."""

STYLE_INSTRUCTIONS: dict[CommitStyle, str] = {
    CommitStyle.STANDARD: _STANDARD_INSTRUCTIONS,
    CommitStyle.DETAILED: _DETAILED_INSTRUCTIONS,
    CommitStyle.SHORT: _SHORT_INSTRUCTIONS,
}

NO_CONTEXT = "None"

_PLACEHOLDER_RE = re.compile(r'\{(\w+)\}')


def get_style_instructions(style: CommitStyle | None = None) -> str:
    """Instructions for a style; None means the standard style."""
    return STYLE_INSTRUCTIONS[style or CommitStyle.STANDARD]


def _fill(template: str, values: dict[str, str]) -> str:
    # Single pass, not str.format: diffs are full of braces and substituted
    # text is never rescanned for placeholders
    return _PLACEHOLDER_RE.sub(lambda m: values.get(m.group(1), m.group(0)), template)


def _context_text(context: str | None) -> str:
    return context if context else NO_CONTEXT


def build_commit_prompt(style: CommitStyle | None, context: str | None,
                        files_changed: str, diff: str) -> str:
    return _fill(COMMIT_PROMPT_TEMPLATE, {
        "style_instructions": get_style_instructions(style),
        "context": _context_text(context),
        "files_changed": files_changed,
        "diff": diff,
    })


def build_branch_prompt(context: str | None, files_changed: str, diff: str) -> str:
    return _fill(BRANCH_PROMPT_TEMPLATE, {
        "context": _context_text(context),
        "files_changed": files_changed,
        "diff": diff,
    })


@dataclass(frozen=True)
class PromptContext:
    """Everything a prompt is rendered from, fixed for one request."""
    files_changed: str
    diff: str
    context: str = ""
    style: CommitStyle | None = None

    def render_commit(self) -> str:
        return build_commit_prompt(self.style, self.context, self.files_changed, self.diff)

    def render_branch(self) -> str:
        return build_branch_prompt(self.context, self.files_changed, self.diff)
