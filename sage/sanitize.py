"""Output Sanitizers - Strip markdown decoration from generated text.

Applied to provider output and to anything the user edits by hand, so a
commit message or branch name always reaches git as plain text.
"""

import re

# Passes run in this order; later passes never reintroduce earlier patterns
_FENCED_BLOCK_RE = re.compile(r'^```\w*\s*([\s\S]*?)\s*```$')
_BOLD_RE = re.compile(r'\*\*([^*]+)\*\*|__([^_]+)__')
_ITALIC_ASTERISK_RE = re.compile(r'\*([^*]+)\*')
_ITALIC_UNDERSCORE_RE = re.compile(r'_([^_]+)_')
_INLINE_CODE_RE = re.compile(r'`([^`]+)`')
_STRAY_MARKERS_RE = re.compile(r'[*_`]')
_WHITESPACE_RE = re.compile(r'\s+')

_BRANCH_SEPARATORS_RE = re.compile(r'[ _]')
_BRANCH_INVALID_RE = re.compile(r'[^A-Za-z0-9/-]')
_REPEATED_HYPHENS_RE = re.compile(r'-{2,}')


def sanitize_commit_message(message: str) -> str:
    """Reduce generated text to a single plain-text line."""
    result = message.strip()

    fenced = _FENCED_BLOCK_RE.match(result)
    if fenced:
        result = fenced.group(1).strip()

    result = _BOLD_RE.sub(lambda m: m.group(1) if m.group(1) is not None else m.group(2), result)
    result = _ITALIC_ASTERISK_RE.sub(r'\1', result)
    result = _ITALIC_UNDERSCORE_RE.sub(r'\1', result)
    result = _INLINE_CODE_RE.sub(r'\1', result)
    result = _STRAY_MARKERS_RE.sub('', result)
    result = _WHITESPACE_RE.sub(' ', result)

    return result.strip()


def sanitize_branch_name(name: str) -> str:
    """Reduce text to a git-safe branch name: lowercase, hyphens, slashes."""
    result = name.strip()
    result = _BRANCH_SEPARATORS_RE.sub('-', result)
    result = _BRANCH_INVALID_RE.sub('', result)
    result = result.lower()
    result = _REPEATED_HYPHENS_RE.sub('-', result)
    return result.strip('-')
