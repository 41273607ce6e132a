"""Diff Processor - Shrink large git diffs into an LLM-sized excerpt.

Sizes are UTF-8 byte counts, so a diff full of non-ASCII text is held to
the same limit as a plain ASCII one.
"""

MAX_DIFF_SIZE = 15000

FILE_MARKER = "diff --git"
HEADER_LINES = 5
LONG_CHUNK_LINES = 20
SAMPLE_LINES = 3
TRUNCATION_MARKER = "...[truncated]..."
HARD_CUT_SUFFIX = "... [truncated - diff too large]"


def byte_size(text: str) -> int:
    return len(text.encode('utf-8'))


class DiffCompressor:
    """Keeps each file's header plus a small body sample until half the size limit is used."""

    def __init__(self, max_size: int = MAX_DIFF_SIZE):
        self.max_size = max_size

    def compress(self, diff: str) -> str:
        """Return diff unchanged when it fits, else a representative excerpt."""
        if byte_size(diff) <= self.max_size:
            return diff

        chunks = diff.split(FILE_MARKER)[1:]
        if not chunks:
            return self._hard_cut(diff)

        parts = []
        size = 0
        for chunk in chunks:
            excerpt = self._excerpt(chunk)
            parts.append(excerpt)
            size += byte_size(excerpt)
            if size > self.max_size // 2:
                break

        if size >= self.max_size:
            return self._hard_cut(diff)
        return "".join(parts)

    def _excerpt(self, chunk: str) -> str:
        lines = _split_lines(chunk)
        out = [FILE_MARKER]
        for line in lines[:HEADER_LINES]:
            out.append(line + "\n")

        if len(lines) > LONG_CHUNK_LINES:
            out.append(TRUNCATION_MARKER + "\n")
            mid = len(lines) // 2
            for line in lines[mid:mid + SAMPLE_LINES]:
                out.append(line + "\n")

        return "".join(out)

    def _hard_cut(self, diff: str) -> str:
        # A character split by the byte offset is dropped, never half-kept
        head = diff.encode('utf-8')[:self.max_size // 2].decode('utf-8', errors='ignore')
        return head + HARD_CUT_SUFFIX


def _split_lines(chunk: str) -> list[str]:
    """Split like a line iterator: no phantom empty line after a trailing newline."""
    lines = chunk.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


_default = DiffCompressor()


def compress_diff(diff: str) -> str:
    return _default.compress(diff)
