"""Git Operations Package"""

from sage.git.analyzer import GitAnalyzer, GitError, InputError, validate_file_path
from sage.git.diff_processor import DiffCompressor, compress_diff, MAX_DIFF_SIZE

__all__ = [
    "GitAnalyzer",
    "GitError",
    "InputError",
    "validate_file_path",
    "DiffCompressor",
    "compress_diff",
    "MAX_DIFF_SIZE",
]
