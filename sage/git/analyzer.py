"""Git Analyzer - Read changes from git and apply commits and branches."""

import subprocess
from pathlib import PurePath

# Characters that have no business in a path handed to git
SUSPICIOUS_PATH_CHARS = ("|", "&", ";", "`", "$", "(", ")", "<", ">", "\n", "\r")


class GitError(Exception):
    """Raised when git operations fail."""
    pass


class InputError(Exception):
    """Raised for user input that is rejected before reaching git."""
    pass


def validate_file_path(path: str) -> None:
    """Reject paths that could escape the repository or smuggle shell syntax."""
    if "\0" in path:
        raise InputError("File path contains null bytes")

    for char in SUSPICIOUS_PATH_CHARS:
        if char in path:
            raise InputError(f"File path contains suspicious character: {char!r}")

    pure = PurePath(path)
    if pure.is_absolute() or path.startswith(("/", "\\")):
        raise InputError("Absolute paths are not allowed. Use relative paths within the repository")
    if ".." in pure.parts:
        raise InputError("Parent directory (..) traversal is not allowed")


class GitAnalyzer:
    """Thin wrapper over the git CLI."""

    def _run_git(self, *args: str) -> str:
        """Run a git command and return stdout."""
        try:
            result = subprocess.run(
                ['git', *args],
                capture_output=True,
                text=True,
                check=True,
                encoding='utf-8',
                errors='replace'
            )
            return result.stdout
        except subprocess.CalledProcessError as e:
            raise GitError(f"Git command failed: git {' '.join(args)}\n{e.stderr}")
        except FileNotFoundError:
            raise GitError("Git is not installed or not in PATH")

    def is_git_repo(self) -> bool:
        try:
            return self._run_git('rev-parse', '--is-inside-work-tree').strip() == 'true'
        except GitError:
            return False

    def get_diff(self, all_changes: bool = False) -> str:
        """Staged diff, or the working-tree diff when all_changes is set."""
        if all_changes:
            return self._run_git('diff')
        return self._run_git('diff', '--cached')

    def get_files_changed(self, all_changes: bool = False) -> str:
        """Human-readable summary of changed files."""
        if all_changes:
            return self._run_git('status', '--porcelain')
        return self._run_git('diff', '--cached', '--name-status')

    def stage_files(self, files: list[str]) -> None:
        if not files:
            return
        for path in files:
            validate_file_path(path)
        self._run_git('add', '--', *files)

    def stage_all_files(self) -> None:
        self._run_git('add', '--all')

    def has_staged_changes(self) -> bool:
        return bool(self._run_git('diff', '--cached', '--name-only').strip())

    def commit_changes(self, message: str, amend: bool = False) -> None:
        args = ['commit', '-m', message]
        if amend:
            args.append('--amend')
        self._run_git(*args)

    def push_changes(self, force: bool = False) -> None:
        args = ['push']
        if force:
            args.append('--force')
        self._run_git(*args)

    def get_current_branch(self) -> str:
        return self._run_git('rev-parse', '--abbrev-ref', 'HEAD').strip()

    def branch_exists(self, branch_name: str) -> bool:
        try:
            self._run_git('rev-parse', '--verify', '--quiet', f'refs/heads/{branch_name}')
            return True
        except GitError:
            return False

    def create_and_checkout_branch(self, branch_name: str) -> None:
        self._run_git('checkout', '-b', branch_name)
