"""CLI Utility Functions"""

import os
import subprocess
import sys
import tempfile

from sage.git import InputError
from sage.output import bold, dim, info, colorize_commit_type
from sage.sanitize import sanitize_branch_name, sanitize_commit_message

DIFF_DISPLAY_LIMIT = 2000


def show_changes(diff: str, files_changed: str) -> None:
    """Print the files summary and the start of the diff."""
    print(info(bold("Changes to be committed:")))
    print(files_changed)
    print(f"\n{info(bold('Diff:'))}")

    if not diff:
        print("(empty diff)")
        return
    print(diff[:DIFF_DISPLAY_LIMIT])
    if len(diff) > DIFF_DISPLAY_LIMIT:
        print(dim("... [truncated for display]"))


def display_message(title: str, message: str) -> None:
    print(f"\n{bold(title)}")
    print(colorize_commit_type(message))


def _ask(prompt: str) -> str | None:
    """Read one line; None when the user interrupts."""
    try:
        return input(prompt).strip()
    except (KeyboardInterrupt, EOFError):
        print()
        return None


def edit_message(message: str) -> str | None:
    """Open message in user's editor. Returns edited text or None on failure."""
    editor = os.environ.get('VISUAL') or os.environ.get('EDITOR')
    if not editor:
        editor = 'notepad' if sys.platform == 'win32' else 'vi'

    tmp = tempfile.NamedTemporaryFile(mode='w', suffix='.gitcommit', delete=False, encoding='utf-8')
    try:
        tmp.write(message)
        tmp.close()
        subprocess.run([editor, tmp.name], check=True)
        with open(tmp.name, 'r', encoding='utf-8') as f:
            return f.read().strip()
    except (subprocess.CalledProcessError, OSError):
        return None
    finally:
        try:
            os.unlink(tmp.name)
        except OSError as e:
            # Log to stderr so temp files don't silently accumulate
            print(f"Warning: Could not delete temp file {tmp.name}: {e}", file=sys.stderr)


def confirm_commit(message: str) -> tuple[bool, str]:
    """Ask to commit. Returns (should_commit, final_message)."""
    choice = _ask("\nCommit with this message? [Y/n/e for edit] ")
    if choice is None:
        return False, message
    choice = choice.lower()

    if choice == 'e':
        edited = edit_message(message)
        if edited is None:
            raise InputError(
                "Failed to open editor\n\n"
                "Tip: Set your EDITOR environment variable or use a different editor"
            )
        edited = sanitize_commit_message(edited)
        if not edited:
            return False, message
        return True, edited

    return choice in ('', 'y', 'yes'), message


def confirm_branch_name(branch_name: str) -> tuple[bool, str]:
    """Ask to create the branch. Returns (should_create, final_name)."""
    choice = _ask("\nCreate this branch? [Y/n/e for edit] ")
    if choice is None:
        return False, branch_name
    choice = choice.lower()

    if choice == 'e':
        edited = sanitize_branch_name(_ask("Enter branch name: ") or "")
        if not edited:
            return False, branch_name
        return True, edited

    return choice in ('', 'y', 'yes'), branch_name
