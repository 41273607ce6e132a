"""CLI Argument Parsing"""

import argparse
import sys

import argcomplete

from sage import APP_NAME, __version__
from sage.llm import Provider
from sage.prompts import STYLE_NAMES

SUBCOMMANDS = ("commit", "config", "use", "diff", "branch", "completion")
COMPLETION_SHELLS = ("bash", "zsh", "fish", "powershell")
PROVIDER_CHOICES = [p.value for p in Provider]


def _add_staging_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('files', nargs='*', metavar='FILES', help="File patterns to stage (e.g. '*.py', 'src/')")
    parser.add_argument('-a', '--all', action='store_true', help='Use all changes (staged + unstaged)')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description='AI-powered git commit message generator',
        epilog='Example: sage -c "fixing the login bug"'
    )
    parser.add_argument('-V', '--version', action='version', version=f'%(prog)s {__version__}')

    subparsers = parser.add_subparsers(dest='command', metavar='COMMAND')

    commit = subparsers.add_parser('commit', help='Generate a commit message and commit (default)')
    _add_staging_args(commit)
    commit.add_argument('-d', '--dry-run', action='store_true', help="Don't commit, just print the generated message")
    commit.add_argument('-m', '--message', type=str, metavar='MSG', help='Commit message to use (skips AI generation)')
    commit.add_argument('-c', '--context', type=str, metavar='TEXT', help='Extra context for the AI')
    commit.add_argument('-s', '--show-diff', action='store_true', help='Show the diff before generating')
    commit.add_argument('--amend', action='store_true', help='Amend the previous commit')
    commit.add_argument('-v', '--verbose', action='store_true', help='Show timings and token usage')
    commit.add_argument('-p', '--push', action='store_true', help='Push after committing')
    commit.add_argument('-f', '--force-push', action='store_true', help='Force push (with --push)')
    commit.add_argument('-y', '--yes', action='store_true', help='Skip confirmation prompt')
    commit.add_argument('-t', '--style', type=str, choices=STYLE_NAMES, help='Commit message style')

    config = subparsers.add_parser('config', help='Configure API settings')
    config.add_argument('-p', '--provider', type=str, choices=PROVIDER_CHOICES, help='Set (and activate) provider')
    config.add_argument('-k', '--key', type=str, metavar='KEY', help='Set API key')
    config.add_argument('--update-key', type=str, choices=PROVIDER_CHOICES, metavar='PROVIDER',
                        help='Update the API key of a specific provider (with --key)')
    config.add_argument('-m', '--model', type=str, metavar='MODEL', help='Set preferred model')
    config.add_argument('--max-tokens', type=int, metavar='N', help='Set maximum tokens for responses')
    config.add_argument('--style', type=str, choices=STYLE_NAMES + ['conventional'], help='Set default commit style')
    config.add_argument('--set', type=str, metavar='KEY=BOOL', dest='set_pref',
                        help='Set preference: auto_push, auto_stage_all, show_diff, skip_confirmation, verbose')
    config.add_argument('-s', '--show', action='store_true', help='Show current configuration')

    use = subparsers.add_parser('use', help='Switch between configured providers')
    use.add_argument('provider', choices=PROVIDER_CHOICES, help='Provider to switch to')

    diff = subparsers.add_parser('diff', help='Show git diff without committing')
    _add_staging_args(diff)

    branch = subparsers.add_parser('branch', help='Create and checkout a branch with an AI-generated name')
    _add_staging_args(branch)
    branch.add_argument('-c', '--context', type=str, metavar='TEXT', help='Extra context for the AI')
    branch.add_argument('-y', '--yes', action='store_true', help='Skip confirmation prompt')
    branch.add_argument('-v', '--verbose', action='store_true', help='Show token usage')

    completion = subparsers.add_parser('completion', help='Show shell tab completion setup')
    completion.add_argument('--shell', choices=COMPLETION_SHELLS, help='Shell to set up (default: $SHELL)')

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse argv; anything that is not a subcommand runs the commit flow."""
    parser = build_parser()
    argcomplete.autocomplete(parser)

    argv = list(sys.argv[1:] if argv is None else argv)

    if not argv or (argv[0] not in SUBCOMMANDS and argv[0] not in ('-h', '--help', '-V', '--version')):
        argv = ['commit', *argv]
    return parser.parse_args(argv)
