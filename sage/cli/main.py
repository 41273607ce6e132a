"""CLI Main Entry Point"""

import os
import time

from sage.config import Config, ConfigError, load_config
from sage.generator import GenerationContext, generate_branch_name, generate_commit_message
from sage.git import GitAnalyzer, GitError, InputError
from sage.llm import AiResponse, LLMError
from sage.prompts import CommitStyle
from sage.output import dim, highlight, print_error, print_info, print_success, print_warning, Spinner

from sage.cli.args import parse_args
from sage.cli.commands import handle_config_command, use_provider, show_diff_command, run_completion
from sage.cli.utils import show_changes, display_message, confirm_commit, confirm_branch_name


def _apply_env_overrides(config: Config) -> Config:
    """Environment variables override the config file (CLI > env > file)."""
    env_provider = os.environ.get('SAGE_PROVIDER')
    env_model = os.environ.get('SAGE_MODEL')
    if env_provider:
        config.active_provider = env_provider
    if env_model and config.active_provider in config.providers:
        config.providers[config.active_provider].model = env_model
    return config


def _load_generation_context() -> GenerationContext:
    return GenerationContext.from_config(_apply_env_overrides(load_config()))


def _print_usage(response: AiResponse) -> None:
    usage = response.usage
    print(highlight(f"\nTokens: {usage.input_tokens} in / {usage.output_tokens} out / {usage.total_tokens} total"))


def _stage(git: GitAnalyzer, files: list[str], stage_all: bool, verbose: bool) -> None:
    if stage_all:
        if verbose:
            print_info("Staging all changes...")
        git.stage_all_files()
    elif files:
        if verbose:
            print_info(f"Staging specified files: {', '.join(files)}...")
        git.stage_files(files)


def _commit_and_push(git: GitAnalyzer, message: str, args, push: bool) -> None:
    git.commit_changes(message, args.amend)
    print_success("Changes committed successfully!")
    if push:
        print_info("Pushing changes...")
        git.push_changes(args.force_push)
        print_success("Changes pushed successfully!")


def run_commit_flow(args) -> int:
    config = load_config()
    prefs = config.preferences
    verbose = args.verbose or bool(prefs.verbose)
    push = args.push or bool(prefs.auto_push)

    git = GitAnalyzer()
    _stage(git, args.files, args.all or bool(prefs.auto_stage_all), verbose)

    if not git.has_staged_changes():
        raise GitError(
            "No staged changes found\n\n"
            "Tip: Stage files with 'sage <files>' or use 'sage --all' to stage all changes"
        )

    if args.message:
        if args.dry_run:
            print_info("Would commit with message:")
            print(args.message)
        else:
            _commit_and_push(git, args.message, args, push)
        return 0

    if verbose:
        print_info("Analyzing git repository changes...")

    start = time.time()
    diff = git.get_diff()
    files_changed = git.get_files_changed()

    if not diff.strip():
        raise GitError("No changes detected\n\nTip: Make some changes to your files before committing")

    if args.show_diff or prefs.show_diff:
        show_changes(diff, files_changed)

    ctx = _load_generation_context()
    style = CommitStyle.parse(args.style)

    with Spinner("Generating commit message using AI..."):
        response = generate_commit_message(ctx, diff, files_changed, style=style, context=args.context or "")

    if verbose:
        print_info(f"Generation took {time.time() - start:.2f}s")

    display_message("Generated commit message:", response.message)
    if verbose:
        _print_usage(response)

    if args.dry_run:
        print_warning("\nDry run - changes were not committed.")
        return 0

    if args.yes or prefs.skip_confirmation:
        should_commit, message = True, response.message
    else:
        should_commit, message = confirm_commit(response.message)

    if should_commit:
        _commit_and_push(git, message, args, push)
    else:
        print_warning("Commit aborted.")
    return 0


def run_branch_flow(args) -> int:
    config = load_config()
    prefs = config.preferences
    verbose = args.verbose or bool(prefs.verbose)

    git = GitAnalyzer()
    if verbose:
        print_info(f"Current branch: {git.get_current_branch()}")

    _stage(git, args.files, args.all, verbose)

    if verbose:
        print_info("Analyzing changes...")

    diff = git.get_diff(all_changes=True)
    files_changed = git.get_files_changed(all_changes=True)

    if not diff.strip() and not files_changed.strip():
        raise GitError("No changes detected\n\nTip: Make some changes to your files before committing")

    ctx = _load_generation_context()

    with Spinner("Generating branch name using AI..."):
        response = generate_branch_name(ctx, diff, files_changed, context=args.context or "")

    display_message("Generated branch name:", response.message)
    if verbose:
        _print_usage(response)

    if args.yes or prefs.skip_confirmation:
        should_create, branch_name = True, response.message
    else:
        should_create, branch_name = confirm_branch_name(response.message)

    if not should_create:
        print_warning("Branch creation aborted.")
        return 0

    if not branch_name:
        raise InputError("Generated branch name is empty\n\nTip: Add context with -c or enter a name with 'e'")
    if git.branch_exists(branch_name):
        raise InputError(f"Branch '{branch_name}' already exists")

    git.create_and_checkout_branch(branch_name)
    print_success(f"Switched to new branch '{branch_name}'")
    return 0


def _dispatch(args) -> int:
    if args.command == 'config':
        return handle_config_command(args)
    if args.command == 'use':
        return use_provider(args.provider)
    if args.command == 'completion':
        return run_completion(args.shell)

    if not GitAnalyzer().is_git_repo():
        raise GitError("Not in a git repository")

    if args.command == 'diff':
        return show_diff_command(args.files, args.all)
    if args.command == 'branch':
        return run_branch_flow(args)
    return run_commit_flow(args)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    args = parse_args(argv)
    try:
        return _dispatch(args)
    except (LLMError, ConfigError, GitError, InputError) as e:
        print_error(str(e))
        return 1
    except KeyboardInterrupt:
        print(dim("\nCancelled."))
        return 130
