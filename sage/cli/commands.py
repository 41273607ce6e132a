"""CLI Commands"""

import os
import sys

from sage import APP_NAME
from sage.config import Config, load_config, save_config
from sage.git import GitAnalyzer, InputError
from sage.output import bold, dim, print_success, print_warning
from sage.cli.utils import show_changes

TRUE_VALUES = ("true", "yes", "on", "1")
FALSE_VALUES = ("false", "no", "off", "0")


def _parse_preference(assignment: str) -> tuple[str, bool]:
    """Parse 'key=bool'. Dashes in the key are accepted ('auto-push')."""
    key, sep, raw = assignment.partition('=')
    value = raw.strip().lower()
    if not sep or value not in TRUE_VALUES + FALSE_VALUES:
        raise InputError(f"Invalid preference '{assignment}'. Use KEY=true or KEY=false")
    return key.strip().replace('-', '_'), value in TRUE_VALUES


def _apply_config_args(args, config: Config) -> list[str]:
    """Apply 'sage config' flags to config; return what changed."""
    changes = []

    if args.provider:
        config.set_provider(args.provider, args.key, args.model)
        changes.append(f"Provider set to: {args.provider}" + (" with new API key" if args.key else ""))
    elif args.update_key:
        if not args.key:
            raise InputError("API key required with --update-key")
        config.update_key(args.update_key, args.key)
        changes.append(f"API key updated for provider: {args.update_key}")
    else:
        if args.key:
            config.update_key(config.active_provider, args.key)
            changes.append(f"API key updated for active provider: {config.active_provider}")
        if args.model:
            config.set_provider(config.active_provider, model=args.model)
            changes.append(f"Model updated for provider: {config.active_provider}")

    if args.max_tokens is not None:
        config.set_max_tokens(args.max_tokens)
        changes.append(f"Max tokens set to: {args.max_tokens}")

    if args.style:
        config.set_default_style(args.style)
        changes.append(f"Default style set to: {config.default_style}")

    if args.set_pref:
        key, value = _parse_preference(args.set_pref)
        config.set_preference(key, value)
        changes.append(f"Preference {key} set to: {'enabled' if value else 'disabled'}")

    return changes


def handle_config_command(args) -> int:
    config = load_config()

    if args.show:
        print("\n".join(config.describe()))
        return 0

    changes = _apply_config_args(args, config)
    if not changes:
        print("\n".join(config.describe()))
        return 0

    for change in changes:
        print_success(change)
    path = save_config(config)
    print_success(f"Configuration saved to {path}")
    return 0


def use_provider(provider: str) -> int:
    config = load_config()
    config.use_provider(provider)
    save_config(config)
    print_success(f"Switched to provider: {provider}")
    return 0


def show_diff_command(files: list[str], all_changes: bool) -> int:
    git = GitAnalyzer()
    git.stage_files(files)

    diff = git.get_diff(all_changes)
    files_changed = git.get_files_changed(all_changes)

    if not diff.strip():
        print_warning("No changes to display.")
        return 0

    show_changes(diff, files_changed)
    return 0


def run_completion(shell: str | None = None) -> int:
    """Show shell tab completion setup."""
    if shell is None:
        env_shell = os.environ.get('SHELL', '')
        if 'zsh' in env_shell:
            shell = 'zsh'
        elif 'bash' in env_shell:
            shell = 'bash'
        elif 'fish' in env_shell:
            shell = 'fish'
        elif sys.platform == 'win32':
            shell = 'powershell'

    print(f"\n{bold('Tab Completion Setup')}\n")

    if shell in ('zsh', 'bash'):
        rc_file = os.path.expanduser(f'~/.{shell}rc')
        print(f"Add this line to {dim(rc_file)}:\n")
        print(f'  eval "$(register-python-argcomplete {APP_NAME})"\n')
        print(f"Then run: {dim(f'source ~/.{shell}rc')}")
    elif shell == 'fish':
        print("Run:\n")
        print(f"  register-python-argcomplete --shell fish {APP_NAME} | source")
    elif shell == 'powershell':
        print("For PowerShell, run:\n")
        print(f"  register-python-argcomplete --shell powershell {APP_NAME} | Out-String | Invoke-Expression\n")
        print("To make it permanent, add the same line to your $PROFILE")
    else:
        print("Run one of these based on your shell:\n")
        print(f"  {dim('# Bash/Zsh')}")
        print(f'  eval "$(register-python-argcomplete {APP_NAME})"\n')
        print(f"  {dim('# PowerShell')}")
        print(f"  register-python-argcomplete --shell powershell {APP_NAME} | Out-String | Invoke-Expression\n")
        print(f"  {dim('# Fish')}")
        print(f"  register-python-argcomplete --shell fish {APP_NAME} | source")

    print(f"\n{dim('After setup, press TAB to autocomplete flags.')}")
    return 0

