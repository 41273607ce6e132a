"""Configuration Management Package"""

import json
import sys
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional

from sage.llm.base import ProviderCredentials
from sage.prompts import STYLE_NAMES

DEFAULT_PROVIDER = "openai"
DEFAULT_MAX_TOKENS = 300
PREFERENCE_KEYS = ("auto_push", "auto_stage_all", "show_diff", "skip_confirmation", "verbose")


class ConfigError(Exception):
    """Raised when configuration is missing, incomplete, or unreadable."""
    pass


@dataclass
class ProviderConfig:
    """Credentials for one provider. The key is never shown."""
    api_key: str = ""
    model: Optional[str] = None

    def credentials(self) -> ProviderCredentials:
        return ProviderCredentials(api_key=self.api_key, model=self.model)

    def __repr__(self) -> str:
        masked = "***" if self.api_key else ""
        return f"ProviderConfig(api_key={masked!r}, model={self.model!r})"


@dataclass
class Preferences:
    """Defaults for CLI flags the user did not pass. None means unset."""
    auto_push: Optional[bool] = None
    auto_stage_all: Optional[bool] = None
    show_diff: Optional[bool] = None
    skip_confirmation: Optional[bool] = None
    verbose: Optional[bool] = None


def _default_providers() -> dict[str, ProviderConfig]:
    return {DEFAULT_PROVIDER: ProviderConfig()}


@dataclass
class Config:
    """User configuration with sensible defaults."""
    active_provider: str = DEFAULT_PROVIDER
    providers: dict[str, ProviderConfig] = field(default_factory=_default_providers)
    max_tokens: Optional[int] = DEFAULT_MAX_TOKENS
    default_style: Optional[str] = None
    preferences: Preferences = field(default_factory=Preferences)

    def to_dict(self) -> dict:
        return asdict(self)

    def get_active_provider_config(self) -> tuple[str, ProviderConfig]:
        provider = self.active_provider
        provider_config = self.providers.get(provider)
        if provider_config is None:
            raise ConfigError(
                f"No configuration found for provider: {provider}\n\n"
                f"Tip: Run 'sage config -p {provider} -k <your-api-key>' to configure"
            )
        if not provider_config.api_key:
            raise ConfigError(
                f"API key not set for provider: {provider}\n\n"
                f"Tip: Run 'sage config -p {provider} -k <your-api-key>'"
            )
        return provider, provider_config

    def set_provider(self, provider: str, api_key: Optional[str] = None, model: Optional[str] = None) -> None:
        """Create or update a provider entry and make it active."""
        provider_config = self.providers.setdefault(provider, ProviderConfig())
        if api_key is not None:
            provider_config.api_key = api_key
        if model is not None:
            provider_config.model = model
        self.active_provider = provider

    def use_provider(self, provider: str) -> None:
        """Switch to an already configured provider."""
        if provider not in self.providers:
            raise ConfigError(
                f"Provider '{provider}' not configured\n\n"
                f"Tip: Run 'sage config -p {provider} -k <your-api-key>' first"
            )
        self.active_provider = provider

    def update_key(self, provider: str, api_key: str) -> None:
        self.providers.setdefault(provider, ProviderConfig()).api_key = api_key

    def set_max_tokens(self, tokens: int) -> None:
        if tokens <= 0:
            raise ConfigError(f"Invalid max tokens: {tokens}. Use a positive number")
        self.max_tokens = tokens

    def set_preference(self, key: str, value: bool) -> None:
        if key not in PREFERENCE_KEYS:
            raise ConfigError(f"Unknown preference: {key}. Use one of: {', '.join(PREFERENCE_KEYS)}")
        setattr(self.preferences, key, value)

    def set_default_style(self, style: str) -> None:
        normalized = "standard" if style == "conventional" else style
        if normalized not in STYLE_NAMES:
            raise ConfigError(f"Invalid style: {style}. Use: conventional, detailed, or short")
        self.default_style = normalized

    def validate(self) -> list[str]:
        """Validate config values and return list of warnings.

        Invalid values are replaced with defaults after warning.
        """
        warnings = []

        if self.max_tokens is not None and (
                isinstance(self.max_tokens, bool) or not isinstance(self.max_tokens, int) or self.max_tokens <= 0):
            warnings.append(f"Invalid max_tokens '{self.max_tokens}', using {DEFAULT_MAX_TOKENS}")
            self.max_tokens = DEFAULT_MAX_TOKENS

        if self.default_style == "conventional":
            self.default_style = "standard"
        if self.default_style is not None and self.default_style not in STYLE_NAMES:
            warnings.append(f"Invalid default_style '{self.default_style}', using standard")
            self.default_style = None

        return warnings

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_keys}

        providers = filtered.get("providers")
        if isinstance(providers, dict):
            filtered["providers"] = {
                name: ProviderConfig(
                    api_key=str(entry.get("api_key") or ""),
                    model=entry.get("model"),
                )
                for name, entry in providers.items() if isinstance(entry, dict)
            }
        else:
            filtered.pop("providers", None)

        preferences = filtered.get("preferences")
        if isinstance(preferences, dict):
            filtered["preferences"] = Preferences(
                **{k: v for k, v in preferences.items() if k in PREFERENCE_KEYS}
            )
        else:
            filtered.pop("preferences", None)

        config = cls(**filtered)
        # Validate and print warnings to stderr
        for warning in config.validate():
            print(f"Config warning: {warning}", file=sys.stderr)
        return config

    def describe(self) -> list[str]:
        """Human-readable lines for 'sage config --show'. Keys are hidden."""
        lines = ["Current configuration:", f"  Active provider: {self.active_provider}"]
        for name, provider_config in self.providers.items():
            active = " (active)" if name == self.active_provider else ""
            lines.append(f"\n  Provider: {name}{active}")
            lines.append(f"    API Key: {'Set (hidden)' if provider_config.api_key else 'Not set'}")
            lines.append(f"    Model: {provider_config.model or 'Default'}")

        if self.default_style:
            lines.append(f"\n  Default commit style: {self.default_style}")
        lines.append(f"  Max tokens: {self.max_tokens if self.max_tokens is not None else DEFAULT_MAX_TOKENS}")

        lines.append("\nPreferences:")
        for key in PREFERENCE_KEYS:
            value = getattr(self.preferences, key)
            shown = "not set" if value is None else ("enabled" if value else "disabled")
            lines.append(f"  {key.replace('_', ' ').capitalize()}: {shown}")
        return lines


class ConfigManager:
    """Manages loading and saving configuration."""

    CONFIG_FILENAME = ".sage-config.json"

    def __init__(self, path: Optional[Path] = None):
        self._config: Optional[Config] = None
        self._config_path = path

    @property
    def path(self) -> Path:
        return self._config_path or Path.home() / self.CONFIG_FILENAME

    def load(self) -> Config:
        if self._config is not None:
            return self._config

        path = self.path
        self._config = self._load_from_file(path) if path.exists() else Config()
        return self._config

    def _load_from_file(self, path: Path) -> Config:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(
                f"Invalid configuration file: {e}\n\n"
                f"Tip: Delete {path} and reconfigure"
            )
        except OSError as e:
            raise ConfigError(f"Could not read {path}: {e}")

        if not isinstance(data, dict):
            raise ConfigError(f"Invalid configuration file: expected a JSON object in {path}")
        return Config.from_dict(data)

    def save(self, config: Config) -> Path:
        path = self.path
        try:
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(config.to_dict(), f, indent=2)
        except OSError as e:
            raise ConfigError(f"Could not write {path}: {e}")
        self._config = config
        return path


_manager = ConfigManager()


def load_config() -> Config:
    return _manager.load()


def save_config(config: Config) -> Path:
    return _manager.save(config)


def get_config_path() -> Path:
    return _manager.path


__all__ = [
    "Config",
    "ConfigError",
    "ConfigManager",
    "ProviderConfig",
    "Preferences",
    "load_config",
    "save_config",
    "get_config_path",
    "PREFERENCE_KEYS",
    "DEFAULT_MAX_TOKENS",
]
