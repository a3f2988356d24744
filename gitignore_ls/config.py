"""
Server configuration for gitignore-ls.

Defaults are overridden, in increasing precedence, by environment variables,
command line flags, the client's initializationOptions and
workspace/didChangeConfiguration settings.
"""

import dataclasses
import os
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Mapping, Optional

from gitignore_ls.core.ignore.analyzer import DiagnosticKind
from gitignore_ls.utils import get_logger

logger = get_logger(__name__)

ENV_PREFIX = "GITIGNORE_LS_"
LOG_FORMATS = ("text", "json")
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
KNOWN_CHECKS = frozenset(kind.value for kind in DiagnosticKind)

# Client option names (camelCase as sent by editors) -> ServerConfig fields
OPTION_NAMES = {
    "logLevel": "log_level",
    "disabledChecks": "disabled_checks",
    "maxCompletionItems": "max_completion_items",
}


def _split_checks(value: Any) -> FrozenSet[str]:
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = list(value or [])
    return frozenset(item.strip() for item in items if item and item.strip())


@dataclass
class ServerConfig:
    """Runtime settings for the language server"""
    log_level: str = "INFO"
    log_file: Optional[str] = None
    log_format: str = "text"
    disabled_checks: FrozenSet[str] = field(default_factory=frozenset)
    max_completion_items: int = 50
    analysis_workers: int = 2

    def __post_init__(self):
        """Validate configuration"""
        self.log_level = self.log_level.upper()
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level}")
        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"log_format must be 'text' or 'json', got {self.log_format}")
        self.disabled_checks = _split_checks(self.disabled_checks)
        unknown = self.disabled_checks - KNOWN_CHECKS
        if unknown:
            raise ValueError(f"Unknown diagnostic checks: {', '.join(sorted(unknown))}")
        if self.max_completion_items <= 0:
            raise ValueError(f"max_completion_items must be positive, got {self.max_completion_items}")
        if self.analysis_workers <= 0:
            raise ValueError(f"analysis_workers must be positive, got {self.analysis_workers}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'ServerConfig':
        """
        Build a configuration from GITIGNORE_LS_* environment variables

        Args:
            environ: Mapping to read instead of os.environ

        Returns:
            ServerConfig with environment overrides applied
        """
        env = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        if env.get(f"{ENV_PREFIX}LOG_LEVEL"):
            values["log_level"] = env[f"{ENV_PREFIX}LOG_LEVEL"]
        if env.get(f"{ENV_PREFIX}LOG_FILE"):
            values["log_file"] = env[f"{ENV_PREFIX}LOG_FILE"]
        if env.get(f"{ENV_PREFIX}LOG_FORMAT"):
            values["log_format"] = env[f"{ENV_PREFIX}LOG_FORMAT"].lower()
        if env.get(f"{ENV_PREFIX}DISABLED_CHECKS"):
            values["disabled_checks"] = env[f"{ENV_PREFIX}DISABLED_CHECKS"]
        for name, key in (("max_completion_items", "MAX_COMPLETIONS"), ("analysis_workers", "WORKERS")):
            raw = env.get(f"{ENV_PREFIX}{key}")
            if raw:
                try:
                    values[name] = int(raw)
                except ValueError:
                    raise ValueError(f"{ENV_PREFIX}{key} must be an integer, got {raw!r}")
        return cls(**values)

    def with_overrides(self, **overrides: Any) -> 'ServerConfig':
        """Return a copy with the given non-None fields replaced"""
        changes = {name: value for name, value in overrides.items() if value is not None}
        return dataclasses.replace(self, **changes)

    def with_options(self, options: Optional[Mapping[str, Any]]) -> 'ServerConfig':
        """
        Apply client-supplied settings

        Accepts either the settings object itself or one nested under a
        "gitignore" key. Unknown keys are ignored; invalid values keep the
        current configuration.

        Args:
            options: initializationOptions or didChangeConfiguration settings

        Returns:
            Updated ServerConfig
        """
        if not isinstance(options, Mapping):
            return self
        nested = options.get("gitignore")
        if isinstance(nested, Mapping):
            options = nested

        changes = {
            field_name: options[option]
            for option, field_name in OPTION_NAMES.items()
            if option in options
        }
        if not changes:
            return self
        try:
            return self.with_overrides(**changes)
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring invalid client settings {changes}: {e}")
            return self
