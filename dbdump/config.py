"""
Configuration loading and validation for dbdump.

Exclusion rules come from four layers, merged in this order:

1. built-in defaults (embedded below)
2. the global user file, ``~/.config/dbdump/config.yaml``
3. a project file passed with ``--config``
4. ``--exclude`` / ``--exclude-pattern`` command line flags
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Iterable, Optional

import yaml

from .exceptions import ConfigError, InvalidPatternError
from .models import ConfigLayer, ExcludeConfig, LayerSource
from .patterns import validate_pattern


DEFAULT_CONFIG_YAML = """\
default_excludes:
  exact:
    - audits
    - sessions
    - cache
    - cache_locks
    - failed_jobs
    - telescope_entries
    - telescope_entries_tags
    - telescope_monitoring
    - pulse_entries
    - pulse_aggregates
  patterns:
    - "telescope_*"
    - "pulse_*"
    - "_cache"
"""

CONFIG_KEYS = {'name', 'exclude', 'logging'}
EXCLUDE_KEYS = {'exact', 'patterns'}


def get_config_dir() -> Path:
    """Directory holding the global config and saved profiles."""
    return Path.home() / ".config" / "dbdump"


def get_global_config_path() -> Path:
    return get_config_dir() / "config.yaml"


def _string_list(value: Any, field_name: str, source: str) -> list[str]:
    """Decode an optional list of strings, rejecting anything else."""
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(
            f"'{field_name}' must be a list of strings, got {type(value).__name__} (in {source})"
        )
    for item in value:
        if not isinstance(item, str):
            raise ConfigError(
                f"'{field_name}' entries must be strings, got {item!r} (in {source})"
            )
    return value


def decode_excludes(data: Any, source: str) -> ExcludeConfig:
    """
    Strictly decode an ``exclude`` mapping into an ExcludeConfig.

    Both keys are optional. Unknown keys, non-list values, non-string entries
    and invalid glob patterns are rejected with a message naming `source`.
    """
    if data is None:
        return ExcludeConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"'exclude' must be a mapping with 'exact' and 'patterns' (in {source})")

    unknown = set(data) - EXCLUDE_KEYS
    if unknown:
        raise ConfigError(
            f"Unknown key(s) under 'exclude': {', '.join(sorted(map(str, unknown)))} (in {source})"
        )

    exact = _string_list(data.get('exact'), 'exclude.exact', source)
    patterns = _string_list(data.get('patterns'), 'exclude.patterns', source)
    validate_patterns(patterns, source)

    return ExcludeConfig.from_lists(exact, patterns)


def validate_patterns(patterns: Iterable[str], source: str) -> None:
    """Reject the first invalid pattern, naming the layer it came from."""
    for pattern in patterns:
        try:
            validate_pattern(pattern)
        except InvalidPatternError as e:
            raise InvalidPatternError(e.pattern, e.reason, source) from None


class ConfigLoader:
    """Loads and validates a dbdump YAML configuration file."""

    ENV_VAR_PATTERN = re.compile(r'\$\{([^}]+)\}')

    def __init__(self, config_path: str):
        self.config_path = str(config_path)
        self.config = self._load_config()

    def _load_config(self) -> dict[str, Any]:
        """Load configuration from YAML file."""
        with open(self.config_path, 'r') as f:
            config = yaml.safe_load(f)

        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ConfigError(f"Top level of '{self.config_path}' must be a mapping")

        unknown = set(config) - CONFIG_KEYS
        if unknown:
            raise ConfigError(
                f"Unknown key(s) {', '.join(sorted(map(str, unknown)))} in '{self.config_path}'"
            )

        return self._resolve_env_vars(config)

    def _resolve_env_vars(self, obj: Any) -> Any:
        """Recursively resolve environment variables in config."""
        if isinstance(obj, str):
            matches = self.ENV_VAR_PATTERN.findall(obj)
            for match in matches:
                env_value = os.environ.get(match, '')
                obj = obj.replace(f'${{{match}}}', env_value)
            return obj
        elif isinstance(obj, dict):
            return {k: self._resolve_env_vars(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [self._resolve_env_vars(item) for item in obj]
        return obj

    def get_name(self) -> Optional[str]:
        """Get the optional project name."""
        return self.config.get('name')

    def get_excludes(self) -> ExcludeConfig:
        """Get the decoded exclusion rules."""
        return decode_excludes(self.config.get('exclude'), self.config_path)

    def get_logging_settings(self) -> dict[str, Any]:
        """Get logging settings."""
        settings = self.config.get('logging') or {}
        if not isinstance(settings, dict):
            raise ConfigError(f"'logging' must be a mapping (in {self.config_path})")
        return settings

    def to_layer(self, source: LayerSource) -> ConfigLayer:
        return ConfigLayer(source=source, excludes=self.get_excludes(), origin=self.config_path)


def load_defaults() -> ConfigLayer:
    """Build the compiled-in default layer."""
    data = yaml.safe_load(DEFAULT_CONFIG_YAML)
    excludes = decode_excludes(data['default_excludes'], "built-in defaults")
    return ConfigLayer(source=LayerSource.DEFAULTS, excludes=excludes)


def load_global_config(path: Optional[Path] = None) -> Optional[ConfigLayer]:
    """Load the global user config, or None if the file does not exist."""
    path = path or get_global_config_path()
    if not path.is_file():
        logging.debug(f"No global config at {path}")
        return None

    logging.debug(f"Loading global config from {path}")
    return ConfigLoader(str(path)).to_layer(LayerSource.GLOBAL)


def load_project_config(path: str) -> ConfigLoader:
    """Load an explicitly requested project config. Missing files raise."""
    logging.debug(f"Loading project config from {path}")
    return ConfigLoader(path)


def cli_layer(
    exact: Optional[Iterable[str]] = None,
    patterns: Optional[Iterable[str]] = None
) -> Optional[ConfigLayer]:
    """Build the layer for command line excludes, or None if none were given."""
    exact = list(exact or [])
    patterns = list(patterns or [])
    if not exact and not patterns:
        return None

    validate_patterns(patterns, "command line")
    return ConfigLayer(
        source=LayerSource.CLI,
        excludes=ExcludeConfig.from_lists(exact, patterns),
        origin="command line"
    )


def build_layers(
    project: Optional[ConfigLoader] = None,
    cli_exact: Optional[Iterable[str]] = None,
    cli_patterns: Optional[Iterable[str]] = None,
    global_path: Optional[Path] = None
) -> list[Optional[ConfigLayer]]:
    """Collect all layers in merge order. Absent layers are None."""
    return [
        load_defaults(),
        load_global_config(global_path),
        project.to_layer(LayerSource.PROJECT) if project else None,
        cli_layer(cli_exact, cli_patterns),
    ]
