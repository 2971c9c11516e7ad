"""
dbdump
======
Reduced-size MySQL/MariaDB dumps with support for:
- Structure preserved for every table
- Row data skipped for noisy tables (audits, sessions, cache, telemetry)
- Layered exclusion config (defaults, global file, project file, CLI flags)
- Exact table names and glob patterns
- Saved connection profiles
"""

from .classifier import TableClassifier
from .config import ConfigLoader, build_layers, cli_layer, load_defaults, load_global_config
from .connection import DatabaseConnection
from .dumper import MySQLDumper, check_mysqldump
from .exceptions import ConfigError, DumpError, InvalidPatternError
from .main import main
from .merger import merge_excludes, merge_layers
from .models import (
    Classification,
    ConfigLayer,
    ConnectionSettings,
    DumpOptions,
    DumpResult,
    ExcludeConfig,
    LayerSource,
    TableInfo,
)
from .patterns import PatternSet, validate_pattern
from .profiles import ConnectionProfile, ProfilesConfig, load_profiles, save_profiles
from .utils import format_bytes, print_dry_run_info, setup_logging

__version__ = "1.0.0"

__all__ = [
    # Main entry point
    "main",
    # Core classes
    "ConfigLoader",
    "DatabaseConnection",
    "MySQLDumper",
    "PatternSet",
    "TableClassifier",
    # Config layers
    "build_layers",
    "cli_layer",
    "load_defaults",
    "load_global_config",
    "merge_excludes",
    "merge_layers",
    # Models
    "Classification",
    "ConfigLayer",
    "ConnectionSettings",
    "DumpOptions",
    "DumpResult",
    "ExcludeConfig",
    "LayerSource",
    "TableInfo",
    # Profiles
    "ConnectionProfile",
    "ProfilesConfig",
    "load_profiles",
    "save_profiles",
    # Errors
    "ConfigError",
    "DumpError",
    "InvalidPatternError",
    # Utilities
    "check_mysqldump",
    "format_bytes",
    "print_dry_run_info",
    "setup_logging",
    "validate_pattern",
]
