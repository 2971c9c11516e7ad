"""
Exceptions raised by dbdump.
"""

from typing import Optional


class ConfigError(ValueError):
    """Raised when a configuration source cannot be turned into exclusion rules."""


class InvalidPatternError(ConfigError):
    """Raised when a glob pattern cannot be used for matching."""

    def __init__(self, pattern: str, reason: str, source: Optional[str] = None):
        self.pattern = pattern
        self.reason = reason
        self.source = source
        message = f"Invalid exclude pattern '{pattern}': {reason}"
        if source:
            message += f" (from {source})"
        super().__init__(message)


class DumpError(RuntimeError):
    """Raised when mysqldump is missing or exits with an error."""
