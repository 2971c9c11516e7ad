"""
Data models and enums for dbdump.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional


class LayerSource(Enum):
    """Origin of a configuration layer, in merge order."""
    DEFAULTS = "defaults"
    GLOBAL = "global"
    PROJECT = "project"
    CLI = "cli"


def _unique(values: Iterable[str]) -> tuple[str, ...]:
    """De-duplicate byte-identical strings, keeping first-seen order."""
    return tuple(dict.fromkeys(values))


@dataclass(frozen=True)
class ExcludeConfig:
    """Table names and glob patterns whose row data is skipped."""
    exact: tuple[str, ...] = ()
    patterns: tuple[str, ...] = ()

    def __post_init__(self):
        # Accept any iterable of strings but always store tuples.
        object.__setattr__(self, 'exact', tuple(self.exact))
        object.__setattr__(self, 'patterns', tuple(self.patterns))

    @classmethod
    def from_lists(
        cls,
        exact: Optional[Iterable[str]] = None,
        patterns: Optional[Iterable[str]] = None
    ) -> "ExcludeConfig":
        return cls(exact=_unique(exact or ()), patterns=_unique(patterns or ()))

    def union(self, other: "ExcludeConfig") -> "ExcludeConfig":
        """
        Return a new config holding the entries of both configs.

        Entries of `self` come first; entries of `other` already present
        are dropped. Nothing is ever removed.
        """
        return ExcludeConfig(
            exact=_unique(self.exact + other.exact),
            patterns=_unique(self.patterns + other.patterns)
        )

    def is_empty(self) -> bool:
        return not self.exact and not self.patterns


@dataclass(frozen=True)
class ConfigLayer:
    """One source of exclusion rules."""
    source: LayerSource
    excludes: ExcludeConfig = field(default_factory=ExcludeConfig)
    origin: Optional[str] = None

    @property
    def label(self) -> str:
        if self.origin:
            return f"{self.source.value} ({self.origin})"
        return self.source.value


@dataclass(frozen=True)
class Classification:
    """Partition of a table list into excluded and included tables."""
    excluded: tuple[str, ...] = ()
    included: tuple[str, ...] = ()

    @property
    def total(self) -> int:
        return len(self.excluded) + len(self.included)


@dataclass
class ConnectionSettings:
    """Parameters needed to reach a MySQL server."""
    host: str = "127.0.0.1"
    port: int = 3306
    user: str = ""
    password: str = ""
    database: str = ""


@dataclass
class TableInfo:
    """Size statistics for a single table."""
    name: str
    row_count: int = 0
    data_size: int = 0
    index_size: int = 0
    total_size: int = 0
    size_display: str = ""


@dataclass
class DumpOptions:
    """Options for a two-pass mysqldump run."""
    connection: ConnectionSettings
    output_file: str
    exclude_tables: list[str] = field(default_factory=list)
    dry_run: bool = False


@dataclass
class DumpResult:
    """Outcome of a dump run."""
    output_file: str
    duration: float = 0.0
    excluded_tables: list[str] = field(default_factory=list)
    file_size: int = 0
    file_size_display: str = ""
