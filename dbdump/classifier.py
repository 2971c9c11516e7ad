"""
Partitioning of discovered tables into excluded and included sets.
"""

import logging
from typing import Iterable

from .models import Classification, ExcludeConfig
from .patterns import PatternSet


class TableClassifier:
    """Applies an effective ExcludeConfig to lists of table names."""

    def __init__(self, config: ExcludeConfig):
        self.config = config
        self.pattern_set = PatternSet.from_config(config)

    def is_excluded(self, table_name: str) -> bool:
        return self.pattern_set.matches(table_name)

    def classify(self, tables: Iterable[str]) -> Classification:
        """
        Split `tables` into excluded and included names.

        Both outputs keep the relative input order. Each occurrence of a
        name is classified on its own, so duplicates in the input show up
        in the output the same number of times.
        """
        excluded = []
        included = []

        for table in tables:
            if self.pattern_set.matches(table):
                excluded.append(table)
            else:
                included.append(table)

        if excluded:
            logging.debug(f"Excluding data for {len(excluded)} table(s) matching exclusion rules")

        return Classification(excluded=tuple(excluded), included=tuple(included))

    def excluded(self, tables: Iterable[str]) -> list[str]:
        return list(self.classify(tables).excluded)

    def included(self, tables: Iterable[str]) -> list[str]:
        return list(self.classify(tables).included)

    def explain(self, tables: Iterable[str]) -> dict[str, str]:
        """Map each excluded table to the rule that excluded it."""
        reasons = {}
        for table in tables:
            rule = self.pattern_set.matching_rule(table)
            if rule is not None:
                reasons[table] = rule
        return reasons
