"""
Merging of configuration layers into one effective ExcludeConfig.
"""

import logging
from functools import reduce
from typing import Iterable, Optional

from .models import ConfigLayer, ExcludeConfig


def merge_excludes(*configs: ExcludeConfig) -> ExcludeConfig:
    """Union any number of configs in order."""
    return reduce(ExcludeConfig.union, configs, ExcludeConfig())


def merge_layers(layers: Iterable[Optional[ConfigLayer]]) -> ExcludeConfig:
    """
    Fold configuration layers into the effective exclusion config.

    Layers are applied in the order given (defaults, global, project, cli).
    Merging is additive: every layer's exact names and patterns are unioned
    into the result and no layer can remove an entry added before it.
    Absent layers (None) contribute nothing.
    """
    present = [layer for layer in layers if layer is not None]

    for layer in present:
        logging.debug(
            f"Config layer {layer.label}: "
            f"{len(layer.excludes.exact)} exact, {len(layer.excludes.patterns)} pattern(s)"
        )

    return merge_excludes(*(layer.excludes for layer in present))
