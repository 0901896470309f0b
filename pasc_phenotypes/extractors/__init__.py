"""
PASC Phenotypes Extractors
==========================

Observation loading and ICD filtering.
"""

from .observation_loader import (
    read_observations,
    filter_icd_observations,
    coerce_day_offsets,
    load_observations,
)

__all__ = [
    'read_observations',
    'filter_icd_observations',
    'coerce_day_offsets',
    'load_observations',
]
