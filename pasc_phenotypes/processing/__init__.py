"""
PASC Phenotypes Processing
==========================

Cohort selection, train/test split, phenotype mapping and onset analysis.
"""

from .cohort_selector import build_cohort, classify_status, summarize_cohort
from .train_test_splitter import assign_splits, distinct_patients, split_train_test
from .phenotype_mapper import (
    load_curated_phenotypes,
    load_phecode_catalog,
    curated_code_map,
    select_broad_phenotypes,
    broad_code_map,
    build_phenotype_roll_lookup,
    join_phenotypes,
    roll_phecode,
)
from .onset_analyzer import first_occurrences, new_onset_after, occurrences_after

__all__ = [
    'build_cohort',
    'classify_status',
    'summarize_cohort',
    'assign_splits',
    'distinct_patients',
    'split_train_test',
    'load_curated_phenotypes',
    'load_phecode_catalog',
    'curated_code_map',
    'select_broad_phenotypes',
    'broad_code_map',
    'build_phenotype_roll_lookup',
    'join_phenotypes',
    'roll_phecode',
    'first_occurrences',
    'new_onset_after',
    'occurrences_after',
]
