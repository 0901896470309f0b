"""Output validation for the phenotype pipeline."""

from .layer_validators import (
    ValidationResult,
    validate_observations,
    validate_split,
    validate_new_onset,
    validate_vectors,
    validate_frequency_table,
)

__all__ = [
    'ValidationResult',
    'validate_observations',
    'validate_split',
    'validate_new_onset',
    'validate_vectors',
    'validate_frequency_table',
]
