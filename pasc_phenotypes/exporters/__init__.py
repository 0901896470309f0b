"""
PASC Phenotypes Exporters
=========================

One-hot patient vectors and bundle persistence for downstream clustering.
"""

from .vector_exporter import (
    FeatureDimension,
    build_patient_vectors,
    save_bundle,
    load_bundle,
)

__all__ = [
    'FeatureDimension',
    'build_patient_vectors',
    'save_bundle',
    'load_bundle',
]
