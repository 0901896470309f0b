"""
PASC Phenotypes Configuration Package
"""

from .phenotype_config import (
    # Paths
    PROJECT_ROOT,
    DATA_DIR,
    OUTPUT_DIR,

    # Outputs
    VECTOR_SPECS,
    FREQUENCY_SPECS,

    # Configs
    PipelineConfig,

    # Helpers
    load_pipeline_config,
    ensure_directories,
)

__all__ = [
    'PROJECT_ROOT',
    'DATA_DIR',
    'OUTPUT_DIR',
    'VECTOR_SPECS',
    'FREQUENCY_SPECS',
    'PipelineConfig',
    'load_pipeline_config',
    'ensure_directories',
]
