"""
PASC Phenotypes
===============

Post-acute phenotype extraction: PheCode mapping of ICD diagnoses, onset
analysis relative to the index admission, prevalence tables and one-hot
patient vectors for downstream clustering.
"""

__version__ = "0.1.0"
