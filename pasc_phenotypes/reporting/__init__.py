"""Prevalence tables and their visual reports."""

from .frequency_tables import frequency_table
from .visualization import generate_prevalence_scatter, generate_frequency_table_html

__all__ = [
    'frequency_table',
    'generate_prevalence_scatter',
    'generate_frequency_table_html',
]
