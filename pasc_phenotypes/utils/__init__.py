"""Shared table helpers."""

from .table_utils import normalize_icd_code, require_columns

__all__ = ['normalize_icd_code', 'require_columns']
