"""Column checks and ICD code normalization shared by the pipeline stages."""
from typing import Iterable, Optional
import pandas as pd


def require_columns(df: pd.DataFrame, columns: Iterable[str], table_name: str) -> None:
    """Fail fast when a table is missing expected columns.

    Args:
        df: Table to check
        columns: Column names that must be present
        table_name: Name used in the error message

    Raises:
        ValueError: If any column is missing
    """
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValueError(
            f"{table_name} is missing required columns: {missing} "
            f"(found: {list(df.columns)})"
        )


def normalize_icd_code(code: Optional[str]) -> str:
    """Normalize ICD code for consistent comparison.

    Args:
        code: Raw ICD code

    Returns:
        Normalized code (uppercase, trimmed)
    """
    if code is None or (isinstance(code, float) and pd.isna(code)):
        return ""
    return str(code).strip().upper()
