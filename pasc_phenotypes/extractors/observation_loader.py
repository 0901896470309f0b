"""Load per-patient diagnosis observations and keep ICD-9/ICD-10 rows."""
from pathlib import Path
from typing import Sequence, TextIO, Union
import logging
import pandas as pd

from pasc_phenotypes.config.phenotype_config import (
    ICD_CONCEPT_TYPES,
    OBSERVATION_COLUMNS,
)
from pasc_phenotypes.utils.table_utils import require_columns

logger = logging.getLogger(__name__)

OBSERVATION_DTYPES = {
    "patient_num": str,
    "concept_type": str,
    "concept_code": str,
    "cohort": str,
}


def read_observations(source: Union[str, Path, TextIO]) -> pd.DataFrame:
    """Read the raw observations table.

    Args:
        source: Path to the observations CSV or an open text handle

    Returns:
        DataFrame with at least the observation columns

    Raises:
        FileNotFoundError: If a path is given and does not exist
        ValueError: If expected columns are missing
    """
    if isinstance(source, (str, Path)):
        source = Path(source)
        if not source.exists():
            raise FileNotFoundError(f"Observations file not found: {source}")

    df = pd.read_csv(source, dtype=OBSERVATION_DTYPES, low_memory=False)
    require_columns(df, OBSERVATION_COLUMNS, "Observations")

    return df


def filter_icd_observations(
    df: pd.DataFrame,
    concept_types: Sequence[str] = ICD_CONCEPT_TYPES,
) -> pd.DataFrame:
    """Keep only diagnosis rows coded in a recognized ICD version.

    Args:
        df: Raw observations
        concept_types: Accepted concept_type tags

    Returns:
        Filtered DataFrame with the same columns
    """
    mask = df["concept_type"].isin(list(concept_types))
    return df[mask].reset_index(drop=True)


def coerce_day_offsets(df: pd.DataFrame, table_name: str = "Observations") -> pd.DataFrame:
    """Convert days_since_admission to signed whole days.

    Args:
        df: Observations kept for analysis
        table_name: Name used in the error message

    Returns:
        Copy of df with an int64 days_since_admission column

    Raises:
        ValueError: If any offset is missing, non-numeric or fractional
    """
    days = pd.to_numeric(df["days_since_admission"], errors="coerce")
    bad = days.isna() | (days != days.round())
    if bad.any():
        examples = df.loc[bad, ["patient_num", "days_since_admission"]].head(5)
        raise ValueError(
            f"{table_name} has {bad.sum():,} rows without a whole-day days_since_admission: "
            f"{examples.to_dict(orient='records')}"
        )

    result = df.copy()
    result["days_since_admission"] = days.astype("int64")
    return result


def load_observations(source: Union[str, Path, TextIO]) -> pd.DataFrame:
    """Read observations and drop non-ICD rows (labs, procedures, demographics).

    Args:
        source: Path to the observations CSV or an open text handle

    Returns:
        ICD diagnosis observations

    Raises:
        ValueError: If a kept row has no whole-day offset
    """
    raw = read_observations(source)
    filtered = coerce_day_offsets(filter_icd_observations(raw))
    logger.info(
        f"Loaded {len(raw):,} observations, kept {len(filtered):,} ICD diagnosis rows "
        f"for {filtered['patient_num'].nunique():,} patients"
    )
    return filtered
