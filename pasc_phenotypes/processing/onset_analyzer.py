"""Onset analysis of phenotype occurrences relative to the index admission."""
import logging
import pandas as pd

from pasc_phenotypes.config.phenotype_config import (
    ONSET_THRESHOLD_DAYS,
    PHECODE_COL,
    PHECODE_ROLL_COL,
)

logger = logging.getLogger(__name__)

# Granularity at which the first occurrence is taken
ONSET_LEVELS = {
    "rolled": PHECODE_ROLL_COL,
    "phecode": PHECODE_COL,
}


def occurrences_after(df: pd.DataFrame, threshold_days: int = ONSET_THRESHOLD_DAYS) -> pd.DataFrame:
    """Rows at or after the threshold, no deduplication.

    Args:
        df: Phenotype-joined rows
        threshold_days: Minimum days_since_admission

    Returns:
        Filtered rows
    """
    result = df[df["days_since_admission"] >= threshold_days].reset_index(drop=True)
    logger.info(
        f"Occurrences at day >= {threshold_days}: {len(result):,} rows, "
        f"{result['patient_num'].nunique():,} patients"
    )
    return result


def first_occurrences(df: pd.DataFrame, level: str = "rolled") -> pd.DataFrame:
    """Rows holding each patient's earliest day per phenotype category.

    Ties on the minimum day are all kept.

    Args:
        df: Phenotype-joined rows
        level: 'rolled' (PheCode_roll) or 'phecode'

    Returns:
        Rows equal to the group minimum
    """
    if level not in ONSET_LEVELS:
        raise ValueError(f"Unknown onset level {level!r}; expected one of {sorted(ONSET_LEVELS)}")
    key = ONSET_LEVELS[level]

    if df.empty:
        return df.reset_index(drop=True)

    earliest = df.groupby(["patient_num", key], dropna=False)["days_since_admission"].transform("min")
    return df[df["days_since_admission"] == earliest].reset_index(drop=True)


def new_onset_after(
    df: pd.DataFrame,
    threshold_days: int = ONSET_THRESHOLD_DAYS,
    level: str = "rolled",
) -> pd.DataFrame:
    """First occurrences that fall at or after the threshold.

    The minimum is taken over all occurrences, so a patient with any earlier
    diagnosis in the category is not a new onset.

    Args:
        df: Phenotype-joined rows
        threshold_days: Minimum days_since_admission of the first occurrence
        level: 'rolled' (PheCode_roll) or 'phecode'

    Returns:
        New-onset rows
    """
    firsts = first_occurrences(df, level=level)
    result = firsts[firsts["days_since_admission"] >= threshold_days].reset_index(drop=True)
    logger.info(
        f"New onset at day >= {threshold_days} ({level}): {len(result):,} rows, "
        f"{result['patient_num'].nunique():,} patients"
    )
    return result
