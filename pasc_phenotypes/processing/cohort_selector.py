"""Cohort selection: COVID-positive patients and admission status."""
import logging
import pandas as pd

from pasc_phenotypes.config.phenotype_config import (
    ADMITTED_MARKER,
    COVID_POSITIVE,
    NOT_ADMITTED_MARKER,
    POSITIVE_COHORT_MARKER,
    SPLIT_TRAIN,
    SPLIT_TEST,
    STATUS_ADMITTED,
    STATUS_NOT_ADMITTED,
)

logger = logging.getLogger(__name__)

COHORT_COLUMNS = [
    "patient_num", "status", "covid", "concept_type",
    "concept_code", "days_since_admission",
]


def classify_status(cohort_label: str, strict: bool = False) -> str:
    """Derive admission status from a cohort label.

    Labels containing the not-admitted marker map to Not Admitted; everything
    else falls back to Admitted.

    Args:
        cohort_label: Raw cohort label (e.g. 'PosAdm', 'PosNotAdm')
        strict: Raise on labels carrying neither admission marker

    Returns:
        'Admitted' or 'Not Admitted'
    """
    label = "" if cohort_label is None else str(cohort_label)

    if NOT_ADMITTED_MARKER in label:
        return STATUS_NOT_ADMITTED

    if strict and ADMITTED_MARKER not in label:
        raise ValueError(f"Unrecognized cohort label: {cohort_label!r}")

    return STATUS_ADMITTED


def select_positive_cohort(df: pd.DataFrame) -> pd.DataFrame:
    """Keep rows whose cohort label carries the positive marker (case-sensitive)."""
    mask = df["cohort"].astype(str).str.contains(POSITIVE_COHORT_MARKER, regex=False)
    return df[mask].reset_index(drop=True)


def build_cohort(df: pd.DataFrame, strict: bool = False) -> pd.DataFrame:
    """Filter to COVID-positive patients and label admission status.

    Args:
        df: ICD diagnosis observations
        strict: Raise on unrecognized cohort labels instead of defaulting

    Returns:
        Observation rows reduced to COHORT_COLUMNS
    """
    result = select_positive_cohort(df)

    labels = result["cohort"].astype(str)
    result["status"] = labels.map(lambda c: classify_status(c, strict=strict))
    result["covid"] = COVID_POSITIVE

    defaulted = ~labels.str.contains(ADMITTED_MARKER, regex=False)
    if defaulted.any():
        logger.warning(
            f"{defaulted.sum():,} rows with cohort labels "
            f"{sorted(labels[defaulted].unique())} defaulted to '{STATUS_ADMITTED}'"
        )

    logger.info(
        f"Positive cohort: {result['patient_num'].nunique():,} patients, "
        f"{len(result):,} rows"
    )
    return result[COHORT_COLUMNS]


def summarize_cohort(train: pd.DataFrame, test: pd.DataFrame) -> pd.DataFrame:
    """Count distinct patients per split and admission status.

    Args:
        train: Training rows with patient_num and status
        test: Test rows with patient_num and status

    Returns:
        DataFrame with split, status, patients
    """
    parts = []
    for split, df in [(SPLIT_TRAIN, train), (SPLIT_TEST, test)]:
        counts = (
            df.groupby("status")["patient_num"].nunique()
            .rename("patients")
            .reset_index()
        )
        counts.insert(0, "split", split)
        parts.append(counts)

    summary = pd.concat(parts, ignore_index=True)
    return summary[["split", "status", "patients"]]
