"""Patient-level seeded train/test split."""
from typing import Sequence, Tuple
import logging
import numpy as np
import pandas as pd

from pasc_phenotypes.config.phenotype_config import (
    SPLIT_PROBABILITIES,
    SPLIT_SEED,
    SPLIT_TEST,
    SPLIT_TRAIN,
)

logger = logging.getLogger(__name__)


def distinct_patients(cohort: pd.DataFrame) -> pd.DataFrame:
    """One row per patient, sorted by identifier.

    Sorting fixes the draw order so assignments do not depend on the load
    order of observation rows.

    Args:
        cohort: Observation rows with patient_num and status

    Returns:
        DataFrame with patient_num, status
    """
    patients = cohort[["patient_num", "status"]].drop_duplicates()
    patients = patients.sort_values(["patient_num", "status"], kind="mergesort")
    patients = patients.drop_duplicates(subset="patient_num", keep="first")
    return patients.reset_index(drop=True)


def assign_splits(
    patients: pd.DataFrame,
    seed: int = SPLIT_SEED,
    probabilities: Sequence[float] = SPLIT_PROBABILITIES,
) -> pd.DataFrame:
    """Draw one split label per patient from a seeded generator.

    Args:
        patients: One row per patient, in the order draws are taken
        seed: Random seed
        probabilities: (train, test) probabilities

    Returns:
        Copy of patients with a 'split' column
    """
    probabilities = tuple(float(p) for p in probabilities)
    if len(probabilities) != 2 or not np.isclose(sum(probabilities), 1.0):
        raise ValueError(
            f"Split probabilities must be two values summing to 1, got {probabilities}"
        )
    if patients["patient_num"].duplicated().any():
        raise ValueError("assign_splits expects one row per patient")

    rng = np.random.RandomState(seed)
    result = patients.copy()
    result["split"] = rng.choice(
        [SPLIT_TRAIN, SPLIT_TEST], size=len(result), p=list(probabilities)
    )
    return result


def split_train_test(
    cohort: pd.DataFrame,
    seed: int = SPLIT_SEED,
    probabilities: Sequence[float] = SPLIT_PROBABILITIES,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Partition observation rows into train and test by patient.

    Args:
        cohort: Observation rows from build_cohort
        seed: Random seed
        probabilities: (train, test) probabilities

    Returns:
        Tuple of (train, test) row-level DataFrames
    """
    assignments = assign_splits(distinct_patients(cohort), seed, probabilities)

    rows = cohort.merge(
        assignments[["patient_num", "split"]], on="patient_num", how="inner"
    )
    train = rows[rows["split"] == SPLIT_TRAIN].drop(columns="split").reset_index(drop=True)
    test = rows[rows["split"] == SPLIT_TEST].drop(columns="split").reset_index(drop=True)

    logger.info(
        f"Split {len(assignments):,} patients: "
        f"{train['patient_num'].nunique():,} train, {test['patient_num'].nunique():,} test"
    )
    return train, test
