"""
Patient Vector Exporter
=======================

Export phenotype occurrences as one-hot patient-by-phenotype matrices.

Output: one row per patient present in the source table, columns
patient_num, status, then one binary column per phenotype value observed in
that table. Matrices and frequency tables are persisted as named bundles
for the clustering step.
"""

from enum import Enum
from pathlib import Path
from typing import Dict, Union
import logging
import pickle

import pandas as pd

from pasc_phenotypes.config.phenotype_config import (
    PHECODE_COL,
    PHENOTYPE_COL,
    PHENOTYPE_ROLL_COL,
)

logger = logging.getLogger(__name__)


class FeatureDimension(str, Enum):
    """Column pivoted into the feature axis."""

    PHENOTYPE = PHENOTYPE_COL
    PHECODE = PHECODE_COL
    PHENOTYPE_ROLL = PHENOTYPE_ROLL_COL


def build_patient_vectors(
    df: pd.DataFrame,
    dimension: Union[FeatureDimension, str],
    cohort: pd.DataFrame,
) -> pd.DataFrame:
    """
    Pivot phenotype occurrences to a wide binary matrix.

    Patients in ``df`` whose feature value is missing still get an all-zero
    row; patients absent from ``df`` are not added.

    Args:
        df: Onset-analyzer or phenotype-mapper output
        dimension: Feature column to pivot on
        cohort: Rows with patient_num and status (the training cohort)

    Returns:
        Wide DataFrame: patient_num, status, feature columns (0/1)
    """
    try:
        dimension = FeatureDimension(dimension)
    except ValueError:
        raise ValueError(
            f"Unknown feature dimension {dimension!r}; "
            f"expected one of {[d.value for d in FeatureDimension]}"
        ) from None
    feature_col = dimension.value

    patients = pd.Index(df["patient_num"].drop_duplicates(), name="patient_num")

    pairs = df[["patient_num", feature_col]].dropna().drop_duplicates()
    pairs = pairs.assign(**{feature_col: pairs[feature_col].astype(str), "present": 1})

    if len(pairs) > 0:
        wide = pairs.pivot_table(
            index="patient_num",
            columns=feature_col,
            values="present",
            aggfunc="max",
            fill_value=0,
        )
    else:
        wide = pd.DataFrame(index=pd.Index([], name="patient_num"))

    wide = wide.reindex(patients, fill_value=0).astype("int64")
    wide.columns = [str(c) for c in wide.columns]
    wide = wide.reset_index()

    status = cohort[["patient_num", "status"]].drop_duplicates(subset="patient_num")
    result = wide.merge(status, on="patient_num", how="left")

    feature_cols = [c for c in result.columns if c not in ("patient_num", "status")]
    return result[["patient_num", "status"] + feature_cols]


def save_bundle(bundle: Dict[str, pd.DataFrame], output_dir: Path, name: str) -> Path:
    """
    Persist a named bundle of tables.

    Writes ``{name}.pkl`` (dict of DataFrames) and one parquet file per table
    under ``{name}/``.

    Args:
        bundle: Mapping of table name to DataFrame
        output_dir: Output directory
        name: Bundle name

    Returns:
        Path to the pickle file
    """
    output_dir = Path(output_dir)
    table_dir = output_dir / name
    table_dir.mkdir(parents=True, exist_ok=True)

    pkl_path = output_dir / f"{name}.pkl"
    with open(pkl_path, 'wb') as f:
        pickle.dump(bundle, f)

    for key, table in bundle.items():
        table.to_parquet(table_dir / f"{key}.parquet", index=False)

    logger.info(f"  Saved bundle '{name}' ({len(bundle)} tables) to {pkl_path}")
    return pkl_path


def load_bundle(path: Path) -> Dict[str, pd.DataFrame]:
    """Load a pickled bundle written by save_bundle."""
    with open(path, 'rb') as f:
        return pickle.load(f)
