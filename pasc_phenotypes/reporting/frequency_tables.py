"""Patient counts and prevalence per phenotype and admission status."""
import logging
import pandas as pd

from pasc_phenotypes.config.phenotype_config import GROUP_COL, PHECODE_COL

logger = logging.getLogger(__name__)


def representative_groups(df: pd.DataFrame, label_col: str) -> pd.DataFrame:
    """One phenotype group per label.

    A rolled label can cover phecodes from several groups; the group of the
    numerically first phecode stands for the label.

    Args:
        df: Rows with label_col, group and phecode
        label_col: Phenotype column

    Returns:
        DataFrame with label_col, group
    """
    members = df[[label_col, GROUP_COL, PHECODE_COL]].drop_duplicates().copy()
    members["_order"] = pd.to_numeric(members[PHECODE_COL], errors="coerce")
    members = members.sort_values(
        ["_order", PHECODE_COL], na_position="last", kind="mergesort"
    )
    return (
        members.drop_duplicates(subset=label_col, keep="first")
        [[label_col, GROUP_COL]]
        .reset_index(drop=True)
    )


def frequency_table(df: pd.DataFrame, label_col: str, total_patients: int) -> pd.DataFrame:
    """Count distinct patients per (phenotype, status) and express as a percent.

    The denominator is the size of the whole training cohort, not the
    number of patients in ``df``.

    Args:
        df: Onset-analyzer output with patient_num, status, group, phecode
            and label_col
        label_col: Phenotype column to aggregate on
        total_patients: Distinct patients in the training cohort

    Returns:
        DataFrame with label_col, group, status, count, percent sorted by
        percent descending
    """
    columns = [label_col, GROUP_COL, "status", "count", "percent"]
    if df.empty:
        return pd.DataFrame(columns=columns)

    counts = (
        df.groupby([label_col, "status"], dropna=False)["patient_num"].nunique()
        .rename("count")
        .reset_index()
    )
    counts = counts.merge(representative_groups(df, label_col), on=label_col, how="left")

    if total_patients > 0:
        counts["percent"] = (counts["count"] / total_patients * 100).round(2)
    else:
        logger.warning("Training cohort is empty; prevalence reported as 0%")
        counts["percent"] = 0.0

    counts = counts.sort_values(
        ["percent", label_col, "status"], ascending=[False, True, True], kind="mergesort"
    )
    return counts[columns].reset_index(drop=True)
