"""PheCode mapping of ICD diagnoses against curated and catalog phenotype lists."""
from pathlib import Path
from typing import Iterable, Optional, Union
import logging
import re
import pandas as pd

from pasc_phenotypes.config.phenotype_config import (
    BROAD_PHENOTYPE_GROUPS,
    CATALOG_COLUMNS,
    CATALOG_OPTIONAL_ICD9_COLUMN,
    CURATED_COLUMNS,
    GROUP_COL,
    INCLUSION_FLAG_COLUMN,
    INCLUSION_TRUE_VALUES,
    PHECODE_COL,
    PHECODE_ROLL_COL,
    PHENOTYPE_COL,
    PHENOTYPE_ROLL_COL,
)
from pasc_phenotypes.utils.table_utils import normalize_icd_code, require_columns

logger = logging.getLogger(__name__)

LEADING_NUMBER = re.compile(r'(\d+)')

CODE_MAP_COLUMNS = [PHECODE_COL, PHENOTYPE_COL, GROUP_COL, "icd_code"]


def _read_reference(path: Union[str, Path], columns: Iterable[str], name: str) -> pd.DataFrame:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"{name} file not found: {path}")
    # phecodes are dotted strings ('290.10'); keep them as text
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    require_columns(df, columns, name)
    return df


def load_curated_phenotypes(path: Union[str, Path]) -> pd.DataFrame:
    """Load the curated phenotype subset, keeping flagged rows.

    Args:
        path: CSV with phecode, description, group and the inclusion flag

    Returns:
        DataFrame with phecode, Phenotype, group
    """
    df = _read_reference(path, CURATED_COLUMNS, "Curated phenotypes")
    flag = df[INCLUSION_FLAG_COLUMN].astype(str).str.strip().str.lower()
    kept = df[flag.isin(INCLUSION_TRUE_VALUES)]

    logger.info(f"Curated phenotypes: {len(kept):,} of {len(df):,} flagged for inclusion")
    return (
        kept.rename(columns={"description": PHENOTYPE_COL})
        [[PHECODE_COL, PHENOTYPE_COL, GROUP_COL]]
        .drop_duplicates()
        .reset_index(drop=True)
    )


def load_phecode_catalog(path: Union[str, Path]) -> pd.DataFrame:
    """Load the full phecode-to-ICD catalog."""
    df = _read_reference(path, CATALOG_COLUMNS, "Phecode catalog")
    logger.info(f"Phecode catalog: {len(df):,} rows, {df[PHECODE_COL].nunique():,} phecodes")
    return df


def roll_phecode(phecode: Optional[str]) -> Optional[int]:
    """Truncate a phecode to its top-level integer category ('290.11' -> 290)."""
    if phecode is None:
        return None
    match = LEADING_NUMBER.search(str(phecode))
    if not match:
        return None
    return int(match.group(1))


def _icd_code_rows(catalog: pd.DataFrame) -> pd.DataFrame:
    """Long table of (phecode, icd_code) from the catalog's ICD columns."""
    code_columns = ["icd10cm"]
    if CATALOG_OPTIONAL_ICD9_COLUMN in catalog.columns:
        code_columns.append(CATALOG_OPTIONAL_ICD9_COLUMN)

    parts = []
    for col in code_columns:
        part = catalog[[PHECODE_COL, col]].rename(columns={col: "icd_code"})
        parts.append(part)

    codes = pd.concat(parts, ignore_index=True)
    codes["icd_code"] = codes["icd_code"].map(normalize_icd_code)
    return codes[codes["icd_code"] != ""].drop_duplicates().reset_index(drop=True)


def curated_code_map(curated: pd.DataFrame, catalog: pd.DataFrame) -> pd.DataFrame:
    """Attach catalog ICD codes to each curated phecode.

    Args:
        curated: Output of load_curated_phenotypes
        catalog: Output of load_phecode_catalog

    Returns:
        DataFrame with phecode, Phenotype, group, icd_code
    """
    codes = _icd_code_rows(catalog)
    mapped = curated.merge(codes, on=PHECODE_COL, how="inner")
    return mapped[CODE_MAP_COLUMNS].reset_index(drop=True)


def select_broad_phenotypes(
    catalog: pd.DataFrame,
    curated: pd.DataFrame,
    groups: Iterable[str] = BROAD_PHENOTYPE_GROUPS,
) -> pd.DataFrame:
    """Select neuro/mental-health catalog rows plus any curated phecode.

    Args:
        catalog: Output of load_phecode_catalog
        curated: Output of load_curated_phenotypes
        groups: Catalog groups to keep

    Returns:
        Subset of catalog rows
    """
    in_group = catalog[GROUP_COL].isin(list(groups))
    rescued = catalog[PHECODE_COL].isin(curated[PHECODE_COL])
    selected = catalog[in_group | rescued].reset_index(drop=True)

    logger.info(
        f"Broad phenotype set: {selected[PHECODE_COL].nunique():,} phecodes "
        f"({(rescued & ~in_group).sum():,} rows rescued from the curated list)"
    )
    return selected


def broad_code_map(broad: pd.DataFrame) -> pd.DataFrame:
    """Code map for the broad set, labelled with the catalog phecode string."""
    labels = (
        broad[[PHECODE_COL, "phecode_str", GROUP_COL]]
        .rename(columns={"phecode_str": PHENOTYPE_COL})
        .drop_duplicates(subset=PHECODE_COL)
    )
    codes = _icd_code_rows(broad)
    mapped = labels.merge(codes, on=PHECODE_COL, how="inner")
    return mapped[CODE_MAP_COLUMNS].reset_index(drop=True)


def build_phenotype_roll_lookup(code_map: pd.DataFrame) -> pd.DataFrame:
    """Representative label per rolled category.

    The label of the numerically first member phecode names the whole group.

    Args:
        code_map: DataFrame with phecode and Phenotype

    Returns:
        DataFrame with PheCode_roll, Phenotype_roll
    """
    members = code_map[[PHECODE_COL, PHENOTYPE_COL]].drop_duplicates().copy()
    members[PHECODE_ROLL_COL] = members[PHECODE_COL].map(roll_phecode).astype("Int64")
    members["_order"] = pd.to_numeric(members[PHECODE_COL], errors="coerce")

    members = members.dropna(subset=[PHECODE_ROLL_COL])
    members = members.sort_values(
        [PHECODE_ROLL_COL, "_order", PHECODE_COL], na_position="last", kind="mergesort"
    )
    lookup = members.drop_duplicates(subset=PHECODE_ROLL_COL, keep="first")

    return (
        lookup.rename(columns={PHENOTYPE_COL: PHENOTYPE_ROLL_COL})
        [[PHECODE_ROLL_COL, PHENOTYPE_ROLL_COL]]
        .reset_index(drop=True)
    )


def join_phenotypes(observations: pd.DataFrame, code_map: pd.DataFrame) -> pd.DataFrame:
    """Inner-join diagnosis rows to phenotypes by ICD code.

    Every matching (row, phenotype) pair is kept; a code that maps to several
    phecodes yields several output rows.

    Args:
        observations: Training rows with concept_code
        code_map: phecode, Phenotype, group, icd_code

    Returns:
        Joined rows with phecode, Phenotype, group, PheCode_roll, Phenotype_roll
    """
    left = observations.copy()
    left["icd_code"] = left["concept_code"].map(normalize_icd_code)

    joined = left.merge(code_map, on="icd_code", how="inner").drop(columns="icd_code")
    joined[PHECODE_ROLL_COL] = joined[PHECODE_COL].map(roll_phecode).astype("Int64")

    lookup = build_phenotype_roll_lookup(code_map)
    joined = joined.merge(lookup, on=PHECODE_ROLL_COL, how="left")

    logger.info(
        f"Phenotype join: {len(joined):,} rows, "
        f"{joined['patient_num'].nunique():,} patients, "
        f"{joined[PHECODE_COL].nunique():,} phecodes"
    )
    return joined.reset_index(drop=True)
