"""
Layer Validators
================

Validation checks for each pipeline stage.

Validation targets:
- Observations: only ICD-9/ICD-10 diagnosis rows
- Split: train/test partition the cohort by patient
- Onset: new-onset rows are each patient's earliest occurrence, at or after threshold
- Vectors: binary feature cells, one row per source patient
- Frequencies: percent within [0, 100] and consistent with counts
"""

from dataclasses import dataclass, field
from typing import List, NamedTuple, Sequence
import numpy as np
import pandas as pd

from pasc_phenotypes.config.phenotype_config import (
    ICD_CONCEPT_TYPES,
    ONSET_THRESHOLD_DAYS,
    PHECODE_ROLL_COL,
)


class StageCheck(NamedTuple):
    description: str
    passed: bool
    details: str = ""


@dataclass
class ValidationResult:
    """Checks run against one pipeline stage's output."""

    name: str
    checks: List[StageCheck] = field(default_factory=list)

    def add_check(self, description: str, passed: bool, details: str = ""):
        self.checks.append(StageCheck(description, bool(passed), details))

    @property
    def passed(self) -> int:
        return sum(c.passed for c in self.checks)

    @property
    def failed(self) -> int:
        return len(self.checks) - self.passed

    @property
    def ok(self) -> bool:
        return self.failed == 0

    def summary(self) -> str:
        status = "PASS" if self.ok else "FAIL"
        return f"[{status}] {self.name} ({self.passed}/{len(self.checks)})"

    def report(self) -> str:
        """Summary line followed by every failed check and its details."""
        lines = [self.summary()]
        for check in self.checks:
            if not check.passed:
                detail = f": {check.details}" if check.details else ""
                lines.append(f"    - {check.description}{detail}")
        return "\n".join(lines)


def validate_observations(
    df: pd.DataFrame,
    concept_types: Sequence[str] = ICD_CONCEPT_TYPES,
) -> ValidationResult:
    """Validate loaded observations."""
    result = ValidationResult("Observations: ICD Diagnoses")

    bad = ~df["concept_type"].isin(list(concept_types))
    result.add_check(
        "All rows are ICD diagnosis codes",
        not bad.any(),
        f"{bad.sum():,} non-ICD rows" if bad.any() else f"{len(df):,} rows"
    )
    return result


def validate_split(cohort: pd.DataFrame, train: pd.DataFrame, test: pd.DataFrame) -> ValidationResult:
    """Validate that train/test partition the cohort by patient."""
    result = ValidationResult("Split: Patient Partition")

    all_patients = set(cohort["patient_num"])
    train_patients = set(train["patient_num"])
    test_patients = set(test["patient_num"])

    overlap = train_patients & test_patients
    result.add_check(
        "No patient in both train and test",
        len(overlap) == 0,
        f"{len(overlap):,} overlapping patients"
    )

    missing = all_patients - (train_patients | test_patients)
    result.add_check(
        "Every cohort patient is assigned",
        len(missing) == 0,
        f"{len(missing):,} unassigned patients"
    )

    result.add_check(
        "Every cohort row is kept",
        len(train) + len(test) == len(cohort),
        f"train {len(train):,} + test {len(test):,} vs cohort {len(cohort):,}"
    )
    return result


def validate_new_onset(
    joined: pd.DataFrame,
    new_onset: pd.DataFrame,
    threshold_days: int = ONSET_THRESHOLD_DAYS,
    key: str = PHECODE_ROLL_COL,
) -> ValidationResult:
    """Validate new-onset rows against the pre-filter joined rows."""
    result = ValidationResult("Onset: New Onset")

    below = (new_onset["days_since_admission"] < threshold_days).sum()
    result.add_check(
        f"All new-onset rows at day >= {threshold_days}",
        below == 0,
        f"{below:,} rows below threshold"
    )

    if len(new_onset) > 0:
        earliest = (
            joined.groupby(["patient_num", key], dropna=False)["days_since_admission"]
            .min()
            .rename("earliest")
            .reset_index()
        )
        checked = new_onset.merge(earliest, on=["patient_num", key], how="left")
        later = (checked["days_since_admission"] > checked["earliest"]).sum()
    else:
        later = 0

    result.add_check(
        "New-onset rows are each patient's earliest occurrence",
        later == 0,
        f"{later:,} rows preceded by an earlier occurrence"
    )
    return result


def validate_vectors(source: pd.DataFrame, vectors: pd.DataFrame, name: str = "") -> ValidationResult:
    """Validate a patient feature matrix against its source table."""
    result = ValidationResult(f"Vectors: {name}" if name else "Vectors")

    features = vectors.drop(columns=["patient_num", "status"])
    if features.shape[1] > 0:
        values = np.unique(features.to_numpy())
        binary = set(values.tolist()) <= {0, 1}
    else:
        values = np.array([])
        binary = True
    result.add_check("Feature cells are 0/1", binary, f"values: {values[:10].tolist()}")

    result.add_check(
        "One row per patient",
        not vectors["patient_num"].duplicated().any(),
        f"{len(vectors):,} rows"
    )

    source_patients = set(source["patient_num"])
    result.add_check(
        "Row set equals source patients",
        set(vectors["patient_num"]) == source_patients,
        f"{len(source_patients):,} source patients"
    )
    return result


def validate_frequency_table(freq: pd.DataFrame, total_patients: int, name: str = "") -> ValidationResult:
    """Validate prevalence percentages."""
    result = ValidationResult(f"Frequencies: {name}" if name else "Frequencies")

    in_range = freq["percent"].between(0, 100).all() if len(freq) else True
    result.add_check("Percent within [0, 100]", in_range)

    if len(freq) and total_patients > 0:
        expected = (freq["count"] / total_patients * 100).round(2)
        consistent = np.allclose(freq["percent"].astype(float), expected.astype(float))
    else:
        consistent = True
    result.add_check(
        "Percent = count / training cohort x 100",
        consistent,
        f"denominator {total_patients:,}"
    )
    return result
