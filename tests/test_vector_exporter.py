"""Tests for one-hot patient vectors and bundle persistence."""
import pytest
import numpy as np
import pandas as pd
from pasc_phenotypes.exporters.vector_exporter import (
    FeatureDimension,
    build_patient_vectors,
    save_bundle,
    load_bundle,
)
from pasc_phenotypes.processing.onset_analyzer import occurrences_after, new_onset_after


@pytest.fixture
def train_cohort():
    return pd.DataFrame({
        "patient_num": ["A", "A", "B", "C"],
        "status": ["Admitted", "Admitted", "Not Admitted", "Admitted"],
    })


class TestBuildPatientVectors:
    """Tests for the wide binary matrix."""

    def test_scenario_vectors(self, joined_rows, train_cohort):
        """A is 1 in the any-occurrence vector and absent from new onset; B is 1 in both."""
        any_vec = build_patient_vectors(
            occurrences_after(joined_rows), FeatureDimension.PHENOTYPE_ROLL, train_cohort
        ).set_index("patient_num")
        new_vec = build_patient_vectors(
            new_onset_after(joined_rows), FeatureDimension.PHENOTYPE_ROLL, train_cohort
        ).set_index("patient_num")

        assert any_vec.loc["A", "Dementias"] == 1
        assert any_vec.loc["B", "Dementias"] == 1
        assert new_vec.loc["B", "Dementias"] == 1
        assert "A" not in new_vec.index

    def test_identifier_and_status_first(self, joined_rows, train_cohort):
        vec = build_patient_vectors(joined_rows, "phecode", train_cohort)
        assert list(vec.columns[:2]) == ["patient_num", "status"]
        assert list(vec.columns[2:]) == ["290.1"]

    def test_status_joined(self, joined_rows, train_cohort):
        vec = build_patient_vectors(joined_rows, "Phenotype", train_cohort).set_index("patient_num")
        assert vec.loc["B", "status"] == "Not Admitted"

    def test_binary_and_zero_filled(self, train_cohort):
        df = pd.DataFrame({
            "patient_num": ["A", "A", "A", "B"],
            "Phenotype": ["Depression", "Depression", "Fatigue", "Fatigue"],
        })
        vec = build_patient_vectors(df, FeatureDimension.PHENOTYPE, train_cohort).set_index("patient_num")
        assert vec.loc["A", "Depression"] == 1
        assert vec.loc["B", "Depression"] == 0
        values = np.unique(vec.drop(columns="status").to_numpy())
        assert set(values.tolist()) <= {0, 1}

    def test_patients_outside_source_not_added(self, joined_rows, train_cohort):
        vec = build_patient_vectors(joined_rows, "Phenotype", train_cohort)
        assert "C" not in set(vec["patient_num"])
        assert not vec["patient_num"].duplicated().any()

    def test_missing_feature_value_gives_zero_row(self, train_cohort):
        df = pd.DataFrame({
            "patient_num": ["A", "B"],
            "Phenotype_roll": ["Dementias", None],
        })
        vec = build_patient_vectors(df, "Phenotype_roll", train_cohort).set_index("patient_num")
        assert vec.loc["B", "Dementias"] == 0

    def test_numeric_feature_labels_become_text(self, train_cohort):
        df = pd.DataFrame({"patient_num": ["A"], "phecode": [290.1]})
        vec = build_patient_vectors(df, "phecode", train_cohort)
        assert "290.1" in vec.columns

    def test_unknown_dimension(self, joined_rows, train_cohort):
        with pytest.raises(ValueError, match="feature dimension"):
            build_patient_vectors(joined_rows, "concept_code", train_cohort)

    def test_empty_source(self, joined_rows, train_cohort):
        vec = build_patient_vectors(joined_rows.iloc[0:0], "Phenotype", train_cohort)
        assert vec.empty
        assert list(vec.columns) == ["patient_num", "status"]


class TestBundles:
    """Tests for bundle persistence."""

    def test_save_and_load(self, tmp_path):
        bundle = {
            "first": pd.DataFrame({"patient_num": ["A"], "status": ["Admitted"], "290": [1]}),
            "second": pd.DataFrame({"Phenotype": ["Fatigue"], "count": [3], "percent": [1.5]}),
        }
        pkl_path = save_bundle(bundle, tmp_path, "vectors")

        assert pkl_path == tmp_path / "vectors.pkl"
        loaded = load_bundle(pkl_path)
        assert set(loaded) == {"first", "second"}
        pd.testing.assert_frame_equal(loaded["first"], bundle["first"])

        parquet = pd.read_parquet(tmp_path / "vectors" / "second.parquet")
        assert parquet.iloc[0]["count"] == 3
