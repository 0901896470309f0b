"""Tests for PheCode mapping."""
import pytest
import pandas as pd
from pasc_phenotypes.processing.phenotype_mapper import (
    load_curated_phenotypes,
    load_phecode_catalog,
    curated_code_map,
    select_broad_phenotypes,
    broad_code_map,
    build_phenotype_roll_lookup,
    join_phenotypes,
    roll_phecode,
)


@pytest.fixture
def curated(data_files):
    return load_curated_phenotypes(data_files["curated"])


@pytest.fixture
def catalog(data_files):
    return load_phecode_catalog(data_files["catalog"])


def make_train(codes, days=None):
    days = days or [100] * len(codes)
    return pd.DataFrame({
        "patient_num": [f"P{i}" for i in range(len(codes))],
        "status": ["Admitted"] * len(codes),
        "concept_code": codes,
        "days_since_admission": days,
    })


class TestRollPhecode:
    """Tests for phecode truncation."""

    def test_truncates_decimal(self):
        assert roll_phecode("290.11") == 290

    def test_integer_code(self):
        assert roll_phecode("345") == 345

    def test_missing(self):
        assert roll_phecode(None) is None
        assert roll_phecode("") is None


class TestLoadReferences:
    """Tests for reference table loading."""

    def test_curated_keeps_flagged_rows(self, curated):
        assert set(curated["phecode"]) == {"290.1", "296.2", "783"}
        assert "Phenotype" in curated.columns

    def test_phecode_kept_as_text(self, tmp_path):
        path = tmp_path / "curated.csv"
        path.write_text("phecode,description,group,include\n290.10,Dementias,mental disorders,TRUE\n")
        result = load_curated_phenotypes(path)
        assert result.iloc[0]["phecode"] == "290.10"

    def test_missing_reference_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_phecode_catalog(tmp_path / "missing.csv")

    def test_catalog_missing_columns(self, tmp_path):
        path = tmp_path / "catalog.csv"
        path.write_text("phecode,icd10cm\n290.1,F03.90\n")
        with pytest.raises(ValueError, match="phecode_str"):
            load_phecode_catalog(path)


class TestBroadSelection:
    """Tests for the neuro/mental-health selection with curated rescue."""

    def test_keeps_groups_and_rescues_curated(self, catalog, curated):
        broad = select_broad_phenotypes(catalog, curated)
        phecodes = set(broad["phecode"])
        assert {"290.1", "290.11", "296.2", "345"} <= phecodes
        # symptoms group, rescued because it is curated
        assert "783" in phecodes
        assert "401.1" not in phecodes

    def test_broad_labels_from_catalog(self, catalog, curated):
        code_map = broad_code_map(select_broad_phenotypes(catalog, curated))
        row = code_map[code_map["phecode"] == "290.11"].iloc[0]
        assert row["Phenotype"] == "Alzheimer's disease"
        assert row["icd_code"] == "G30.9"


class TestCodeMaps:
    """Tests for curated ICD code maps."""

    def test_curated_codes_from_catalog(self, curated, catalog):
        code_map = curated_code_map(curated, catalog)
        assert set(code_map["icd_code"]) == {"F03.90", "F32.9", "R53.83"}
        assert list(code_map.columns) == ["phecode", "Phenotype", "group", "icd_code"]

    def test_optional_icd9_column(self, curated):
        catalog = pd.DataFrame({
            "phecode": ["296.2"],
            "phecode_str": ["Depression"],
            "icd10cm": ["F32.9"],
            "icd10cm_str": ["MDD"],
            "group": ["mental disorders"],
            "icd9cm": ["311"],
        })
        code_map = curated_code_map(curated, catalog)
        assert set(code_map["icd_code"]) == {"F32.9", "311"}


class TestRollLookup:
    """Tests for the representative rolled label."""

    def test_first_member_names_group(self):
        code_map = pd.DataFrame({
            "phecode": ["290.11", "290.1", "296.2"],
            "Phenotype": ["Alzheimer's disease", "Dementias", "Depression"],
        })
        lookup = build_phenotype_roll_lookup(code_map).set_index("PheCode_roll")
        assert lookup.loc[290, "Phenotype_roll"] == "Dementias"
        assert lookup.loc[296, "Phenotype_roll"] == "Depression"


class TestJoinPhenotypes:
    """Tests for the diagnosis-to-phenotype join."""

    def test_unmatched_rows_dropped(self, curated, catalog):
        train = make_train(["F03.90", "I10"])
        joined = join_phenotypes(train, curated_code_map(curated, catalog))
        assert list(joined["patient_num"]) == ["P0"]

    def test_code_normalization(self, curated, catalog):
        train = make_train([" f03.90 "])
        joined = join_phenotypes(train, curated_code_map(curated, catalog))
        assert len(joined) == 1
        assert joined.iloc[0]["concept_code"] == " f03.90 "

    def test_multi_match_expands_rows(self):
        """A code mapped to two phecodes yields two rows."""
        code_map = pd.DataFrame({
            "phecode": ["290.1", "290.11"],
            "Phenotype": ["Dementias", "Alzheimer's disease"],
            "group": ["mental disorders", "neurological"],
            "icd_code": ["F03.90", "F03.90"],
        })
        joined = join_phenotypes(make_train(["F03.90"]), code_map)
        assert len(joined) == 2
        assert set(joined["phecode"]) == {"290.1", "290.11"}
        assert set(joined["Phenotype_roll"]) == {"Dementias"}

    def test_adds_roll_columns(self, curated, catalog):
        joined = join_phenotypes(make_train(["R53.83"]), curated_code_map(curated, catalog))
        row = joined.iloc[0]
        assert row["PheCode_roll"] == 783
        assert row["Phenotype_roll"] == "Fatigue"
