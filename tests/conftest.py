"""Shared fixtures for phenotype pipeline tests."""
import pytest
import pandas as pd


SAMPLE_OBSERVATIONS = """patient_num,concept_type,concept_code,days_since_admission,cohort
P01,DIAG-ICD10,F03.90,30,PosAdm
P01,DIAG-ICD10,F03.90,120,PosAdm
P02,DIAG-ICD10,F03.90,150,PosNotAdm
P02,DIAG-ICD10,F32.9,200,PosNotAdm
P03,DIAG-ICD10,G40.909,95,PosAdm
P03,LAB-LOINC,2160-0,10,PosAdm
P04,DIAG-ICD10,R53.83,100,PosNotAdm
P05,DIAG-ICD10,I10,100,PosAdm
P06,DIAG-ICD10,F32.9,100,NegAdm
"""

SAMPLE_CURATED = """phecode,description,group,include
290.1,Dementias,mental disorders,1
296.2,Depression,mental disorders,1
783,Fatigue,symptoms,1
345,Epilepsy,neurological,0
"""

SAMPLE_CATALOG = """phecode,phecode_str,icd10cm,icd10cm_str,group
290.1,Dementias,F03.90,Unspecified dementia,mental disorders
290.11,Alzheimer's disease,G30.9,Alzheimer's disease unspecified,neurological
296.2,Depression,F32.9,Major depressive disorder single episode,mental disorders
345,Epilepsy,G40.909,Epilepsy unspecified,neurological
783,Fatigue,R53.83,Other fatigue,symptoms
401.1,Essential hypertension,I10,Essential hypertension,circulatory system
"""


@pytest.fixture
def data_files(tmp_path):
    """Write the sample inputs to disk."""
    paths = {
        "observations": tmp_path / "observations.csv",
        "curated": tmp_path / "curated.csv",
        "catalog": tmp_path / "catalog.csv",
    }
    paths["observations"].write_text(SAMPLE_OBSERVATIONS)
    paths["curated"].write_text(SAMPLE_CURATED)
    paths["catalog"].write_text(SAMPLE_CATALOG)
    return paths


@pytest.fixture
def joined_rows():
    """Phenotype-joined rows for the day-30/120 vs day-150 scenario."""
    return pd.DataFrame({
        "patient_num": ["A", "A", "B"],
        "status": ["Admitted", "Admitted", "Not Admitted"],
        "concept_code": ["F03.90", "F03.90", "F03.90"],
        "days_since_admission": [30, 120, 150],
        "phecode": ["290.1", "290.1", "290.1"],
        "Phenotype": ["Dementias", "Dementias", "Dementias"],
        "group": ["mental disorders"] * 3,
        "PheCode_roll": pd.array([290, 290, 290], dtype="Int64"),
        "Phenotype_roll": ["Dementias", "Dementias", "Dementias"],
    })
