"""
PASC Phenotype Configuration
============================

Central configuration for the post-acute phenotype pipeline.
"""

from pathlib import Path
from dataclasses import dataclass, fields
from typing import Dict, List, Optional, Tuple
import yaml


# =============================================================================
# PATH CONFIGURATION
# =============================================================================

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DATA_DIR = PROJECT_ROOT / "Data"
OUTPUT_DIR = PROJECT_ROOT / "outputs"

# Input data
OBSERVATIONS_FILE = DATA_DIR / "LocalPatientObservations.csv"
CURATED_PHENOTYPES_FILE = DATA_DIR / "hz_phenotypes.csv"
PHECODE_CATALOG_FILE = DATA_DIR / "phecode_icd10cm.csv"

# Output bundles
VECTORS_BUNDLE = "patient_vectors"
FREQUENCY_BUNDLE = "frequency_tables"
REPORTS_DIR_NAME = "reports"


# =============================================================================
# INPUT SCHEMAS
# =============================================================================

OBSERVATION_COLUMNS = [
    "patient_num", "concept_type", "concept_code",
    "days_since_admission", "cohort",
]

INCLUSION_FLAG_COLUMN = "include"
CURATED_COLUMNS = ["phecode", "description", "group", INCLUSION_FLAG_COLUMN]

CATALOG_COLUMNS = ["phecode", "phecode_str", "icd10cm", "icd10cm_str", "group"]
CATALOG_OPTIONAL_ICD9_COLUMN = "icd9cm"

# Values of the inclusion flag that mark a curated phenotype as in use
INCLUSION_TRUE_VALUES = {"1", "1.0", "true", "t", "yes", "y"}


# =============================================================================
# COHORT DEFINITION
# =============================================================================

ICD_CONCEPT_TYPES = ("DIAG-ICD9", "DIAG-ICD10")

# Case-sensitive substrings of the cohort label (e.g. PosAdm, PosNotAdm)
POSITIVE_COHORT_MARKER = "Pos"
NOT_ADMITTED_MARKER = "NotAdm"
ADMITTED_MARKER = "Adm"

STATUS_ADMITTED = "Admitted"
STATUS_NOT_ADMITTED = "Not Admitted"
COVID_POSITIVE = "Positive"

SPLIT_TRAIN = "train"
SPLIT_TEST = "test"
SPLIT_SEED = 2021
SPLIT_PROBABILITIES = (0.8, 0.2)


# =============================================================================
# PHENOTYPES
# =============================================================================

# Catalog groups kept in the broad neuro/mental-health set
BROAD_PHENOTYPE_GROUPS = ("neurological", "mental disorders")

# Days since index admission at or after which a diagnosis counts as post-acute
ONSET_THRESHOLD_DAYS = 90

# Column names produced by the phenotype mapper
PHENOTYPE_COL = "Phenotype"
PHECODE_COL = "phecode"
PHECODE_ROLL_COL = "PheCode_roll"
PHENOTYPE_ROLL_COL = "Phenotype_roll"
GROUP_COL = "group"


# =============================================================================
# OUTPUT DEFINITIONS
# =============================================================================

@dataclass(frozen=True)
class VectorSpec:
    """One patient-by-phenotype matrix in the vector bundle."""

    name: str
    source: str         # "hz" (curated) or "neuro" (broad catalog)
    onset: str          # "any" or "new"
    dimension: str      # FeatureDimension value


@dataclass(frozen=True)
class FrequencySpec:
    """One count/percent table in the frequency bundle."""

    name: str
    source: str
    onset: str
    label_col: str


VECTOR_SPECS: List[VectorSpec] = [
    VectorSpec("hz_phenotype_after_90", "hz", "any", PHENOTYPE_COL),
    VectorSpec("hz_phenotype_roll_after_90", "hz", "any", PHENOTYPE_ROLL_COL),
    VectorSpec("hz_phenotype_roll_new_onset", "hz", "new", PHENOTYPE_ROLL_COL),
    VectorSpec("neuro_phecode_after_90", "neuro", "any", PHECODE_COL),
    VectorSpec("neuro_phenotype_roll_after_90", "neuro", "any", PHENOTYPE_ROLL_COL),
    VectorSpec("neuro_phenotype_roll_new_onset", "neuro", "new", PHENOTYPE_ROLL_COL),
]

FREQUENCY_SPECS: List[FrequencySpec] = [
    FrequencySpec("hz_after_90", "hz", "any", PHENOTYPE_COL),
    FrequencySpec("hz_new_onset", "hz", "new", PHENOTYPE_ROLL_COL),
    FrequencySpec("neuro_after_90", "neuro", "any", PHENOTYPE_COL),
    FrequencySpec("neuro_new_onset", "neuro", "new", PHENOTYPE_ROLL_COL),
]


# =============================================================================
# RUN CONFIGURATION
# =============================================================================

@dataclass
class PipelineConfig:
    """Run parameters for a single pipeline execution."""

    observations_path: Path = OBSERVATIONS_FILE
    curated_phenotypes_path: Path = CURATED_PHENOTYPES_FILE
    phecode_catalog_path: Path = PHECODE_CATALOG_FILE
    output_dir: Path = OUTPUT_DIR

    seed: int = SPLIT_SEED
    split_probabilities: Tuple[float, float] = SPLIT_PROBABILITIES
    onset_threshold_days: int = ONSET_THRESHOLD_DAYS
    broad_groups: Tuple[str, ...] = BROAD_PHENOTYPE_GROUPS

    # Raise on cohort labels that match neither admission marker
    strict_status: bool = False
    write_reports: bool = True

    def __post_init__(self):
        for name in ("observations_path", "curated_phenotypes_path",
                     "phecode_catalog_path", "output_dir"):
            setattr(self, name, Path(getattr(self, name)))
        self.split_probabilities = tuple(self.split_probabilities)
        self.broad_groups = tuple(self.broad_groups)


def load_pipeline_config(yaml_path: Optional[Path] = None) -> PipelineConfig:
    """
    Build a PipelineConfig, overriding defaults from a YAML file.

    Args:
        yaml_path: Optional YAML file with PipelineConfig field names as keys

    Returns:
        PipelineConfig instance
    """
    if yaml_path is None:
        return PipelineConfig()

    yaml_path = Path(yaml_path)
    if not yaml_path.exists():
        raise FileNotFoundError(f"Config file not found: {yaml_path}")

    with open(yaml_path, 'r') as f:
        overrides: Dict = yaml.safe_load(f) or {}

    known = {f.name for f in fields(PipelineConfig)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ValueError(f"Unknown config keys in {yaml_path}: {unknown}")

    return PipelineConfig(**overrides)


def ensure_directories(output_dir: Path = OUTPUT_DIR):
    """Create output directories if they don't exist."""
    for d in [output_dir, output_dir / REPORTS_DIR_NAME]:
        d.mkdir(parents=True, exist_ok=True)
