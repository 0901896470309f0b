"""Main pipeline for building post-acute phenotype tables and patient vectors."""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, TextIO, Union
import logging

import pandas as pd

from pasc_phenotypes.config.phenotype_config import (
    FREQUENCY_BUNDLE,
    FREQUENCY_SPECS,
    PHECODE_ROLL_COL,
    REPORTS_DIR_NAME,
    VECTORS_BUNDLE,
    VECTOR_SPECS,
    PipelineConfig,
    ensure_directories,
    load_pipeline_config,
)
from pasc_phenotypes.extractors.observation_loader import load_observations
from pasc_phenotypes.processing.cohort_selector import build_cohort, summarize_cohort
from pasc_phenotypes.processing.train_test_splitter import split_train_test
from pasc_phenotypes.processing.phenotype_mapper import (
    broad_code_map,
    curated_code_map,
    join_phenotypes,
    load_curated_phenotypes,
    load_phecode_catalog,
    select_broad_phenotypes,
)
from pasc_phenotypes.processing.onset_analyzer import new_onset_after, occurrences_after
from pasc_phenotypes.reporting.frequency_tables import frequency_table
from pasc_phenotypes.reporting.visualization import (
    generate_frequency_table_html,
    generate_prevalence_scatter,
)
from pasc_phenotypes.exporters.vector_exporter import build_patient_vectors, save_bundle
from pasc_phenotypes.validation.layer_validators import (
    ValidationResult,
    validate_frequency_table,
    validate_new_onset,
    validate_observations,
    validate_split,
    validate_vectors,
)

logger = logging.getLogger(__name__)

ONSET_TITLES = {
    "any": "any occurrence at day >= {days}",
    "new": "new onset at day >= {days}",
}


@dataclass
class PipelineResult:
    """Tables produced by a pipeline run."""

    train: pd.DataFrame
    test: pd.DataFrame
    onset_tables: Dict[str, pd.DataFrame]
    vectors: Dict[str, pd.DataFrame]
    frequencies: Dict[str, pd.DataFrame]
    cohort_summary: pd.DataFrame
    validations: List[ValidationResult] = field(default_factory=list)


def build_onset_tables(
    joined: Dict[str, pd.DataFrame],
    threshold_days: int,
) -> Dict[str, pd.DataFrame]:
    """Any-occurrence and new-onset tables for each phenotype source.

    Args:
        joined: Phenotype-joined training rows keyed by source ('hz', 'neuro')
        threshold_days: Onset threshold

    Returns:
        Dict keyed '{source}_{onset}' with onset in ('any', 'new')
    """
    tables = {}
    for source, df in joined.items():
        tables[f"{source}_any"] = occurrences_after(df, threshold_days)
        tables[f"{source}_new"] = new_onset_after(df, threshold_days, level="rolled")
    return tables


def run_pipeline(
    config: PipelineConfig,
    observations: Optional[Union[str, Path, TextIO]] = None,
    write_outputs: bool = True,
) -> PipelineResult:
    """Run the full phenotype pipeline.

    Args:
        config: Run configuration
        observations: Override for the observations source (path or handle)
        write_outputs: Persist bundles and reports to config.output_dir

    Returns:
        PipelineResult
    """
    validations = []

    # Load and select cohort
    source = observations if observations is not None else config.observations_path
    icd_rows = load_observations(source)
    validations.append(validate_observations(icd_rows))

    cohort = build_cohort(icd_rows, strict=config.strict_status)

    # Split by patient
    train, test = split_train_test(
        cohort, seed=config.seed, probabilities=config.split_probabilities
    )
    validations.append(validate_split(cohort, train, test))

    cohort_summary = summarize_cohort(train, test)
    logger.info(f"Cohort summary:\n{cohort_summary.to_string(index=False)}")

    total_patients = train["patient_num"].nunique()

    # Map phenotypes
    curated = load_curated_phenotypes(config.curated_phenotypes_path)
    catalog = load_phecode_catalog(config.phecode_catalog_path)
    broad = select_broad_phenotypes(catalog, curated, config.broad_groups)

    joined = {
        "hz": join_phenotypes(train, curated_code_map(curated, catalog)),
        "neuro": join_phenotypes(train, broad_code_map(broad)),
    }

    # Onset analysis
    onset_tables = build_onset_tables(joined, config.onset_threshold_days)
    for source_name, df in joined.items():
        result = validate_new_onset(
            df, onset_tables[f"{source_name}_new"],
            config.onset_threshold_days, PHECODE_ROLL_COL,
        )
        result.name = f"{result.name} ({source_name})"
        validations.append(result)

    # Frequency tables
    frequencies = {}
    for spec in FREQUENCY_SPECS:
        onset_df = onset_tables[f"{spec.source}_{spec.onset}"]
        freq = frequency_table(onset_df, spec.label_col, total_patients)
        frequencies[spec.name] = freq
        validations.append(validate_frequency_table(freq, total_patients, spec.name))
        logger.info(f"  {spec.name}: {len(freq):,} phenotype/status rows")

    # Patient vectors
    vectors = {}
    for spec in VECTOR_SPECS:
        onset_df = onset_tables[f"{spec.source}_{spec.onset}"]
        matrix = build_patient_vectors(onset_df, spec.dimension, train)
        vectors[spec.name] = matrix
        validations.append(validate_vectors(onset_df, matrix, spec.name))
        logger.info(
            f"  {spec.name}: {len(matrix):,} patients x {matrix.shape[1] - 2:,} features"
        )

    for result in validations:
        if result.ok:
            logger.info(result.summary())
        else:
            logger.warning(result.report())

    if write_outputs:
        ensure_directories(config.output_dir)
        save_bundle(vectors, config.output_dir, VECTORS_BUNDLE)
        save_bundle(frequencies, config.output_dir, FREQUENCY_BUNDLE)

        if config.write_reports:
            reports_dir = config.output_dir / REPORTS_DIR_NAME
            for spec in FREQUENCY_SPECS:
                onset_title = ONSET_TITLES[spec.onset].format(days=config.onset_threshold_days)
                title = f"{spec.source} phenotypes, {onset_title}"
                generate_prevalence_scatter(
                    frequencies[spec.name], spec.label_col,
                    reports_dir / f"{spec.name}_scatter.html", title=title,
                )
                generate_frequency_table_html(
                    frequencies[spec.name],
                    reports_dir / f"{spec.name}_table.html", title=title,
                )

    logger.info("Pipeline complete!")

    return PipelineResult(
        train=train,
        test=test,
        onset_tables=onset_tables,
        vectors=vectors,
        frequencies=frequencies,
        cohort_summary=cohort_summary,
        validations=validations,
    )


def main():
    """Main entry point for CLI."""
    import argparse

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    parser = argparse.ArgumentParser(description="Build post-acute phenotype vectors")
    parser.add_argument("--config", type=Path, default=None, help="YAML file overriding default settings")
    parser.add_argument("--output", type=Path, default=None, help="Output directory")
    parser.add_argument("--seed", type=int, default=None, help="Train/test split seed")
    parser.add_argument("--strict-status", action="store_true", help="Fail on unrecognized cohort labels")
    parser.add_argument("--no-reports", action="store_true", help="Skip HTML reports")
    args = parser.parse_args()

    config = load_pipeline_config(args.config)
    if args.output is not None:
        config.output_dir = args.output
    if args.seed is not None:
        config.seed = args.seed
    if args.strict_status:
        config.strict_status = True
    if args.no_reports:
        config.write_reports = False

    run_pipeline(config)


if __name__ == "__main__":
    main()
