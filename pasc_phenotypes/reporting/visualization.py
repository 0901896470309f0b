"""
Visualization generation for phenotype prevalence review.
"""

from pathlib import Path
from typing import Optional
import logging

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from pasc_phenotypes.config.phenotype_config import GROUP_COL

logger = logging.getLogger(__name__)

STATUS_COLORS = {
    "Admitted": "#d62728",
    "Not Admitted": "#1f77b4",
}


def build_prevalence_scatter(freq: pd.DataFrame, label_col: str, title: str) -> go.Figure:
    """
    Faceted scatter of prevalence by phenotype.

    One panel per phenotype group; points are coloured by admission status
    and labelled with the raw patient count.

    Args:
        freq: Output of frequency_table
        label_col: Phenotype column in freq
        title: Figure title

    Returns:
        Plotly figure
    """
    fig = px.scatter(
        freq,
        x=label_col,
        y="percent",
        color="status",
        facet_col=GROUP_COL,
        facet_col_wrap=2,
        text="count",
        color_discrete_map=STATUS_COLORS,
        hover_data={"count": True, "percent": ":.2f"},
        title=title,
    )
    fig.update_traces(textposition="top center")

    # Each panel shows only its own phenotypes
    fig.update_xaxes(matches=None, showticklabels=True, tickangle=-45, title_text="")
    fig.for_each_annotation(lambda a: a.update(text=a.text.split("=")[-1]))

    fig.update_layout(
        yaxis_title="Percent of training cohort",
        height=max(600, 350 * ((freq[GROUP_COL].nunique() + 1) // 2)),
        width=1400,
        hovermode="closest",
    )
    return fig


def generate_prevalence_scatter(
    freq: pd.DataFrame,
    label_col: str,
    output_path: Path,
    title: str = "Phenotype Prevalence After Index Admission",
) -> Optional[Path]:
    """
    Write the prevalence scatter as interactive HTML.

    Args:
        freq: Output of frequency_table
        label_col: Phenotype column in freq
        output_path: Path to save HTML
        title: Figure title

    Returns:
        output_path, or None when there is nothing to plot
    """
    output_path = Path(output_path)
    if freq.empty:
        logger.info(f"  No prevalence data to plot (skipping {output_path.name})")
        return None

    fig = build_prevalence_scatter(freq, label_col, title)
    fig.write_html(
        output_path,
        include_plotlyjs='cdn',
        config={'displayModeBar': True, 'displaylogo': False}
    )
    logger.info(f"  Saved prevalence scatter to: {output_path}")
    return output_path


def generate_frequency_table_html(
    freq: pd.DataFrame,
    output_path: Path,
    title: str = "Phenotype Frequencies",
) -> Path:
    """
    Write the frequency table as a static HTML table.

    The plotly table scrolls but has no sorting or filtering controls.

    Args:
        freq: Output of frequency_table
        output_path: Path to save HTML
        title: Table title

    Returns:
        output_path
    """
    output_path = Path(output_path)
    fig = go.Figure(data=[
        go.Table(
            header=dict(
                values=[f"<b>{c}</b>" for c in freq.columns],
                fill_color="lightgrey",
                align="left",
            ),
            cells=dict(
                values=[freq[c].tolist() for c in freq.columns],
                align="left",
            ),
        )
    ])
    fig.update_layout(title=title, height=max(400, 30 * len(freq) + 150))

    fig.write_html(output_path, include_plotlyjs='cdn')
    logger.info(f"  Saved frequency table to: {output_path}")
    return output_path
