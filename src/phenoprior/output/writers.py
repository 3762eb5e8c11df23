"""Dual-format TSV+Parquet writer for prioritisation results."""

from datetime import datetime, timezone
from pathlib import Path

import polars as pl
import yaml

from phenoprior.scoring.results import PrioritisationSummary


def write_priority_output(
    df: pl.DataFrame | pl.LazyFrame,
    output_dir: Path,
    filename_base: str = "priorities",
    summary: PrioritisationSummary | None = None,
) -> dict:
    """
    Write prioritised genes to TSV and Parquet with a YAML provenance sidecar.

    Args:
        df: Result frame from results_to_frame()
        output_dir: Directory to write to (created if missing)
        filename_base: Base filename without extension
        summary: Run summary to include in the sidecar

    Returns:
        Dictionary with keys "tsv", "parquet" and "provenance" mapping to
        the written paths

    Notes:
        - Rows are sorted by final_score DESC, gene_id ASC
        - The evidence column holds tab characters, so TSV fields are quoted
          where needed
        - Parquet uses snappy compression via pyarrow
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    if isinstance(df, pl.LazyFrame):
        df = df.collect()

    df = df.sort(["final_score", "gene_id"], descending=[True, False])

    tsv_path = output_dir / f"{filename_base}.tsv"
    parquet_path = output_dir / f"{filename_base}.parquet"
    provenance_path = output_dir / f"{filename_base}.provenance.yaml"

    df.write_csv(tsv_path, separator="\t", include_header=True)
    df.write_parquet(parquet_path, compression="snappy", use_pyarrow=True)

    statistics = {
        "total_genes": df.height,
        "genes_with_evidence": df.filter(pl.col("final_score") > 0).height,
    }
    if "walker_score" in df.columns:
        statistics["genes_with_walker_score"] = df.filter(pl.col("walker_score") > 0).height

    provenance = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "output_files": [tsv_path.name, parquet_path.name],
        "statistics": statistics,
        "column_count": len(df.columns),
        "column_names": df.columns,
    }
    if summary is not None:
        provenance["run_summary"] = summary.model_dump(mode="json")

    with open(provenance_path, "w") as f:
        yaml.dump(provenance, f, default_flow_style=False, sort_keys=False)

    return {
        "tsv": tsv_path,
        "parquet": parquet_path,
        "provenance": provenance_path,
    }
