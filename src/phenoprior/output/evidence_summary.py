"""Tabular views of prioritisation results."""

import polars as pl

from phenoprior.phenotype.models import Species
from phenoprior.scoring.results import PriorityResult

RESULT_COLUMNS = [
    "gene_id",
    "gene_symbol",
    "final_score",
    "direct_score",
    "human_score",
    "mouse_score",
    "fish_score",
    "walker_score",
    "closest_seed",
    "best_human_model",
    "best_mouse_model",
    "best_fish_model",
    "supporting_species",
    "candidate_gene_match",
    "evidence",
]

RESULT_SCHEMA = {
    "gene_id": pl.String,
    "gene_symbol": pl.String,
    "final_score": pl.Float64,
    "direct_score": pl.Float64,
    "human_score": pl.Float64,
    "mouse_score": pl.Float64,
    "fish_score": pl.Float64,
    "walker_score": pl.Float64,
    "closest_seed": pl.String,
    "best_human_model": pl.String,
    "best_mouse_model": pl.String,
    "best_fish_model": pl.String,
    "supporting_species": pl.String,
    "candidate_gene_match": pl.Boolean,
    "evidence": pl.String,
}


def _best_model_id(result: PriorityResult, species: Species) -> str | None:
    model_match = result.best_models.get(species)
    return model_match.model.model_id if model_match is not None else None


def _result_row(result: PriorityResult) -> dict:
    return {
        "gene_id": result.gene_id,
        "gene_symbol": result.gene_symbol,
        "final_score": result.final_score,
        "direct_score": result.direct_score,
        "human_score": result.human_score,
        "mouse_score": result.mouse_score,
        "fish_score": result.fish_score,
        "walker_score": result.walker_score,
        "closest_seed": result.closest_seed,
        "best_human_model": _best_model_id(result, Species.HUMAN),
        "best_mouse_model": _best_model_id(result, Species.MOUSE),
        "best_fish_model": _best_model_id(result, Species.FISH),
        "supporting_species": ",".join(
            species.value for species in Species if species in result.best_models
        ),
        "candidate_gene_match": result.candidate_gene_match,
        "evidence": result.evidence,
    }


def results_to_frame(results: dict[str, PriorityResult]) -> pl.DataFrame:
    """
    Flatten prioritisation results into one row per gene.

    Args:
        results: gene_id -> PriorityResult

    Returns:
        DataFrame with RESULT_COLUMNS, sorted by final_score DESC then
        gene_id ASC

    Notes:
        - supporting_species lists species with a best model, in
          human, mouse, fish order (empty string if none)
        - best_*_model columns are NULL for species without a hit
    """
    rows = [_result_row(result) for result in results.values()]
    df = pl.DataFrame(rows, schema=RESULT_SCHEMA)
    return df.sort(["final_score", "gene_id"], descending=[True, False])
