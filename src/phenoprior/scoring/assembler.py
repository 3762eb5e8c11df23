"""Provisional per-gene results from direct and walker scores."""

from typing import Sequence

import structlog

from phenoprior.config.schema import BenchmarkTarget
from phenoprior.network.propagation import ProximityPropagator
from phenoprior.phenotype.models import Species
from phenoprior.scoring.context import RunContext
from phenoprior.scoring.results import CandidateGene, PriorityResult

logger = structlog.get_logger(__name__)


class GeneScoreAssembler:
    """Build one provisional PriorityResult per candidate gene.

    final_score starts as the direct score. Walker scores are only
    reported here; folding them into final_score is left to the rank
    normaliser.
    """

    def __init__(
        self,
        propagator: ProximityPropagator | None = None,
        benchmark: BenchmarkTarget | None = None,
    ):
        self.propagator = propagator
        self.benchmark = benchmark

    def assemble(
        self,
        context: RunContext,
        candidates: Sequence[CandidateGene],
    ) -> dict[str, PriorityResult]:
        results: dict[str, PriorityResult] = {}

        for candidate in candidates:
            gene_id = candidate.gene_id
            best_models = context.best_models_for_gene(gene_id)
            direct_score = context.gene_best_scores.get(gene_id, 0.0)

            walker_score, closest_seed = 0.0, None
            if self.propagator is not None:
                walker_score, closest_seed = self.propagator.walker_score(gene_id)

            ppi_models = {}
            if closest_seed is not None:
                ppi_models = context.best_models_for_gene(closest_seed)

            results[gene_id] = PriorityResult(
                gene_id=gene_id,
                gene_symbol=candidate.gene_symbol,
                direct_score=direct_score,
                human_score=_species_score(best_models, Species.HUMAN),
                mouse_score=_species_score(best_models, Species.MOUSE),
                fish_score=_species_score(best_models, Species.FISH),
                walker_score=walker_score,
                final_score=direct_score,
                best_models=best_models,
                closest_seed=closest_seed,
                ppi_models=ppi_models,
                candidate_gene_match=(
                    self.benchmark is not None
                    and self.benchmark.matches_candidate_gene(candidate.gene_symbol)
                ),
            )

        logger.info(
            "provisional_scores_assembled",
            genes=len(results),
            genes_with_direct_score=sum(1 for r in results.values() if r.direct_score > 0),
            genes_with_walker_score=sum(1 for r in results.values() if r.walker_score > 0),
        )

        return results


def _species_score(best_models, species: Species) -> float:
    model_match = best_models.get(species)
    return model_match.score if model_match is not None else 0.0
