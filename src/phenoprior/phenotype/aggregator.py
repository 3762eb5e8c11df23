"""Per-species model scoring, seed nomination and evidence collection."""

from dataclasses import dataclass, field
from typing import Sequence

import structlog

from phenoprior.config.schema import BenchmarkTarget
from phenoprior.phenotype.baseline import SpeciesTermMatches, compute_species_baseline
from phenoprior.phenotype.evidence import EvidenceIndex
from phenoprior.phenotype.matcher import SemanticMatcher
from phenoprior.phenotype.models import ModelMatch, Species, SpeciesBaseline
from phenoprior.phenotype.providers import DataSourceError, ModelCatalog, TermSimilarityProvider
from phenoprior.phenotype.species import profile_for

logger = structlog.get_logger(__name__)


@dataclass
class SpeciesAggregation:
    """Partial results of scoring one species.

    Every map holds the best value per gene, so aggregations of different
    species can be merged in any order by taking the maximum.
    """

    species: Species
    baseline: SpeciesBaseline | None = None
    gene_best_scores: dict[str, float] = field(default_factory=dict)
    best_models: dict[str, ModelMatch] = field(default_factory=dict)
    seeds: dict[str, float] = field(default_factory=dict)
    evidence: EvidenceIndex = field(default_factory=EvidenceIndex)
    models_scored: int = 0
    models_matched: int = 0
    models_suppressed: int = 0
    skipped_reason: str | None = None

    @property
    def skipped(self) -> bool:
        return self.skipped_reason is not None


class SpeciesMatchAggregator:
    """Score every model of a species and keep the best hit per gene.

    Args:
        provider: Term similarity lookups
        catalog: Phenotype model catalogue
        high_quality_cutoff: Model scores strictly above this make the gene a seed
        benchmark: Known association whose models are suppressed, if benchmarking
    """

    def __init__(
        self,
        provider: TermSimilarityProvider,
        catalog: ModelCatalog,
        high_quality_cutoff: float = 0.6,
        benchmark: BenchmarkTarget | None = None,
    ):
        self.provider = provider
        self.catalog = catalog
        self.high_quality_cutoff = high_quality_cutoff
        self.benchmark = benchmark

    def term_matches(self, species: Species, query_term_ids: Sequence[str]) -> SpeciesTermMatches:
        return SpeciesTermMatches.from_provider(self.provider, query_term_ids, species)

    def baseline(self, species: Species, query_term_ids: Sequence[str]) -> SpeciesBaseline:
        """Best achievable scores of the query set in a species' own ontology."""
        return compute_species_baseline(
            self.term_matches(species, query_term_ids),
            profile_for(species),
        )

    def aggregate(
        self,
        species: Species,
        query_term_ids: Sequence[str],
        baseline: SpeciesBaseline | None = None,
    ) -> SpeciesAggregation:
        """Score all models of one species.

        Args:
            species: Organism to score
            query_term_ids: Recognised query HPO ids
            baseline: Normalising baseline. Defaults to the species' own.

        Returns:
            SpeciesAggregation. A species with no models or a degenerate
            baseline comes back empty with skipped_reason set.
        """
        aggregation = SpeciesAggregation(species=species)
        term_matches = self.term_matches(species, query_term_ids)

        if baseline is None:
            baseline = compute_species_baseline(term_matches, profile_for(species))
        aggregation.baseline = baseline

        if baseline.is_degenerate:
            aggregation.skipped_reason = "degenerate_baseline"
            logger.warning(
                "species_skipped",
                species=species.value,
                reason=aggregation.skipped_reason,
            )
            return aggregation

        try:
            models = list(self.catalog.models_for_species(species))
        except DataSourceError as e:
            aggregation.skipped_reason = "no_data"
            logger.warning(
                "species_skipped",
                species=species.value,
                reason=aggregation.skipped_reason,
                error=str(e),
            )
            return aggregation

        matcher = SemanticMatcher(term_matches, baseline)

        for model in models:
            aggregation.models_scored += 1
            if self.benchmark is not None and self.benchmark.is_benchmark_hit(
                model.model_id, model.gene_symbol
            ):
                aggregation.models_suppressed += 1
                continue

            model_match = matcher.match(model)
            if model_match is None or model_match.score <= 0:
                continue
            aggregation.models_matched += 1
            self._record(aggregation, model_match)

        logger.info(
            "species_aggregated",
            species=species.value,
            models_scored=aggregation.models_scored,
            models_matched=aggregation.models_matched,
            models_suppressed=aggregation.models_suppressed,
            genes_with_hits=len(aggregation.gene_best_scores),
            seeds=len(aggregation.seeds),
        )

        return aggregation

    def _record(self, aggregation: SpeciesAggregation, model_match: ModelMatch) -> None:
        gene_id = model_match.gene_id
        score = model_match.score

        if score > aggregation.gene_best_scores.get(gene_id, 0.0):
            aggregation.gene_best_scores[gene_id] = score

        current = aggregation.best_models.get(gene_id)
        if current is None or _is_better(model_match, current):
            aggregation.best_models[gene_id] = model_match

        if score > self.high_quality_cutoff and score > aggregation.seeds.get(gene_id, 0.0):
            aggregation.seeds[gene_id] = score

        aggregation.evidence.add_model_match(model_match)


def _is_better(candidate: ModelMatch, current: ModelMatch) -> bool:
    # equal scores resolved by model id so the winner is order independent
    if candidate.score != current.score:
        return candidate.score > current.score
    return candidate.model.model_id < current.model.model_id
