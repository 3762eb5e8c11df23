"""Orchestration of a prioritisation run over a candidate gene list."""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Sequence

import structlog

from phenoprior.config.schema import (
    BenchmarkTarget,
    PrioritiserConfig,
    RunOptions,
    ScoringThresholds,
)
from phenoprior.network.matrix import ProximityMatrix
from phenoprior.network.propagation import ProximityPropagator
from phenoprior.persistence.duckdb_store import PhenotypeStore
from phenoprior.persistence.provenance import ProvenanceTracker
from phenoprior.phenotype.aggregator import SpeciesMatchAggregator
from phenoprior.phenotype.models import Species, SpeciesBaseline
from phenoprior.phenotype.providers import (
    DataSourceError,
    ModelCatalog,
    TableModelCatalog,
    TableTermSimilarityProvider,
    TermSimilarityProvider,
)
from phenoprior.scoring.assembler import GeneScoreAssembler
from phenoprior.scoring.context import RunContext, RunPhase
from phenoprior.scoring.evidence_text import format_evidence_text
from phenoprior.scoring.rank_normalizer import RankNormalizer
from phenoprior.scoring.results import CandidateGene, PrioritisationSummary, PriorityResult

logger = structlog.get_logger(__name__)

SPECIES_RUN_FLAGS = (
    (Species.HUMAN, "run_human"),
    (Species.MOUSE, "run_mouse"),
    (Species.FISH, "run_fish"),
)


class Prioritiser:
    """
    Score candidate genes by phenotype similarity and PPI proximity.

    Holds the read-only inputs (term similarities, model catalogue,
    diffusion matrix) and the run settings. Each call to prioritise()
    creates a fresh PrioritisationRun, so nothing derived from one query
    leaks into the next.

    Args:
        provider: Term similarity lookups
        catalog: Phenotype model catalogue
        matrix: PPI diffusion matrix. PPI propagation is skipped without one.
        run: Enabled signals
        thresholds: Scoring constants
        benchmark: Known association to suppress, if benchmarking
        label_for: Optional term id -> label lookup for evidence text
        provenance: Optional tracker that records each run phase
    """

    def __init__(
        self,
        provider: TermSimilarityProvider,
        catalog: ModelCatalog,
        matrix: ProximityMatrix | None = None,
        run: RunOptions | None = None,
        thresholds: ScoringThresholds | None = None,
        benchmark: BenchmarkTarget | None = None,
        label_for: Callable[[str], str] | None = None,
        provenance: ProvenanceTracker | None = None,
    ):
        self.provider = provider
        self.catalog = catalog
        self.matrix = matrix
        self.run_options = run or RunOptions()
        self.thresholds = thresholds or ScoringThresholds()
        self.benchmark = benchmark
        self.label_for = label_for
        self.provenance = provenance
        self.last_run: "PrioritisationRun | None" = None

    @classmethod
    def from_config(
        cls,
        config: PrioritiserConfig,
        store: PhenotypeStore,
        provenance: ProvenanceTracker | None = None,
    ) -> "Prioritiser":
        """
        Load the inputs named by a config.

        Args:
            config: Prioritiser configuration
            store: Open store holding term_mappings and phenotype_models
            provenance: Optional tracker for run phases

        Raises:
            DataSourceError: If a reference table is missing
            FileNotFoundError: If PPI is enabled and a matrix file is missing
        """
        provider = TableTermSimilarityProvider.from_store(store)
        catalog = TableModelCatalog.from_store(store)

        matrix = None
        if config.run.run_ppi and config.network is not None:
            matrix = ProximityMatrix.from_files(
                config.network.matrix_path,
                config.network.index_path,
                config.network.use_exponent,
            )
        elif config.run.run_ppi:
            logger.warning("ppi_disabled", reason="no network configured")

        return cls(
            provider=provider,
            catalog=catalog,
            matrix=matrix,
            run=config.run,
            thresholds=config.thresholds,
            benchmark=config.benchmark,
            label_for=provider.label_for,
            provenance=provenance,
        )

    @property
    def enabled_species(self) -> list[Species]:
        return [
            species
            for species, flag in SPECIES_RUN_FLAGS
            if getattr(self.run_options, flag)
        ]

    def start_run(
        self,
        candidates: Sequence[CandidateGene],
        query_term_ids: Sequence[str],
    ) -> "PrioritisationRun":
        """Create a run whose phases the caller steps through."""
        self.last_run = PrioritisationRun(self, candidates, query_term_ids)
        return self.last_run

    def prioritise(
        self,
        candidates: Sequence[CandidateGene],
        query_term_ids: Sequence[str],
    ) -> dict[str, PriorityResult]:
        """
        Run every phase and return gene_id -> PriorityResult.

        The mapping follows the order of candidates. Only candidate genes
        are scored; rank normalisation is relative to the candidate count.
        """
        return self.start_run(candidates, query_term_ids).execute()


class PrioritisationRun:
    """One prioritisation call, stepped through in a fixed phase order.

    Phases: load_externals -> compute_baselines -> aggregate_species ->
    build_propagation -> assemble -> normalise. Calling a phase out of order
    raises PhaseOrderError.
    """

    def __init__(
        self,
        prioritiser: Prioritiser,
        candidates: Sequence[CandidateGene],
        query_term_ids: Sequence[str],
    ):
        self.prioritiser = prioritiser
        self.candidates = list(candidates)
        self.requested_terms = list(dict.fromkeys(query_term_ids))
        self.context = RunContext([])
        self.dropped_terms: list[str] = []
        self.resolved_baselines: dict[Species, SpeciesBaseline] = {}
        self.propagator: ProximityPropagator | None = None
        self.results: dict[str, PriorityResult] = {}
        self.summary: PrioritisationSummary | None = None
        self.aggregator = SpeciesMatchAggregator(
            prioritiser.provider,
            prioritiser.catalog,
            high_quality_cutoff=prioritiser.thresholds.high_quality_cutoff,
            benchmark=prioritiser.benchmark,
        )
        self._normalizer = RankNormalizer(prioritiser.thresholds.rank_ceiling)

    @property
    def query_term_ids(self) -> list[str]:
        return self.context.query_term_ids

    def execute(self) -> dict[str, PriorityResult]:
        self.load_externals()
        self.compute_baselines()
        self.aggregate_species()
        self.build_propagation()
        self.assemble()
        self.normalise()
        return self.results

    def _record_step(self, step_name: str, details: dict) -> None:
        if self.prioritiser.provenance is not None:
            self.prioritiser.provenance.record_step(step_name, details)

    def load_externals(self) -> None:
        """Resolve the query term set and drop terms no enabled species recognises."""
        self.context.advance(RunPhase.LOADED)

        terms = self.requested_terms
        benchmark = self.prioritiser.benchmark
        if not terms and benchmark is not None:
            terms = self._terms_for_disease(benchmark.disease_id)

        species = self.prioritiser.enabled_species
        recognised = []
        for term_id in terms:
            if any(
                any(True for _ in self.prioritiser.provider.matches_for_term(term_id, s))
                for s in species
            ):
                recognised.append(term_id)
            else:
                self.dropped_terms.append(term_id)

        if self.dropped_terms:
            logger.warning(
                "query_terms_dropped",
                dropped_terms=self.dropped_terms,
                reason="no match in any enabled species",
            )

        self.context.query_term_ids = recognised
        logger.info(
            "query_terms_resolved",
            query_terms=len(recognised),
            dropped_terms=len(self.dropped_terms),
            candidates=len(self.candidates),
        )
        self._record_step(
            "load_externals",
            {"query_terms": recognised, "dropped_terms": self.dropped_terms},
        )

    def _terms_for_disease(self, disease_id: str) -> list[str]:
        try:
            human_models = self.prioritiser.catalog.models_for_species(Species.HUMAN)
        except DataSourceError:
            logger.warning("disease_terms_unavailable", disease_id=disease_id)
            return []

        for model in human_models:
            if model.disease_id_prefix == disease_id:
                terms = sorted(model.phenotype_ids)
                logger.info(
                    "query_terms_from_disease",
                    disease_id=disease_id,
                    model_id=model.model_id,
                    query_terms=len(terms),
                )
                return terms

        logger.warning("disease_terms_unavailable", disease_id=disease_id)
        return []

    def compute_baselines(self) -> None:
        """Compute per-species baselines and pick the one each species is normalised by."""
        self.context.advance(RunPhase.BASELINES)

        species_list = self.prioritiser.enabled_species
        mode = self.prioritiser.thresholds.baseline_mode
        needed = list(species_list)
        if mode == "reference" and Species.HUMAN not in needed:
            needed.insert(0, Species.HUMAN)

        for species in needed:
            self.context.baselines[species] = self.aggregator.baseline(species, self.query_term_ids)

        reference = self.context.baselines.get(Species.HUMAN)
        for species in species_list:
            own = self.context.baselines[species]
            if mode == "reference" and reference is not None and not reference.is_degenerate:
                self.resolved_baselines[species] = reference
            else:
                self.resolved_baselines[species] = own

        self._record_step(
            "compute_baselines",
            {
                "baseline_mode": mode,
                "baselines": {
                    species.value: {
                        "best_max_score": baseline.best_max_score,
                        "best_avg_score": baseline.best_avg_score,
                    }
                    for species, baseline in self.context.baselines.items()
                },
            },
        )

    def aggregate_species(self) -> None:
        """Score every model of each enabled species and merge the results."""
        self.context.advance(RunPhase.AGGREGATED)

        species_list = self.prioritiser.enabled_species

        def run_species(species: Species):
            return self.aggregator.aggregate(
                species,
                self.query_term_ids,
                baseline=self.resolved_baselines[species],
            )

        if self.prioritiser.run_options.parallel_species and len(species_list) > 1:
            with ThreadPoolExecutor(max_workers=len(species_list)) as executor:
                futures = [executor.submit(run_species, species) for species in species_list]
                for future in futures:
                    self.context.merge(future.result())
        else:
            for species in species_list:
                self.context.merge(run_species(species))

        logger.info(
            "species_aggregation_complete",
            species_scored=[s.value for s in self.context.species_scored],
            species_skipped={s.value: r for s, r in self.context.species_skipped.items()},
            genes_with_hits=len(self.context.gene_best_scores),
            seed_count=len(self.context.seed_scores),
        )
        self._record_step(
            "aggregate_species",
            {
                "genes_with_hits": len(self.context.gene_best_scores),
                "seed_count": len(self.context.seed_scores),
            },
        )

    def build_propagation(self) -> None:
        """Build the seed-weighted proximity matrix if PPI propagation is enabled."""
        self.context.advance(RunPhase.PROPAGATION)

        matrix = self.prioritiser.matrix
        if not self.prioritiser.run_options.run_ppi or matrix is None:
            self.propagator = None
            return

        self.propagator = ProximityPropagator(
            matrix,
            self.context.seeds(),
            walker_floor=self.prioritiser.thresholds.walker_floor,
        )
        self._record_step("build_propagation", {"seed_count": len(self.propagator.seeds)})

    def assemble(self) -> None:
        self.context.advance(RunPhase.ASSEMBLED)
        assembler = GeneScoreAssembler(self.propagator, self.prioritiser.benchmark)
        self.results = assembler.assemble(self.context, self.candidates)

    def normalise(self) -> None:
        """Fold walker ranks into final scores, then render evidence and the summary."""
        self.context.advance(RunPhase.NORMALISED)
        self._normalizer.normalise(self.results)

        for result in self.results.values():
            result.evidence = format_evidence_text(
                result,
                self.query_term_ids,
                self.prioritiser.label_for,
            )

        self.summary = PrioritisationSummary(
            total_genes=len(self.results),
            genes_with_evidence=sum(1 for r in self.results.values() if r.has_evidence),
            query_terms=self.query_term_ids,
            dropped_terms=self.dropped_terms,
            seed_count=len(self.context.seed_scores),
            species_scored=[
                species for species, _ in SPECIES_RUN_FLAGS
                if species in self.context.species_scored
            ],
            species_skipped=dict(self.context.species_skipped),
        )

        logger.info(
            "prioritisation_complete",
            total_genes=self.summary.total_genes,
            genes_with_evidence=self.summary.genes_with_evidence,
            seed_count=self.summary.seed_count,
        )
        logger.info(self.summary.describe())
        self._record_step(
            "normalise",
            {
                "total_genes": self.summary.total_genes,
                "genes_with_evidence": self.summary.genes_with_evidence,
            },
        )
