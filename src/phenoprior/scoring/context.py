"""Per-run accumulators and the phase order of a prioritisation run."""

import threading
from enum import Enum

from phenoprior.phenotype.aggregator import SpeciesAggregation
from phenoprior.phenotype.evidence import EvidenceIndex
from phenoprior.phenotype.models import ModelMatch, SeedGene, Species, SpeciesBaseline


class PhaseOrderError(RuntimeError):
    """Raised when a run phase is started out of order or repeated."""


class RunPhase(int, Enum):
    CREATED = 0
    LOADED = 1
    BASELINES = 2
    AGGREGATED = 3
    PROPAGATION = 4
    ASSEMBLED = 5
    NORMALISED = 6


class RunContext:
    """Mutable state of one run, discarded after the results are emitted.

    Species aggregations are merged under a lock with "replace only if
    greater" semantics, so the merged state does not depend on the order
    in which species finish.
    """

    def __init__(self, query_term_ids: list[str]):
        self.query_term_ids = list(query_term_ids)
        self.phase = RunPhase.CREATED
        self.baselines: dict[Species, SpeciesBaseline] = {}
        self.gene_best_scores: dict[str, float] = {}
        self.best_models: dict[Species, dict[str, ModelMatch]] = {}
        self.seed_scores: dict[str, float] = {}
        self.evidence = EvidenceIndex()
        self.species_scored: list[Species] = []
        self.species_skipped: dict[Species, str] = {}
        self._lock = threading.Lock()

    def advance(self, phase: RunPhase) -> None:
        """
        Move to the next phase.

        Raises:
            PhaseOrderError: If phase is not the one directly after the current phase
        """
        if phase.value != self.phase.value + 1:
            raise PhaseOrderError(
                f"Cannot enter phase {phase.name} from {self.phase.name}"
            )
        self.phase = phase

    def require(self, phase: RunPhase) -> None:
        if self.phase != phase:
            raise PhaseOrderError(
                f"Run is in phase {self.phase.name}, expected {phase.name}"
            )

    def merge(self, aggregation: SpeciesAggregation) -> None:
        with self._lock:
            species = aggregation.species
            if aggregation.skipped:
                self.species_skipped[species] = aggregation.skipped_reason
                return
            self.species_scored.append(species)

            for gene_id, score in aggregation.gene_best_scores.items():
                if score > self.gene_best_scores.get(gene_id, 0.0):
                    self.gene_best_scores[gene_id] = score

            species_models = self.best_models.setdefault(species, {})
            for gene_id, model_match in aggregation.best_models.items():
                current = species_models.get(gene_id)
                if current is None or model_match.score > current.score:
                    species_models[gene_id] = model_match

            for gene_id, score in aggregation.seeds.items():
                if score > self.seed_scores.get(gene_id, 0.0):
                    self.seed_scores[gene_id] = score

            self.evidence.merge(aggregation.evidence)

    def seeds(self) -> list[SeedGene]:
        """Seeds by descending score, then gene id, so column order is stable."""
        ordered = sorted(self.seed_scores.items(), key=lambda item: (-item[1], item[0]))
        return [SeedGene(gene_id=gene_id, score=score) for gene_id, score in ordered]

    def best_models_for_gene(self, gene_id: str) -> dict[Species, ModelMatch]:
        return {
            species: models[gene_id]
            for species, models in self.best_models.items()
            if gene_id in models
        }
