"""Result types of a prioritisation run."""

from pydantic import BaseModel, ConfigDict, Field

from phenoprior.phenotype.models import ModelMatch, Species


class CandidateGene(BaseModel):
    """Gene supplied by the caller for scoring."""

    model_config = ConfigDict(frozen=True)

    gene_id: str
    gene_symbol: str = ""


class PriorityResult(BaseModel):
    """Phenotype and network evidence for one candidate gene.

    Attributes:
        gene_id: Candidate gene id
        gene_symbol: Candidate gene symbol
        direct_score: Best model score across the enabled species
        human_score: Best human disease model score
        mouse_score: Best mouse model score
        fish_score: Best zebrafish model score
        walker_score: Seed-weighted PPI proximity (0 without network evidence)
        final_score: max(direct_score, rank-normalised walker score)
        best_models: Best scoring model per species for this gene
        closest_seed: Seed gene that produced the walker score
        ppi_models: Best models of the closest seed, per species
        candidate_gene_match: Gene is the benchmarking candidate
        evidence: Tab separated evidence text
    """

    gene_id: str
    gene_symbol: str = ""
    direct_score: float = Field(default=0.0, ge=0.0, le=1.0)
    human_score: float = Field(default=0.0, ge=0.0, le=1.0)
    mouse_score: float = Field(default=0.0, ge=0.0, le=1.0)
    fish_score: float = Field(default=0.0, ge=0.0, le=1.0)
    walker_score: float = Field(default=0.0, ge=0.0)
    final_score: float = Field(default=0.0, ge=0.0, le=1.0)
    best_models: dict[Species, ModelMatch] = Field(default_factory=dict)
    closest_seed: str | None = None
    ppi_models: dict[Species, ModelMatch] = Field(default_factory=dict)
    candidate_gene_match: bool = False
    evidence: str = ""

    def species_score(self, species: Species) -> float:
        return {
            Species.HUMAN: self.human_score,
            Species.MOUSE: self.mouse_score,
            Species.FISH: self.fish_score,
        }[species]

    @property
    def has_evidence(self) -> bool:
        return self.final_score > 0


class PrioritisationSummary(BaseModel):
    """Counts describing one prioritisation run."""

    total_genes: int = 0
    genes_with_evidence: int = 0
    query_terms: list[str] = Field(default_factory=list)
    dropped_terms: list[str] = Field(default_factory=list)
    seed_count: int = 0
    species_scored: list[Species] = Field(default_factory=list)
    species_skipped: dict[Species, str] = Field(default_factory=dict)

    @property
    def evidence_fraction(self) -> float:
        if self.total_genes == 0:
            return 0.0
        return self.genes_with_evidence / self.total_genes

    def describe(self) -> str:
        return (
            f"Phenotype evidence available for {self.genes_with_evidence} of "
            f"{self.total_genes} genes ({100 * self.evidence_fraction:.1f}%)"
        )
