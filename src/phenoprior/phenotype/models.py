"""Data models for cross-species phenotype matching."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Species(str, Enum):
    """Organisms whose phenotype annotations can be matched to a human query."""

    HUMAN = "human"
    MOUSE = "mouse"
    FISH = "fish"


class PhenotypeTerm(BaseModel):
    """Ontology term (HPO, MP or ZP) with its label."""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str = ""


class TermMatch(BaseModel):
    """Similarity of a query (HPO) term to a term of the target ontology.

    Attributes:
        query_term_id: HPO id from the query set
        match_term_id: HPO/MP/ZP id it was matched to
        score: Semantic similarity (>= 0)
    """

    model_config = ConfigDict(frozen=True)

    query_term_id: str
    match_term_id: str
    score: float = Field(ge=0.0)


class PhenotypeModel(BaseModel):
    """Phenotype-annotated disease, mouse model or zebrafish model for a human gene.

    Attributes:
        model_id: Disease id (human, optionally suffixed "_<gene_id>") or
            MGI/ZFIN model id
        gene_id: Human gene id the model is associated with (via orthology
            for mouse and fish)
        gene_symbol: Human gene symbol
        species: Organism the annotations come from
        phenotype_ids: Annotated ontology term ids
        label: Disease name or model description (may be empty)
    """

    model_config = ConfigDict(frozen=True)

    model_id: str
    gene_id: str
    gene_symbol: str
    species: Species
    phenotype_ids: frozenset[str]
    label: str = ""

    @property
    def disease_id_prefix(self) -> str:
        """Model id up to the first "_" (human model ids carry a gene suffix)."""
        return self.model_id.split("_")[0]


class ModelMatch(BaseModel):
    """Score of one model against the query set, with its best term matches."""

    model_config = ConfigDict(frozen=True)

    model: PhenotypeModel
    score: float = Field(ge=0.0, le=1.0)
    term_matches: tuple[TermMatch, ...] = ()

    @property
    def gene_id(self) -> str:
        return self.model.gene_id

    @property
    def species(self) -> Species:
        return self.model.species


class SpeciesBaseline(BaseModel):
    """Best achievable match scores for the query set in one species.

    CRITICAL: a baseline with best_avg_score == 0 is degenerate and the
    species must be skipped rather than divided by.
    """

    model_config = ConfigDict(frozen=True)

    species: Species
    best_max_score: float = Field(ge=0.0)
    best_avg_score: float = Field(ge=0.0)
    best_matches: tuple[TermMatch, ...] = ()

    @property
    def is_degenerate(self) -> bool:
        return self.best_avg_score == 0 or self.best_max_score == 0


class SeedGene(BaseModel):
    """Gene with a high-quality phenotype hit used as a PPI propagation source."""

    model_config = ConfigDict(frozen=True)

    gene_id: str
    score: float = Field(ge=0.0, le=1.0)


class TermMatchEvidence(BaseModel):
    """Best match of a query term within one model, keyed by gene and model."""

    model_config = ConfigDict(frozen=True)

    gene_id: str
    model_id: str
    species: Species
    query_term_id: str
    match_term_id: str
    score: float
