"""Cross-species phenotype semantic matching."""

from phenoprior.phenotype.aggregator import SpeciesAggregation, SpeciesMatchAggregator
from phenoprior.phenotype.baseline import SpeciesTermMatches, compute_species_baseline
from phenoprior.phenotype.evidence import EVIDENCE_COLUMNS, EvidenceIndex
from phenoprior.phenotype.matcher import SemanticMatcher
from phenoprior.phenotype.models import (
    ModelMatch,
    PhenotypeModel,
    PhenotypeTerm,
    SeedGene,
    Species,
    SpeciesBaseline,
    TermMatch,
    TermMatchEvidence,
)
from phenoprior.phenotype.providers import (
    DataSourceError,
    ModelCatalog,
    TableModelCatalog,
    TableTermSimilarityProvider,
    TermSimilarityProvider,
)
from phenoprior.phenotype.species import SPECIES_PROFILES, SpeciesProfile, profile_for

__all__ = [
    "Species",
    "PhenotypeTerm",
    "PhenotypeModel",
    "TermMatch",
    "ModelMatch",
    "SpeciesBaseline",
    "SeedGene",
    "TermMatchEvidence",
    "TermSimilarityProvider",
    "ModelCatalog",
    "TableTermSimilarityProvider",
    "TableModelCatalog",
    "DataSourceError",
    "SpeciesProfile",
    "SPECIES_PROFILES",
    "profile_for",
    "SpeciesTermMatches",
    "compute_species_baseline",
    "SemanticMatcher",
    "EvidenceIndex",
    "EVIDENCE_COLUMNS",
    "SpeciesAggregation",
    "SpeciesMatchAggregator",
]
