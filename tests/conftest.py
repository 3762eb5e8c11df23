"""Shared fixtures: a small two-term query with human and mouse annotations.

Query terms H1 and H2. Human self matches score 1.0; mouse mappings are
H1-M1 0.8, H2-M2 0.9, H1-M2 0.1 and a weak H1-M3 0.2.

Genes:
- A (symbol GA): disease OMIM:100 {H1, H2}, mouse model MGI:1 {M1, M2}
- C (symbol GC): mouse model MGI:2 {M3}
- D (symbol GD): mouse model MGI:3 annotated with an unmapped term only
"""

import numpy as np
import polars as pl
import pytest

from phenoprior.network import ProximityMatrix
from phenoprior.phenotype import TableModelCatalog, TableTermSimilarityProvider
from phenoprior.scoring import CandidateGene


@pytest.fixture
def term_mappings():
    return pl.DataFrame({
        "query_term_id": ["H1", "H2", "H1", "H2", "H1", "H1"],
        "match_term_id": ["H1", "H2", "M1", "M2", "M2", "M3"],
        "score": [1.0, 1.0, 0.8, 0.9, 0.1, 0.2],
        "species": ["human", "human", "mouse", "mouse", "mouse", "mouse"],
    })


@pytest.fixture
def phenotype_models():
    return pl.DataFrame({
        "model_id": ["OMIM:100_A", "MGI:1", "MGI:2", "MGI:3"],
        "gene_id": ["A", "A", "C", "D"],
        "gene_symbol": ["GA", "GA", "GC", "GD"],
        "species": ["human", "mouse", "mouse", "mouse"],
        "phenotype_ids": [["H1", "H2"], ["M1", "M2"], ["M3"], ["M99"]],
        "label": ["Test disease", "", "", ""],
    })


@pytest.fixture
def provider(term_mappings):
    return TableTermSimilarityProvider(
        term_mappings,
        labels={"H1": "Short stature", "H2": "Seizure"},
    )


@pytest.fixture
def catalog(phenotype_models):
    return TableModelCatalog(phenotype_models)


@pytest.fixture
def proximity_matrix():
    """Genes A, B, C, D. Column A holds B=0.4 and C=0.2."""
    data = np.array([
        [1.0, 0.4, 0.2, 0.0],
        [0.4, 1.0, 0.1, 0.0],
        [0.2, 0.1, 1.0, 0.0],
        [0.0, 0.0, 0.0, 1.0],
    ])
    return ProximityMatrix.from_dense(data, ["A", "B", "C", "D"])


@pytest.fixture
def candidates():
    return [
        CandidateGene(gene_id="A", gene_symbol="GA"),
        CandidateGene(gene_id="B", gene_symbol="GB"),
        CandidateGene(gene_id="C", gene_symbol="GC"),
        CandidateGene(gene_id="D", gene_symbol="GD"),
        CandidateGene(gene_id="E", gene_symbol="GE"),
    ]
