"""Tests for per-species aggregation, seeds, evidence and self-hit suppression."""

import pytest

from phenoprior.config import BenchmarkTarget
from phenoprior.phenotype import (
    DataSourceError,
    EvidenceIndex,
    Species,
    SpeciesBaseline,
    SpeciesMatchAggregator,
    TermMatchEvidence,
)


@pytest.fixture
def aggregator(provider, catalog):
    return SpeciesMatchAggregator(provider, catalog, high_quality_cutoff=0.6)


@pytest.fixture
def reference_baseline():
    return SpeciesBaseline(species=Species.HUMAN, best_max_score=1.0, best_avg_score=1.0)


def test_best_score_per_gene(aggregator, reference_baseline):
    result = aggregator.aggregate(Species.MOUSE, ["H1", "H2"], baseline=reference_baseline)

    assert result.gene_best_scores["A"] == pytest.approx(0.875)
    assert result.gene_best_scores["C"] == pytest.approx(50 * (0.2 + 0.4 / 3) / 100)
    # MGI:3 shares no matchable terms
    assert "D" not in result.gene_best_scores
    assert result.best_models["A"].model.model_id == "MGI:1"
    assert result.models_scored == 3
    assert result.models_matched == 2


def test_only_high_quality_hits_become_seeds(aggregator, reference_baseline):
    result = aggregator.aggregate(Species.MOUSE, ["H1", "H2"], baseline=reference_baseline)

    assert result.seeds == {"A": pytest.approx(0.875)}


def test_defaults_to_own_species_baseline(aggregator):
    result = aggregator.aggregate(Species.MOUSE, ["H1", "H2"])

    assert result.baseline.species == Species.MOUSE
    # max 0.9 / 0.9 and avg 0.85 / 0.85
    assert result.gene_best_scores["A"] == pytest.approx(1.0)


def test_evidence_records_best_match_per_query_term(aggregator, reference_baseline):
    result = aggregator.aggregate(Species.MOUSE, ["H1", "H2"], baseline=reference_baseline)

    evidence = {(e.model_id, e.query_term_id): e for e in result.evidence}
    assert evidence[("MGI:1", "H1")].match_term_id == "M1"
    assert evidence[("MGI:1", "H2")].match_term_id == "M2"
    assert evidence[("MGI:2", "H1")].match_term_id == "M3"
    assert ("MGI:2", "H2") not in evidence

    df = result.evidence.to_frame()
    assert df.columns == ["gene_id", "model_id", "species", "query_term_id", "match_term_id", "score"]
    assert df.height == 3
    assert set(df["species"].to_list()) == {"mouse"}


def test_species_without_models_is_skipped(aggregator, reference_baseline):
    result = aggregator.aggregate(Species.FISH, ["H1", "H2"], baseline=reference_baseline)

    assert result.skipped
    assert result.skipped_reason == "no_data"
    assert result.gene_best_scores == {}
    assert result.seeds == {}


def test_degenerate_baseline_skips_species(aggregator):
    result = aggregator.aggregate(Species.FISH, ["H1", "H2"])

    assert result.skipped_reason == "degenerate_baseline"


def test_self_hit_suppression(provider, catalog, reference_baseline):
    """Models of the benchmark disease for the candidate gene are ignored."""
    benchmark = BenchmarkTarget(disease_id="OMIM:100", candidate_gene_symbol="GA")
    aggregator = SpeciesMatchAggregator(provider, catalog, benchmark=benchmark)

    result = aggregator.aggregate(Species.HUMAN, ["H1", "H2"], baseline=reference_baseline)

    assert result.models_suppressed == 1
    assert "A" not in result.gene_best_scores
    assert "A" not in result.seeds


def test_suppression_requires_matching_symbol(provider, catalog, reference_baseline):
    benchmark = BenchmarkTarget(disease_id="OMIM:100", candidate_gene_symbol="OTHER")
    aggregator = SpeciesMatchAggregator(provider, catalog, benchmark=benchmark)

    result = aggregator.aggregate(Species.HUMAN, ["H1", "H2"], baseline=reference_baseline)

    assert result.models_suppressed == 0
    assert result.gene_best_scores["A"] == pytest.approx(1.0)


def test_catalog_raises_for_missing_species(catalog):
    with pytest.raises(DataSourceError):
        catalog.models_for_species(Species.FISH)


# ============================================================================
# EvidenceIndex Tests
# ============================================================================

def _evidence(score, match_term_id="M1"):
    return TermMatchEvidence(
        gene_id="A",
        model_id="MGI:1",
        species=Species.MOUSE,
        query_term_id="H1",
        match_term_id=match_term_id,
        score=score,
    )


def test_evidence_upsert_keeps_maximum():
    index = EvidenceIndex()

    assert index.upsert(_evidence(0.5, "M1"))
    assert index.upsert(_evidence(0.7, "M2"))
    assert not index.upsert(_evidence(0.6, "M3"))

    (record,) = list(index)
    assert record.match_term_id == "M2"
    assert record.score == 0.7


def test_evidence_merge_is_order_independent():
    first = EvidenceIndex([_evidence(0.5, "M1")])
    second = EvidenceIndex([_evidence(0.7, "M2")])

    first.merge(second)
    reverse = EvidenceIndex([_evidence(0.7, "M2")])
    reverse.merge(EvidenceIndex([_evidence(0.5, "M1")]))

    assert list(first) == list(reverse)


def test_empty_evidence_frame_has_schema():
    df = EvidenceIndex().to_frame()

    assert df.height == 0
    assert "query_term_id" in df.columns
