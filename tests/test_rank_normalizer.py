"""Tests for rank normalisation of walker scores."""

import pytest

from phenoprior.scoring import PhaseOrderError, PriorityResult, RankNormalizer


def _results(walker_scores, direct_scores=None):
    direct_scores = direct_scores or {}
    return {
        gene_id: PriorityResult(
            gene_id=gene_id,
            walker_score=walker,
            direct_score=direct_scores.get(gene_id, 0.0),
            final_score=direct_scores.get(gene_id, 0.0),
        )
        for gene_id, walker in walker_scores.items()
    }


def test_top_ranked_gene_gets_ceiling():
    results = _results({"g1": 0.5, "g2": 0.3, "g3": 0.1, "g4": 0.0})

    RankNormalizer().normalise(results)

    assert results["g1"].final_score == pytest.approx(0.6)
    assert results["g2"].final_score == pytest.approx(0.6 * (1 - 1 / 4))
    assert results["g3"].final_score == pytest.approx(0.6 * (1 - 2 / 4))
    assert results["g4"].final_score == 0.0


def test_tied_bucket_shares_halved_rank():
    """A bucket of size k at rank r gets effective rank r + k // 2."""
    results = _results({"g1": 0.5, "g2": 0.4, "g3": 0.4, "g4": 0.1, "g5": 0.0})

    RankNormalizer().normalise(results)

    assert results["g1"].final_score == pytest.approx(0.6)
    # bucket at rank 1, size 2 -> effective rank 2
    assert results["g2"].final_score == pytest.approx(0.6 * (1 - 2 / 5))
    assert results["g3"].final_score == pytest.approx(results["g2"].final_score)
    # next bucket starts at rank 3
    assert results["g4"].final_score == pytest.approx(0.6 * (1 - 3 / 5))


def test_odd_tie_uses_integer_halving():
    results = _results({"g1": 0.4, "g2": 0.4, "g3": 0.4, "g4": 0.0})

    RankNormalizer().normalise(results)

    # 3 // 2 == 1
    for gene_id in ("g1", "g2", "g3"):
        assert results[gene_id].final_score == pytest.approx(0.6 * (1 - 1 / 4))


def test_never_lowers_direct_score():
    results = _results({"g1": 0.5, "g2": 0.3}, direct_scores={"g2": 0.9})

    RankNormalizer().normalise(results)

    assert results["g2"].final_score == pytest.approx(0.9)


def test_custom_ceiling():
    results = _results({"g1": 0.5, "g2": 0.0})

    RankNormalizer(rank_ceiling=0.4).normalise(results)

    assert results["g1"].final_score == pytest.approx(0.4)


def test_second_pass_raises():
    normalizer = RankNormalizer()
    results = _results({"g1": 0.5})
    normalizer.normalise(results)

    with pytest.raises(PhaseOrderError):
        normalizer.normalise(results)


def test_empty_results():
    assert RankNormalizer().normalise({}) == {}
