"""Tests for the proximity matrix and walker score propagation."""

import gzip

import numpy as np
import pytest

from phenoprior.network import ProximityMatrix, ProximityPropagator
from phenoprior.phenotype import SeedGene


# ============================================================================
# ProximityMatrix Tests
# ============================================================================

def test_matrix_lookups(proximity_matrix):
    assert proximity_matrix.num_rows == 4
    assert proximity_matrix.contains_gene("B")
    assert not proximity_matrix.contains_gene("Z")
    assert proximity_matrix.row_index_for_gene("C") == 2
    assert proximity_matrix.gene_ids == ["A", "B", "C", "D"]
    np.testing.assert_allclose(proximity_matrix.column_for_gene("A"), [1.0, 0.4, 0.2, 0.0], rtol=1e-6)


def test_column_is_read_only(proximity_matrix):
    column = proximity_matrix.column_for_gene("A")

    with pytest.raises(ValueError):
        column[0] = 5.0


def test_non_square_matrix_rejected():
    with pytest.raises(ValueError, match="square"):
        ProximityMatrix.from_dense(np.zeros((2, 3)), ["A", "B"])


def test_index_size_mismatch_rejected():
    with pytest.raises(ValueError, match="Gene index"):
        ProximityMatrix.from_dense(np.zeros((3, 3)), ["A", "B"])


def test_files_round_trip(tmp_path, proximity_matrix):
    matrix_path = tmp_path / "matrix.tsv.gz"
    index_path = tmp_path / "index.tsv.gz"

    proximity_matrix.to_files(matrix_path, index_path)
    loaded = ProximityMatrix.from_files(matrix_path, index_path)

    assert loaded.gene_ids == proximity_matrix.gene_ids
    np.testing.assert_allclose(
        loaded.column_for_gene("A"), proximity_matrix.column_for_gene("A"), atol=1e-5
    )


def test_from_files_applies_exponent(tmp_path):
    matrix_path = tmp_path / "matrix.tsv.gz"
    index_path = tmp_path / "index.tsv.gz"
    with gzip.open(index_path, "wt") as f:
        f.write("10\t0\n20\t1\n")
    with gzip.open(matrix_path, "wt") as f:
        f.write("0.0\t-1.0\n-1.0\t0.0\n")

    matrix = ProximityMatrix.from_files(matrix_path, index_path, use_exponent=True)

    assert matrix.column_for_gene("10")[1] == pytest.approx(np.exp(-1.0), rel=1e-6)
    assert matrix.column_for_gene("20")[1] == pytest.approx(1.0)


def test_from_files_row_length_mismatch(tmp_path):
    matrix_path = tmp_path / "matrix.tsv.gz"
    index_path = tmp_path / "index.tsv.gz"
    with gzip.open(index_path, "wt") as f:
        f.write("10\t0\n20\t1\n")
    with gzip.open(matrix_path, "wt") as f:
        f.write("0.5\t0.1\t0.3\n0.1\t0.5\n")

    with pytest.raises(ValueError, match="columns"):
        ProximityMatrix.from_files(matrix_path, index_path)


def test_from_files_missing_rows(tmp_path):
    matrix_path = tmp_path / "matrix.tsv"
    index_path = tmp_path / "index.tsv"
    index_path.write_text("10\t0\n20\t1\n")
    matrix_path.write_text("0.5\t0.1\n")

    with pytest.raises(ValueError, match="rows"):
        ProximityMatrix.from_files(matrix_path, index_path)


def test_from_files_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        ProximityMatrix.from_files(tmp_path / "nope.tsv.gz", tmp_path / "nope_index.tsv.gz")


# ============================================================================
# ProximityPropagator Tests
# ============================================================================

def test_walker_score_worked_example(proximity_matrix):
    """Seed A (0.875) with proximity 0.4 to B gives B a walker score of 0.35."""
    propagator = ProximityPropagator(proximity_matrix, [SeedGene(gene_id="A", score=0.875)])

    score, closest = propagator.walker_score("B")

    assert score == pytest.approx(0.35, rel=1e-6)
    assert closest == "A"
    assert propagator.weighted[1, 0] == pytest.approx(0.35, rel=1e-6)


def test_walker_score_excludes_own_seed_column(proximity_matrix):
    propagator = ProximityPropagator(proximity_matrix, [SeedGene(gene_id="A", score=1.0)])

    assert propagator.walker_score("A") == (0.0, None)


def test_walker_score_picks_best_other_seed(proximity_matrix):
    seeds = [SeedGene(gene_id="A", score=1.0), SeedGene(gene_id="C", score=1.0)]
    propagator = ProximityPropagator(proximity_matrix, seeds)

    # A's own column is skipped, C's column gives 0.2
    assert propagator.walker_score("A") == (pytest.approx(0.2), "C")
    # B: 0.4 via A beats 0.1 via C
    assert propagator.walker_score("B") == (pytest.approx(0.4), "A")


def test_walker_score_for_gene_outside_network(proximity_matrix):
    propagator = ProximityPropagator(proximity_matrix, [SeedGene(gene_id="A", score=1.0)])

    assert propagator.walker_score("Z") == (0.0, None)


def test_walker_score_floor(proximity_matrix):
    """Scores at or below the floor count as no interaction."""
    propagator = ProximityPropagator(proximity_matrix, [SeedGene(gene_id="A", score=1.0)])

    assert propagator.walker_score("D") == (0.0, None)

    strict = ProximityPropagator(
        proximity_matrix, [SeedGene(gene_id="A", score=1.0)], walker_floor=0.3
    )
    assert strict.walker_score("C") == (0.0, None)


def test_seed_outside_network_keeps_zero_column(proximity_matrix):
    seeds = [SeedGene(gene_id="Z", score=1.0), SeedGene(gene_id="A", score=0.5)]
    propagator = ProximityPropagator(proximity_matrix, seeds)

    assert propagator.weighted.shape == (4, 2)
    assert not propagator.weighted[:, 0].any()
    assert propagator.walker_score("B") == (pytest.approx(0.2), "A")


def test_no_seeds(proximity_matrix):
    propagator = ProximityPropagator(proximity_matrix, [])

    assert propagator.walker_score("B") == (0.0, None)
