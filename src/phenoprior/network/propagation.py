"""Indirect (walker) scores from seed genes through the PPI diffusion matrix."""

from typing import Sequence

import numpy as np
import structlog

from phenoprior.network.matrix import ProximityMatrix
from phenoprior.phenotype.models import SeedGene

logger = structlog.get_logger(__name__)


class ProximityPropagator:
    """Seed-weighted sub-matrix of diffusion columns.

    W has one column per seed, in seed order: the seed's diffusion column
    scaled by its score, or zeros if the seed is outside the network.
    A gene's walker score is its best cell in W over all columns except its
    own seed column.

    Args:
        matrix: Diffusion matrix
        seeds: Seed genes in column order
        walker_floor: Scores at or below this are reported as 0
    """

    def __init__(
        self,
        matrix: ProximityMatrix,
        seeds: Sequence[SeedGene],
        walker_floor: float = 1e-5,
    ):
        self.matrix = matrix
        self.seeds = list(seeds)
        self.walker_floor = walker_floor
        self._seed_columns = {seed.gene_id: i for i, seed in enumerate(self.seeds)}

        self.weighted = np.zeros((matrix.num_rows, len(self.seeds)), dtype=np.float32)
        seeds_in_network = 0
        for i, seed in enumerate(self.seeds):
            if not matrix.contains_gene(seed.gene_id):
                continue
            self.weighted[:, i] = matrix.column_for_gene(seed.gene_id) * np.float32(seed.score)
            seeds_in_network += 1

        logger.info(
            "propagation_matrix_built",
            seeds=len(self.seeds),
            seeds_in_network=seeds_in_network,
            genes=matrix.num_rows,
        )

    def walker_score(self, gene_id: str) -> tuple[float, str | None]:
        """
        Best seed-weighted proximity of a gene to any other seed.

        Returns:
            (score, closest seed gene id). (0.0, None) if the gene is not in
            the network, there are no seeds, or the best cell is at or below
            the floor.
        """
        if not self.seeds or not self.matrix.contains_gene(gene_id):
            return 0.0, None

        row = self.weighted[self.matrix.row_index_for_gene(gene_id)].copy()
        own_column = self._seed_columns.get(gene_id)
        if own_column is not None:
            row[own_column] = 0.0

        # argmax returns the first column on ties, so seed order decides
        best_column = int(np.argmax(row))
        best_score = float(row[best_column])
        if best_score <= self.walker_floor:
            return 0.0, None
        return best_score, self.seeds[best_column].gene_id

    def walker_scores(self, gene_ids: Sequence[str]) -> dict[str, tuple[float, str | None]]:
        return {gene_id: self.walker_score(gene_id) for gene_id in gene_ids}
