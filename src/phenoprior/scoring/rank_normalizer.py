"""Rank-based rescaling of walker scores onto the final score scale."""

from itertools import groupby

import structlog

from phenoprior.scoring.context import PhaseOrderError
from phenoprior.scoring.results import PriorityResult

logger = structlog.get_logger(__name__)


class RankNormalizer:
    """Map walker scores to rank_ceiling * (1 - rank / total_genes).

    Genes are ranked by walker score, descending. Tied genes share one
    effective rank: the bucket's starting rank plus half its size (integer
    division). A gene's final score is raised to its rank score when that
    is higher and is never lowered.

    The pass rewrites final scores in place, so a normaliser instance runs
    exactly once.

    Args:
        rank_ceiling: Score of the top-ranked gene
    """

    def __init__(self, rank_ceiling: float = 0.6):
        self.rank_ceiling = rank_ceiling
        self._applied = False

    def normalise(self, results: dict[str, PriorityResult]) -> dict[str, PriorityResult]:
        """
        Rescale walker scores for the whole candidate list.

        Args:
            results: gene_id -> provisional result for every candidate gene

        Returns:
            The same mapping, with final_score updated

        Raises:
            PhaseOrderError: If called a second time
        """
        if self._applied:
            raise PhaseOrderError("Rank normalisation has already been applied")
        self._applied = True

        total_genes = len(results)
        walker_genes = sorted(
            (result for result in results.values() if result.walker_score > 0),
            key=lambda result: (-result.walker_score, result.gene_id),
        )

        rank = 0
        raised = 0
        for _, bucket in groupby(walker_genes, key=lambda result: result.walker_score):
            bucket = list(bucket)
            size = len(bucket)
            effective_rank = rank + (size // 2 if size > 1 else 0)
            new_score = self.rank_ceiling * (1 - effective_rank / total_genes)
            for result in bucket:
                if new_score > result.final_score:
                    result.final_score = new_score
                    raised += 1
            rank += size

        logger.info(
            "rank_normalisation_applied",
            total_genes=total_genes,
            genes_with_walker_score=len(walker_genes),
            scores_raised=raised,
        )

        return results
