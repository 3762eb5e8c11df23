"""Reciprocal best-hit scoring of a model's phenotypes against the query set."""

from phenoprior.phenotype.baseline import SpeciesTermMatches
from phenoprior.phenotype.models import ModelMatch, PhenotypeModel, SpeciesBaseline, TermMatch


class SemanticMatcher:
    """Scores models of one species against the query terms.

    For every query term the best match among the model's matchable terms
    is taken (rows), and symmetrically for every model term the best query
    term (columns). The maximum and the row/column average are each
    normalised by the species baseline and combined:

        combined = min(100, 50 * (max / best_max + avg / best_avg))
        score = combined / 100

    Model terms with no mapping to any query term are not matchable and are
    ignored, including in the average's denominator.
    """

    def __init__(self, term_matches: SpeciesTermMatches, baseline: SpeciesBaseline):
        if baseline.is_degenerate:
            raise ValueError(
                f"Cannot score {baseline.species.value} models against a degenerate baseline"
            )
        self.term_matches = term_matches
        self.baseline = baseline

    def match(self, model: PhenotypeModel) -> ModelMatch | None:
        """Score one model.

        Returns:
            ModelMatch with the normalised score and the best match per query
            term, or None if no query term matches any model term
        """
        query_term_ids = self.term_matches.query_term_ids
        model_term_ids = sorted(model.phenotype_ids & self.term_matches.matched_term_ids)
        if not query_term_ids or not model_term_ids:
            return None

        max_score = 0.0
        sum_best_scores = 0.0
        best_term_matches: dict[str, TermMatch] = {}

        for query_id in query_term_ids:
            row_best = 0.0
            for model_term_id in model_term_ids:
                score = self.term_matches.score(query_id, model_term_id)
                if score is None:
                    continue
                row_best = max(row_best, score)
                if score > 0:
                    current = best_term_matches.get(query_id)
                    if current is None or score > current.score:
                        best_term_matches[query_id] = TermMatch(
                            query_term_id=query_id,
                            match_term_id=model_term_id,
                            score=score,
                        )
            if row_best > 0:
                sum_best_scores += row_best
                max_score = max(max_score, row_best)

        # Reciprocal hits
        for model_term_id in model_term_ids:
            column_best = 0.0
            for query_id in query_term_ids:
                score = self.term_matches.score(query_id, model_term_id)
                if score is not None and score > column_best:
                    column_best = score
            if column_best > 0:
                sum_best_scores += column_best
                max_score = max(max_score, column_best)

        if sum_best_scores == 0:
            return None

        avg_score = sum_best_scores / (len(query_term_ids) + len(model_term_ids))
        combined_score = 50 * (
            max_score / self.baseline.best_max_score
            + avg_score / self.baseline.best_avg_score
        )
        combined_score = min(combined_score, 100.0)

        return ModelMatch(
            model=model,
            score=combined_score / 100,
            term_matches=tuple(
                best_term_matches[query_id]
                for query_id in query_term_ids
                if query_id in best_term_matches
            ),
        )
