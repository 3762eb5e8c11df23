"""Query-term match tables and best-achievable (baseline) scores per species."""

from typing import Sequence

import structlog

from phenoprior.phenotype.models import Species, SpeciesBaseline, TermMatch
from phenoprior.phenotype.providers import TermSimilarityProvider
from phenoprior.phenotype.species import SpeciesProfile

logger = structlog.get_logger(__name__)


class SpeciesTermMatches:
    """Restricted score table of the query terms against one species' ontology.

    Holds, for every query term, the similarity to each target term the
    provider knows about. Built once per species per run.
    """

    def __init__(self, species: Species, query_term_ids: Sequence[str], table: dict[str, dict[str, float]]):
        self.species = species
        self.query_term_ids = list(query_term_ids)
        self._table = table
        self.matched_term_ids = frozenset(
            match_id for term_matches in table.values() for match_id in term_matches
        )

    @classmethod
    def from_provider(
        cls,
        provider: TermSimilarityProvider,
        query_term_ids: Sequence[str],
        species: Species,
    ) -> "SpeciesTermMatches":
        table: dict[str, dict[str, float]] = {}
        for term_id in query_term_ids:
            term_matches: dict[str, float] = {}
            for match in provider.matches_for_term(term_id, species):
                previous = term_matches.get(match.match_term_id)
                if previous is None or match.score > previous:
                    term_matches[match.match_term_id] = match.score
            if term_matches:
                table[term_id] = term_matches
        return cls(species, query_term_ids, table)

    def score(self, query_term_id: str, match_term_id: str) -> float | None:
        return self._table.get(query_term_id, {}).get(match_term_id)

    def matches_for(self, query_term_id: str) -> dict[str, float]:
        return self._table.get(query_term_id, {})

    def has_matches(self, query_term_id: str) -> bool:
        return bool(self._table.get(query_term_id))

    def best_column_score(self, match_term_id: str) -> float:
        """Best score any query term achieves against a target term."""
        best = 0.0
        for term_id in self.query_term_ids:
            score = self.score(term_id, match_term_id)
            if score is not None and score > best:
                best = score
        return best


def _idealised_counterpart(
    term_id: str,
    term_matches: dict[str, float],
    self_match: bool,
) -> tuple[str, float]:
    if self_match and term_id in term_matches:
        return term_id, term_matches[term_id]
    # highest score, ties broken by term id for determinism
    match_id = min(term_matches, key=lambda m: (-term_matches[m], m))
    return match_id, term_matches[match_id]


def compute_species_baseline(
    term_matches: SpeciesTermMatches,
    profile: SpeciesProfile,
) -> SpeciesBaseline:
    """Compute the best possible max and average score for the query set.

    Each query term is paired with its idealised counterpart (itself for
    ontologies with self matches, otherwise its best cross-ontology match).
    The counterpart's reciprocal best-column score is added alongside, so
    the average mirrors the row + column averaging of model scoring.

    Args:
        term_matches: Restricted score table for the species
        profile: Capability bundle of the species

    Returns:
        SpeciesBaseline; best_avg_score is 0 when no query term has a
        non-zero match (degenerate baseline)
    """
    best_max_score = 0.0
    sum_best_scores = 0.0
    nonzero_terms = 0
    best_matches = []

    for term_id in term_matches.query_term_ids:
        matches = term_matches.matches_for(term_id)
        if not matches:
            continue

        match_id, row_score = _idealised_counterpart(term_id, matches, profile.self_match)
        if row_score <= 0:
            continue

        reciprocal_score = term_matches.best_column_score(match_id)

        nonzero_terms += 1
        sum_best_scores += row_score + reciprocal_score
        best_max_score = max(best_max_score, row_score, reciprocal_score)
        best_matches.append(TermMatch(query_term_id=term_id, match_term_id=match_id, score=row_score))

    best_avg_score = sum_best_scores / (2 * nonzero_terms) if nonzero_terms else 0.0

    baseline = SpeciesBaseline(
        species=term_matches.species,
        best_max_score=best_max_score,
        best_avg_score=best_avg_score,
        best_matches=tuple(best_matches),
    )

    logger.info(
        "species_baseline_computed",
        species=profile.species.value,
        best_max_score=round(best_max_score, 4),
        best_avg_score=round(best_avg_score, 4),
        matched_query_terms=nonzero_terms,
    )
    for match in best_matches:
        logger.debug(
            "species_baseline_best_match",
            species=profile.species.value,
            query_term_id=match.query_term_id,
            match_term_id=match.match_term_id,
            score=match.score,
        )

    return baseline
