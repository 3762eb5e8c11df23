"""Plain text rendering of a gene's phenotype and PPI evidence."""

from typing import Callable, Sequence

from phenoprior.phenotype.models import ModelMatch, Species
from phenoprior.scoring.results import PriorityResult

NO_EVIDENCE_TEXT = "No phenotype or PPI evidence"

EVIDENCE_SPECIES = (Species.HUMAN, Species.MOUSE, Species.FISH)


def _term_text(term_id: str, label_for: Callable[[str], str] | None) -> str:
    label = label_for(term_id) if label_for else ""
    return f"{label} ({term_id})" if label else term_id


def best_match_text(
    model_match: ModelMatch,
    query_term_ids: Sequence[str],
    label_for: Callable[[str], str] | None = None,
) -> str:
    """'query (id)-match (id), ' for every query term the model matched, in query order."""
    by_query = {match.query_term_id: match for match in model_match.term_matches}
    parts = []
    for term_id in query_term_ids:
        match = by_query.get(term_id)
        if match is None:
            continue
        parts.append(
            f"{_term_text(term_id, label_for)}-{_term_text(match.match_term_id, label_for)}, "
        )
    return "".join(parts)


def _model_heading(model_match: ModelMatch) -> str:
    model = model_match.model
    if model.species == Species.HUMAN:
        name = model.label or model.disease_id_prefix
        return f"{name} ({model.disease_id_prefix}): "
    return ""


def _proximity_heading(model_match: ModelMatch) -> str:
    model = model_match.model
    if model.species == Species.HUMAN:
        name = model.label or model.disease_id_prefix
        return f"Proximity to {model.gene_symbol} associated with {name} ({model.disease_id_prefix}): "
    return f"Proximity to {model.gene_symbol} "


def format_evidence_text(
    result: PriorityResult,
    query_term_ids: Sequence[str],
    label_for: Callable[[str], str] | None = None,
) -> str:
    """
    Render six tab separated evidence fields for a gene.

    Fields are human, mouse and fish direct evidence followed by human,
    mouse and fish PPI evidence (via the closest seed's best models).

    Args:
        result: Scored gene
        query_term_ids: Query terms, in the order they should be listed
        label_for: Optional term id -> label lookup

    Returns:
        Tab separated text, or NO_EVIDENCE_TEXT if every field is empty
    """
    direct_fields = []
    ppi_fields = []
    for species in EVIDENCE_SPECIES:
        model_match = result.best_models.get(species)
        if model_match is None:
            direct_fields.append("")
        else:
            direct_fields.append(
                _model_heading(model_match) + best_match_text(model_match, query_term_ids, label_for)
            )

        ppi_match = result.ppi_models.get(species)
        if ppi_match is None:
            ppi_fields.append("")
        else:
            ppi_fields.append(
                _proximity_heading(ppi_match) + best_match_text(ppi_match, query_term_ids, label_for)
            )

    fields = direct_fields + ppi_fields
    if not any(fields):
        return NO_EVIDENCE_TEXT
    return "\t".join(fields)
