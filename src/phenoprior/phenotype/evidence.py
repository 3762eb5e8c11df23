"""Flat, max-aggregating index of per-model term match evidence."""

from typing import Iterable

import polars as pl

from phenoprior.phenotype.models import ModelMatch, TermMatchEvidence

EVIDENCE_COLUMNS = [
    "gene_id",
    "model_id",
    "species",
    "query_term_id",
    "match_term_id",
    "score",
]


class EvidenceIndex:
    """Best match per (model, query term), replacing nested gene/model/term maps.

    upsert() only overwrites an existing record with a strictly higher score,
    so merging indexes is commutative.
    """

    def __init__(self, records: Iterable[TermMatchEvidence] = ()):
        self._records: dict[tuple[str, str], TermMatchEvidence] = {}
        for record in records:
            self.upsert(record)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(self._records.values())

    def upsert(self, record: TermMatchEvidence) -> bool:
        """Insert a record, or replace the current one if strictly better.

        Returns:
            True if the index changed
        """
        key = (record.model_id, record.query_term_id)
        current = self._records.get(key)
        if current is None or record.score > current.score:
            self._records[key] = record
            return True
        return False

    def add_model_match(self, model_match: ModelMatch) -> None:
        for match in model_match.term_matches:
            self.upsert(
                TermMatchEvidence(
                    gene_id=model_match.gene_id,
                    model_id=model_match.model.model_id,
                    species=model_match.species,
                    query_term_id=match.query_term_id,
                    match_term_id=match.match_term_id,
                    score=match.score,
                )
            )

    def merge(self, other: "EvidenceIndex") -> None:
        for record in other:
            self.upsert(record)

    def for_model(self, model_id: str) -> list[TermMatchEvidence]:
        return [record for record in self._records.values() if record.model_id == model_id]

    def for_gene(self, gene_id: str) -> list[TermMatchEvidence]:
        return [record for record in self._records.values() if record.gene_id == gene_id]

    def to_frame(self) -> pl.DataFrame:
        """Export as a DataFrame sorted by gene, model and query term."""
        if not self._records:
            return pl.DataFrame(
                schema={
                    "gene_id": pl.String,
                    "model_id": pl.String,
                    "species": pl.String,
                    "query_term_id": pl.String,
                    "match_term_id": pl.String,
                    "score": pl.Float64,
                }
            )

        df = pl.DataFrame(
            [
                {
                    "gene_id": record.gene_id,
                    "model_id": record.model_id,
                    "species": record.species.value,
                    "query_term_id": record.query_term_id,
                    "match_term_id": record.match_term_id,
                    "score": record.score,
                }
                for record in self._records.values()
            ]
        )
        return df.select(EVIDENCE_COLUMNS).sort(["gene_id", "model_id", "query_term_id"])
