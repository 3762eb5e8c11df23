"""Read-only lookups for term similarities and phenotype-annotated models.

The engine only depends on the TermSimilarityProvider and ModelCatalog
protocols. The table-backed implementations here consume polars DataFrames,
either built in memory or read from a PhenotypeStore (DuckDB) with:

- term_mappings: query_term_id, match_term_id, score, species
- phenotype_models: model_id, gene_id, gene_symbol, species, phenotype_ids
  (list or comma-separated string), optional label
- phenotype_terms (optional): term_id, label
"""

from collections import defaultdict
from typing import Iterable, Protocol

import polars as pl
import structlog

from phenoprior.persistence.duckdb_store import PhenotypeStore
from phenoprior.phenotype.models import PhenotypeModel, Species, TermMatch

logger = structlog.get_logger(__name__)

TERM_MAPPINGS_TABLE = "term_mappings"
PHENOTYPE_MODELS_TABLE = "phenotype_models"
PHENOTYPE_TERMS_TABLE = "phenotype_terms"


class DataSourceError(RuntimeError):
    """Raised when a lookup has no data for the requested species."""


class TermSimilarityProvider(Protocol):
    def score_of(self, query_term_id: str, match_term_id: str, species: Species) -> float | None:
        ...

    def matches_for_term(self, term_id: str, species: Species) -> Iterable[TermMatch]:
        ...


class ModelCatalog(Protocol):
    def models_for_species(self, species: Species) -> Iterable[PhenotypeModel]:
        ...


def _species_from_value(value) -> Species:
    if isinstance(value, Species):
        return value
    return Species(str(value).strip().lower())


class TableTermSimilarityProvider:
    """In-memory index over a term_mappings table.

    Duplicate (query, match, species) rows keep the highest score.
    """

    def __init__(self, mappings: pl.DataFrame, labels: dict[str, str] | None = None):
        self._matches: dict[Species, dict[str, dict[str, float]]] = defaultdict(dict)
        self._labels = dict(labels or {})

        for row in mappings.iter_rows(named=True):
            species = _species_from_value(row["species"])
            score = row["score"]
            if score is None:
                continue
            term_matches = self._matches[species].setdefault(row["query_term_id"], {})
            match_id = row["match_term_id"]
            if match_id not in term_matches or score > term_matches[match_id]:
                term_matches[match_id] = float(score)

        logger.info(
            "term_similarity_index_built",
            mapping_rows=len(mappings),
            species={species.value: len(terms) for species, terms in self._matches.items()},
        )

    @classmethod
    def from_store(cls, store: PhenotypeStore) -> "TableTermSimilarityProvider":
        """Read term_mappings (and phenotype_terms labels if present) from DuckDB.

        Raises:
            DataSourceError: If the term_mappings table does not exist
        """
        mappings = store.load_dataframe(TERM_MAPPINGS_TABLE)
        if mappings is None:
            raise DataSourceError(f"Table {TERM_MAPPINGS_TABLE} not found in {store.db_path}")

        labels = {}
        terms = store.load_dataframe(PHENOTYPE_TERMS_TABLE)
        if terms is not None:
            labels = dict(zip(terms["term_id"].to_list(), terms["label"].to_list()))

        return cls(mappings, labels)

    def score_of(self, query_term_id: str, match_term_id: str, species: Species) -> float | None:
        return self._matches.get(species, {}).get(query_term_id, {}).get(match_term_id)

    def matches_for_term(self, term_id: str, species: Species) -> list[TermMatch]:
        term_matches = self._matches.get(species, {}).get(term_id, {})
        return [
            TermMatch(query_term_id=term_id, match_term_id=match_id, score=score)
            for match_id, score in term_matches.items()
        ]

    def label_for(self, term_id: str) -> str:
        return self._labels.get(term_id) or ""


class TableModelCatalog:
    """In-memory phenotype model catalogue grouped by species."""

    def __init__(self, models: pl.DataFrame):
        self._models: dict[Species, list[PhenotypeModel]] = defaultdict(list)

        has_label = "label" in models.columns
        for row in models.iter_rows(named=True):
            phenotype_ids = row["phenotype_ids"]
            if phenotype_ids is None:
                continue
            if isinstance(phenotype_ids, str):
                phenotype_ids = [term.strip() for term in phenotype_ids.split(",")]

            model = PhenotypeModel(
                model_id=str(row["model_id"]),
                gene_id=str(row["gene_id"]),
                gene_symbol=row["gene_symbol"] or "",
                species=_species_from_value(row["species"]),
                phenotype_ids=frozenset(term for term in phenotype_ids if term),
                label=(row["label"] or "") if has_label else "",
            )
            self._models[model.species].append(model)

        logger.info(
            "model_catalog_built",
            models={species.value: len(items) for species, items in self._models.items()},
        )

    @classmethod
    def from_store(cls, store: PhenotypeStore) -> "TableModelCatalog":
        """Read phenotype_models from DuckDB.

        Raises:
            DataSourceError: If the phenotype_models table does not exist
        """
        models = store.load_dataframe(PHENOTYPE_MODELS_TABLE)
        if models is None:
            raise DataSourceError(f"Table {PHENOTYPE_MODELS_TABLE} not found in {store.db_path}")
        return cls(models)

    def models_for_species(self, species: Species) -> list[PhenotypeModel]:
        """Return all models for a species.

        Raises:
            DataSourceError: If no models were loaded for the species
        """
        if species not in self._models:
            raise DataSourceError(f"No {species.value} models available")
        return list(self._models[species])
