"""Persistence layer for reference tables, run results and provenance."""

from phenoprior.persistence.duckdb_store import PhenotypeStore
from phenoprior.persistence.provenance import ProvenanceTracker

__all__ = ["PhenotypeStore", "ProvenanceTracker"]
