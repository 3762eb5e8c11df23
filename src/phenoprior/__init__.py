"""phenoprior: cross-species phenotype and protein-interaction gene prioritisation."""

__version__ = "0.1.0"
