"""PPI diffusion matrix and proximity propagation."""

from phenoprior.network.matrix import ProximityMatrix
from phenoprior.network.propagation import ProximityPropagator

__all__ = ["ProximityMatrix", "ProximityPropagator"]
