"""Pydantic models for prioritiser configuration."""

import hashlib
import json
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

# Tokens accepted by RunOptions.from_param_string
RUN_PARAM_TOKENS = ("ppi", "human", "mouse", "fish")


class RunOptions(BaseModel):
    """Which evidence signals to run for a prioritisation call."""

    run_ppi: bool = Field(
        default=True,
        description="Propagate phenotype evidence through the PPI network",
    )
    run_human: bool = Field(
        default=True,
        description="Score against human disease annotations (HPO-HPO)",
    )
    run_mouse: bool = Field(
        default=True,
        description="Score against mouse model annotations (HPO-MP)",
    )
    run_fish: bool = Field(
        default=True,
        description="Score against zebrafish model annotations (HPO-ZP)",
    )
    parallel_species: bool = Field(
        default=False,
        description="Aggregate the enabled species on a thread pool",
    )

    @classmethod
    def from_param_string(cls, params: str) -> "RunOptions":
        """
        Build run options from a comma-separated parameter string.

        An empty string enables every signal, otherwise only the named
        signals ("ppi", "human", "mouse", "fish") are enabled.

        Raises:
            ValueError: If the string contains an unknown token
        """
        tokens = [token.strip().lower() for token in params.split(",") if token.strip()]
        if not tokens:
            return cls()

        unknown = [token for token in tokens if token not in RUN_PARAM_TOKENS]
        if unknown:
            raise ValueError(
                f"Unknown run parameter(s) {unknown}. Must be one of {list(RUN_PARAM_TOKENS)}"
            )

        return cls(
            run_ppi="ppi" in tokens,
            run_human="human" in tokens,
            run_mouse="mouse" in tokens,
            run_fish="fish" in tokens,
        )

    def to_param_string(self) -> str:
        """Inverse of from_param_string (enabled tokens, comma-separated)."""
        flags = {
            "ppi": self.run_ppi,
            "human": self.run_human,
            "mouse": self.run_mouse,
            "fish": self.run_fish,
        }
        return ",".join(token for token, enabled in flags.items() if enabled)


class ScoringThresholds(BaseModel):
    """Numeric constants of the matching and propagation scoring."""

    high_quality_cutoff: float = Field(
        default=0.6,
        ge=0.0,
        le=1.0,
        description="Model scores above this nominate the gene as a PPI seed",
    )
    walker_floor: float = Field(
        default=1e-5,
        ge=0.0,
        description="Walker scores at or below this are treated as no interaction",
    )
    rank_ceiling: float = Field(
        default=0.6,
        gt=0.0,
        le=1.0,
        description="Score given to the top-ranked walker-only gene",
    )
    baseline_mode: Literal["reference", "per_species"] = Field(
        default="reference",
        description=(
            "'reference' normalises every species against the human self-match "
            "baseline, 'per_species' uses each species' own best achievable match"
        ),
    )


class BenchmarkTarget(BaseModel):
    """Known disease-gene association to hide when benchmarking."""

    disease_id: str = Field(
        ...,
        min_length=1,
        description="Disease id whose models are suppressed (e.g. OMIM:101600)",
    )
    candidate_gene_symbol: str = Field(
        ...,
        min_length=1,
        description="Gene symbol of the known causative gene",
    )

    def is_benchmark_hit(self, model_id: str, gene_symbol: str) -> bool:
        """True if a model encodes the known association being hidden.

        Human model ids may carry a "_<gene_id>" suffix, so only the part
        before the first underscore is compared to the disease id.
        """
        return model_id.split("_")[0] == self.disease_id and gene_symbol == self.candidate_gene_symbol

    def matches_candidate_gene(self, gene_symbol: str) -> bool:
        """True for the candidate symbol itself or a "SYMBOL,..." compound symbol."""
        return (
            gene_symbol == self.candidate_gene_symbol
            or gene_symbol.startswith(self.candidate_gene_symbol + ",")
        )


class NetworkConfig(BaseModel):
    """Location of the precomputed PPI diffusion matrix."""

    matrix_path: Path = Field(
        ...,
        description="Gzipped tab-separated gene x gene diffusion matrix",
    )
    index_path: Path = Field(
        ...,
        description="Gzipped tab-separated gene_id -> row index file",
    )
    use_exponent: bool = Field(
        default=False,
        description="Apply exp() to every matrix cell when loading",
    )


class PrioritiserConfig(BaseModel):
    """Main prioritiser configuration."""

    data_dir: Path = Field(
        ...,
        description="Directory for run outputs and provenance",
    )
    duckdb_path: Path = Field(
        ...,
        description="Path to DuckDB database holding term mappings and models",
    )
    network: NetworkConfig | None = Field(
        default=None,
        description="PPI matrix files (PPI propagation is skipped if absent)",
    )
    run: RunOptions = Field(
        default_factory=RunOptions,
        description="Enabled evidence signals",
    )
    thresholds: ScoringThresholds = Field(
        default_factory=ScoringThresholds,
        description="Scoring constants",
    )
    benchmark: BenchmarkTarget | None = Field(
        default=None,
        description="Benchmarking target (self-hit suppression)",
    )

    @field_validator("data_dir")
    @classmethod
    def create_directory(cls, v: Path) -> Path:
        """Create directory if it doesn't exist."""
        v.mkdir(parents=True, exist_ok=True)
        return v

    def config_hash(self) -> str:
        """
        Compute SHA-256 hash of the configuration.

        Returns a deterministic hash based on all config values,
        useful for tracking config changes between runs.
        """
        config_dict = self.model_dump(mode="python")
        config_json = json.dumps(
            config_dict,
            sort_keys=True,
            default=str,
        )
        return hashlib.sha256(config_json.encode()).hexdigest()
