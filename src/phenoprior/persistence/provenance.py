"""Run provenance for reproducible prioritisations."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


class ProvenanceTracker:
    """
    Records what a prioritisation run did and with which settings.

    Captures the package version, config hash, enabled signals, scoring
    thresholds and an ordered list of phase steps.
    """

    def __init__(self, version: str, config: "PrioritiserConfig"):
        self.version = version
        self.config_hash = config.config_hash()
        self.run_options = config.run.to_param_string()
        self.thresholds = config.thresholds.model_dump()
        self.benchmark = config.benchmark.model_dump() if config.benchmark else None
        self.steps: list[dict] = []
        self.created_at = datetime.now(timezone.utc)

    def record_step(self, step_name: str, details: Optional[dict] = None) -> None:
        """
        Append a processing step.

        Args:
            step_name: Name of the step (usually a run phase)
            details: Optional counts or parameters of the step
        """
        step = {
            "step_name": step_name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        if details:
            step["details"] = details
        self.steps.append(step)

    def get_steps(self) -> list[dict]:
        return self.steps

    def create_metadata(self) -> dict:
        return {
            "version": self.version,
            "config_hash": self.config_hash,
            "run_options": self.run_options,
            "thresholds": self.thresholds,
            "benchmark": self.benchmark,
            "created_at": self.created_at.isoformat(),
            "steps": self.steps,
        }

    def save_sidecar(self, output_path: Path) -> Path:
        """
        Write the metadata next to an output file as {stem}.provenance.json.

        Returns:
            Path of the sidecar file
        """
        sidecar_path = output_path.with_suffix(".provenance.json")
        sidecar_path.parent.mkdir(parents=True, exist_ok=True)

        with open(sidecar_path, "w") as f:
            json.dump(self.create_metadata(), f, indent=2, default=str)
        return sidecar_path

    def save_to_store(self, store: "PhenotypeStore") -> None:
        """Append the metadata as one row of the _provenance table."""
        metadata = self.create_metadata()

        store.conn.execute("""
            CREATE TABLE IF NOT EXISTS _provenance (
                version VARCHAR,
                config_hash VARCHAR,
                run_options VARCHAR,
                created_at TIMESTAMP,
                steps_json VARCHAR
            )
        """)

        store.conn.execute("""
            INSERT INTO _provenance (version, config_hash, run_options, created_at, steps_json)
            VALUES (?, ?, ?, ?, ?)
        """, [
            metadata["version"],
            metadata["config_hash"],
            metadata["run_options"],
            metadata["created_at"],
            json.dumps(metadata["steps"]),
        ])

    @staticmethod
    def load_sidecar(sidecar_path: Path) -> dict:
        with open(sidecar_path) as f:
            return json.load(f)

    @classmethod
    def from_config(
        cls,
        config: "PrioritiserConfig",
        version: Optional[str] = None
    ) -> "ProvenanceTracker":
        """
        Create a tracker for a config.

        Args:
            config: PrioritiserConfig instance
            version: Version string. If None, uses phenoprior.__version__
        """
        if version is None:
            from phenoprior import __version__
            version = __version__

        return cls(version, config)
