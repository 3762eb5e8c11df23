"""Tests for configuration loading and validation."""

import pytest
from pydantic import ValidationError

from phenoprior.config import load_config, load_config_with_overrides
from phenoprior.config.schema import BenchmarkTarget, PrioritiserConfig, RunOptions


def test_load_valid_config():
    """Test loading valid default configuration."""
    config = load_config("config/default.yaml")

    assert isinstance(config, PrioritiserConfig)
    assert config.run.run_ppi is True
    assert config.run.parallel_species is False
    assert config.thresholds.high_quality_cutoff == 0.6
    assert config.thresholds.walker_floor == pytest.approx(1e-5)
    assert config.thresholds.baseline_mode == "reference"
    assert config.network is not None
    assert config.network.use_exponent is False
    assert config.benchmark is None


def test_invalid_config_missing_field(tmp_path):
    """Test that missing required field raises ValidationError."""
    invalid_config = tmp_path / "invalid.yaml"
    invalid_config.write_text("""
duckdb_path: data/phenoprior.duckdb
thresholds:
  high_quality_cutoff: 0.6
""")

    with pytest.raises(ValidationError) as exc_info:
        load_config(invalid_config)

    assert "data_dir" in str(exc_info.value)


def test_invalid_threshold(tmp_path):
    """Test that a cutoff above 1 raises ValidationError."""
    invalid_config = tmp_path / "invalid_threshold.yaml"
    invalid_config.write_text(f"""
data_dir: {tmp_path / "data"}
duckdb_path: {tmp_path / "test.duckdb"}
thresholds:
  high_quality_cutoff: 1.5
""")

    with pytest.raises(ValidationError) as exc_info:
        load_config(invalid_config)

    assert "high_quality_cutoff" in str(exc_info.value)


def test_invalid_baseline_mode(tmp_path):
    invalid_config = tmp_path / "invalid_mode.yaml"
    invalid_config.write_text(f"""
data_dir: {tmp_path / "data"}
duckdb_path: {tmp_path / "test.duckdb"}
thresholds:
  baseline_mode: median
""")

    with pytest.raises(ValidationError):
        load_config(invalid_config)


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")


def test_config_hash_deterministic():
    """Test that config hash is deterministic and changes with config."""
    config1 = load_config("config/default.yaml")
    config2 = load_config("config/default.yaml")

    assert config1.config_hash() == config2.config_hash()
    assert len(config1.config_hash()) == 64

    config3 = load_config_with_overrides(
        "config/default.yaml",
        {"thresholds.high_quality_cutoff": 0.7},
    )
    assert config3.thresholds.high_quality_cutoff == 0.7
    assert config3.config_hash() != config1.config_hash()


def test_overrides_create_optional_sections():
    config = load_config_with_overrides(
        "config/default.yaml",
        {
            "benchmark.disease_id": "OMIM:101600",
            "benchmark.candidate_gene_symbol": "FGFR2",
        },
    )

    assert config.benchmark == BenchmarkTarget(
        disease_id="OMIM:101600", candidate_gene_symbol="FGFR2"
    )


def test_config_creates_data_directory(tmp_path):
    """Test that loading config creates the data directory."""
    config_file = tmp_path / "test_config.yaml"
    data_dir = tmp_path / "test_data"

    config_file.write_text(f"""
data_dir: {data_dir}
duckdb_path: {tmp_path / "test.duckdb"}
""")

    assert not data_dir.exists()

    config = load_config(config_file)

    assert data_dir.is_dir()
    assert config.network is None
    assert config.run == RunOptions()


# ============================================================================
# RunOptions Tests
# ============================================================================

def test_run_options_from_param_string():
    options = RunOptions.from_param_string("ppi, Mouse")

    assert options.run_ppi
    assert options.run_mouse
    assert not options.run_human
    assert not options.run_fish
    assert options.to_param_string() == "ppi,mouse"


def test_empty_param_string_enables_everything():
    assert RunOptions.from_param_string("") == RunOptions()
    assert RunOptions().to_param_string() == "ppi,human,mouse,fish"


def test_unknown_run_param():
    with pytest.raises(ValueError, match="rat"):
        RunOptions.from_param_string("human,rat")


# ============================================================================
# BenchmarkTarget Tests
# ============================================================================

def test_benchmark_hit_uses_disease_prefix():
    target = BenchmarkTarget(disease_id="OMIM:101600", candidate_gene_symbol="FGFR2")

    assert target.is_benchmark_hit("OMIM:101600_2263", "FGFR2")
    assert target.is_benchmark_hit("OMIM:101600", "FGFR2")
    assert not target.is_benchmark_hit("OMIM:101600_2263", "FGFR1")
    assert not target.is_benchmark_hit("OMIM:101601", "FGFR2")


def test_candidate_gene_match():
    target = BenchmarkTarget(disease_id="OMIM:101600", candidate_gene_symbol="FGFR2")

    assert target.matches_candidate_gene("FGFR2")
    assert target.matches_candidate_gene("FGFR2,BEST1")
    assert not target.matches_candidate_gene("FGFR21")
