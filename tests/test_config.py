"""Tests for configuration loading."""

from pathlib import Path

import pytest

from pattern_vectorizer.shared.config import (
    EdgeDetectionConfig,
    Settings,
    build_settings,
    load_config_file,
    reload_settings,
)
from pattern_vectorizer.shared.errors import ConfigurationError


def test_defaults():
    """Test the stock pipeline constants."""
    settings = Settings()

    assert settings.rectifier.output_size == (800, 600)
    assert settings.edges.low_threshold == 50
    assert settings.edges.high_threshold == 150
    assert settings.edges.blur_sigma == 1.0
    assert settings.edges.block_size == 15
    assert settings.tracing.min_points == 20
    assert settings.tracing.max_points == 10000
    assert settings.simplifier.epsilon == 3.0
    assert settings.export.pixels_per_mm == 3.78
    assert settings.export.dxf_layer == "MOLDE"


def test_inverted_thresholds_rejected():
    """Test that low above high fails validation."""
    with pytest.raises(ValueError):
        EdgeDetectionConfig(low_threshold=200, high_threshold=100)

    with pytest.raises(ConfigurationError):
        build_settings({"edges": {"low_threshold": 200, "high_threshold": 100}})


def test_load_config_file(tmp_path: Path):
    """Test reading an explicit YAML file."""
    config_file = tmp_path / "custom.yaml"
    config_file.write_text("simplifier:\n  epsilon: 1.5\nedges:\n  low_threshold: 20\n")

    data = load_config_file(config_file)
    settings = build_settings(data)

    assert settings.simplifier.epsilon == 1.5
    assert settings.edges.low_threshold == 20
    assert settings.edges.high_threshold == 150


def test_missing_config_file(tmp_path: Path):
    """Test that an explicit missing path is an error."""
    with pytest.raises(ConfigurationError):
        load_config_file(tmp_path / "nope.yaml")


def test_non_mapping_config_file(tmp_path: Path):
    """Test that a YAML list is rejected."""
    config_file = tmp_path / "list.yaml"
    config_file.write_text("- 1\n- 2\n")

    with pytest.raises(ConfigurationError):
        load_config_file(config_file)


def test_environment_overrides_file(tmp_path: Path, monkeypatch):
    """Test that environment variables win over file values."""
    config_file = tmp_path / "custom.yaml"
    config_file.write_text("simplifier:\n  epsilon: 1.5\n  min_points: 4\n")
    monkeypatch.setenv("PATTERNVEC_SIMPLIFIER__EPSILON", "5")

    settings = reload_settings(str(config_file))

    assert settings.simplifier.epsilon == 5.0
    assert settings.simplifier.min_points == 4
