"""
Configuration management for the pattern vectorizer.

Loads settings from pattern_config.yaml and environment variables.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pattern_vectorizer.shared.errors import ConfigurationError


class RectifierConfig(BaseModel):
    """Output raster of the perspective rectifier."""

    output_width: int = Field(default=800, gt=0)
    output_height: int = Field(default=600, gt=0)

    @property
    def output_size(self) -> tuple[int, int]:
        return (self.output_width, self.output_height)


class EdgeDetectionConfig(BaseModel):
    """Preprocessing and Canny thresholds."""

    low_threshold: float = 50.0
    high_threshold: float = 150.0
    blur_sigma: float = Field(default=1.0, gt=0)
    contrast_factor: float = 1.5
    block_size: int = Field(default=15, ge=0)
    c: float = 10.0

    @model_validator(mode="after")
    def _check_thresholds(self) -> "EdgeDetectionConfig":
        if self.low_threshold > self.high_threshold:
            raise ValueError(
                f"low_threshold ({self.low_threshold}) must not exceed "
                f"high_threshold ({self.high_threshold})"
            )
        return self


class TracingConfig(BaseModel):
    """Contour tracer limits."""

    min_points: int = Field(default=20, ge=1)
    max_points: int = Field(default=10000, ge=1)


class SimplifierConfig(BaseModel):
    """Douglas-Peucker tolerance and post-filtering."""

    epsilon: float = Field(default=3.0, ge=0)
    min_points: int = Field(default=3, ge=3)
    smoothing_window: int = Field(default=0, ge=0)
    workers: Optional[int] = Field(default=None, ge=1)


class ExportConfig(BaseModel):
    """Print layout shared by the SVG, DXF and PNG writers."""

    pixels_per_mm: float = Field(default=3.78, gt=0)  # 96 DPI
    page_width_mm: float = 210.0
    page_height_mm: float = 297.0
    margin_px: float = 20.0
    title_band_px: float = 100.0
    dxf_layer: str = "MOLDE"
    dxf_version: str = "R2010"
    title: str = "MOLDE VETORIZADO - ESCALA 1:1"
    customer_label: str = "Cliente"
    date_label: str = "Data"
    footer_note: str = "Processado com IA - Escala 1:1"
    stroke_color: str = "#dc2626"
    grid_minor_mm: float = Field(default=10.0, gt=0)
    grid_major_mm: float = Field(default=50.0, gt=0)

    @property
    def page_width_px(self) -> float:
        return self.page_width_mm * self.pixels_per_mm

    @property
    def page_height_px(self) -> float:
        return self.page_height_mm * self.pixels_per_mm


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class Settings(BaseSettings):
    """
    Main settings class for the pattern vectorizer.

    Loads configuration from pattern_config.yaml and environment variables.
    Environment variables take precedence over config file values.
    """

    model_config = SettingsConfigDict(
        env_prefix="PATTERNVEC_",
        env_nested_delimiter="__",
    )

    rectifier: RectifierConfig = Field(default_factory=RectifierConfig)
    edges: EdgeDetectionConfig = Field(default_factory=EdgeDetectionConfig)
    tracing: TracingConfig = Field(default_factory=TracingConfig)
    simplifier: SimplifierConfig = Field(default_factory=SimplifierConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # YAML values arrive as init kwargs; the environment wins over them.
        return (env_settings, init_settings, dotenv_settings, file_secret_settings)


def load_config_file(config_path: Optional[Path] = None) -> dict[str, Any]:
    """
    Load configuration from YAML file.

    Looks for config files in order:
    1. Provided path
    2. pattern_config.local.yaml (user's local overrides)
    3. pattern_config.yaml (default config)

    Args:
        config_path: Optional explicit path to config file

    Returns:
        Configuration dictionary
    """
    project_root = Path(__file__).parent.parent.parent
    config_dir = project_root / "config"

    if config_path is not None and not config_path.exists():
        raise ConfigurationError(f"Config file not found: {config_path}")

    config_files = [
        config_path,
        config_dir / "pattern_config.local.yaml",
        config_dir / "pattern_config.yaml",
    ]

    for cfg_file in config_files:
        if cfg_file and cfg_file.exists():
            with open(cfg_file) as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ConfigurationError(f"Config file {cfg_file} must contain a mapping")
            return data

    return {}


def build_settings(config_data: dict[str, Any]) -> Settings:
    """Validate a raw mapping into Settings, raising ConfigurationError."""
    try:
        return Settings(**config_data)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e


@lru_cache()
def get_settings(config_path: Optional[str] = None) -> Settings:
    """
    Get application settings (cached).

    Args:
        config_path: Optional path to config file

    Returns:
        Settings instance
    """
    config_data = load_config_file(Path(config_path) if config_path else None)
    return build_settings(config_data)


def reload_settings(config_path: Optional[str] = None) -> Settings:
    """
    Reload settings, clearing the cache.

    Args:
        config_path: Optional path to config file

    Returns:
        Fresh Settings instance
    """
    get_settings.cache_clear()
    return get_settings(config_path)
