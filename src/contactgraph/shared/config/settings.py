"""
Centralized configuration management for ContactGraph.

All environment variables and settings are managed here so the graph engine,
the viewport and the outer layers (CLI, cache) read the same values.
"""

from functools import lru_cache
from typing import Optional, Dict, Any
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings
from pathlib import Path


class Settings(BaseSettings):
    """
    Centralized settings for ContactGraph.

    All configuration is loaded from environment variables (prefixed with
    ``CONTACTGRAPH_``) or a ``.env`` file, with defaults matching the
    mobile app the engine was built for.
    """

    # === Application Settings ===
    app_name: str = Field(default="ContactGraph", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Optional[str] = Field(default=None, description="Optional log file path")

    # === Screen Geometry ===
    screen_width: float = Field(default=390.0, gt=0, description="Screen width in points")
    screen_height: float = Field(default=844.0, gt=0, description="Screen height in points")
    chrome_height: float = Field(default=80.0, ge=0, description="Height of fixed header chrome")

    # === Layout Settings ===
    layout_iterations: int = Field(default=300, ge=0, description="Fixed number of simulation ticks")
    link_distance: float = Field(default=10.0, ge=0, description="Rest distance between linked nodes")
    link_strength: float = Field(default=0.7, ge=0.0, le=1.0, description="Link force strength")
    charge_strength: float = Field(default=-10.0, description="Many-body strength (negative repels)")
    collision_radius: float = Field(default=45.0, ge=0, description="Node collision radius")
    layout_padding: float = Field(default=100.0, ge=0, description="Padding added around layout bounds")
    velocity_decay: float = Field(default=0.4, ge=0.0, le=1.0, description="Velocity friction per tick")
    alpha_min: float = Field(default=0.001, gt=0.0, lt=1.0, description="Alpha reached on the last tick")
    random_seed: int = Field(default=42, description="Seed for jiggle and random re-centering")

    # === Viewport Settings ===
    min_scale: float = Field(default=0.5, gt=0, description="Minimum zoom scale")
    max_scale: float = Field(default=3.0, gt=0, description="Maximum zoom scale")
    animator: str = Field(default="spring", description="Centering animation (spring, immediate)")

    # === Selection Settings ===
    tag_selection_policy: str = Field(default="replace", description="Tag tap policy (replace, accumulate)")

    # === Session Settings ===
    loading_delay_ms: int = Field(default=50, ge=0, description="Delay before an async rebuild starts")

    # === Cache Settings ===
    cache_path: Path = Field(default=Path("data/contact_cache.db"), description="SQLite contact cache file")
    cache_max_age_days: int = Field(default=30, ge=0, description="Age after which cache entries are pruned")

    # === Logging Configuration ===
    @property
    def logging_config(self) -> Dict[str, Any]:
        """Get logging configuration."""
        return {
            'level': self.log_level,
            'file': self.log_file,
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        }

    # === Layout Configuration ===
    @property
    def layout_config(self) -> Dict[str, Any]:
        """Get force layout configuration."""
        return {
            'iterations': self.layout_iterations,
            'link_distance': self.link_distance,
            'link_strength': self.link_strength,
            'charge_strength': self.charge_strength,
            'collision_radius': self.collision_radius,
            'center_x': self.screen_width / 2,
            'center_y': self.screen_height / 2,
            'padding': self.layout_padding,
            'velocity_decay': self.velocity_decay,
            'alpha_min': self.alpha_min,
            'seed': self.random_seed,
            'default_width': self.screen_width,
            'default_height': self.screen_height,
        }

    # === Viewport Configuration ===
    @property
    def viewport_config(self) -> Dict[str, Any]:
        """Get viewport configuration."""
        return {
            'min_scale': self.min_scale,
            'max_scale': self.max_scale,
            'animator': self.animator,
            'seed': self.random_seed,
        }

    # === Cache Configuration ===
    @property
    def cache_config(self) -> Dict[str, Any]:
        """Get cache configuration."""
        return {
            'path': self.cache_path,
            'max_age_days': self.cache_max_age_days,
        }

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @field_validator('animator')
    @classmethod
    def validate_animator(cls, v):
        valid = {'spring', 'immediate'}
        if v.lower() not in valid:
            raise ValueError(f"Animator must be one of {valid}")
        return v.lower()

    @field_validator('tag_selection_policy')
    @classmethod
    def validate_tag_policy(cls, v):
        valid = {'replace', 'accumulate'}
        if v.lower() not in valid:
            raise ValueError(f"Tag selection policy must be one of {valid}")
        return v.lower()

    @model_validator(mode='after')
    def validate_scale_range(self):
        if self.min_scale > self.max_scale:
            raise ValueError("min_scale must not exceed max_scale")
        return self

    model_config = {
        "env_prefix": "CONTACTGRAPH_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are only loaded once per application lifecycle.
    """
    return Settings()
