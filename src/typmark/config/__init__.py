"""Configuration — layered defaults, YAML files, env vars and overrides."""

from typmark.config.hierarchy import load_config_hierarchy
from typmark.config.schema import RenderSettings

__all__ = ["RenderSettings", "load_config_hierarchy"]
