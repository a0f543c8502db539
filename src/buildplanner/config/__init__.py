"""Config loading and schema."""

from .loader import ConfigLoadError, load_config
from .schema import PlannerConfig

__all__ = ["ConfigLoadError", "PlannerConfig", "load_config"]
