from .bucketing import Bucketing, Functional, bucketing_section, build_bucketing
from .utils.config import ConfigError, load_config

__all__ = [
    "Bucketing",
    "ConfigError",
    "Functional",
    "bucketing_section",
    "build_bucketing",
    "load_config",
]
