from .defaults import DEFAULT_RUNS, default_parallelism
from .loader import load_config
from .types import ConfigError, StressConfig, UnsupportedConfigFormatError

__all__ = [
    "load_config",
    "StressConfig",
    "ConfigError",
    "UnsupportedConfigFormatError",
    "DEFAULT_RUNS",
    "default_parallelism",
]
