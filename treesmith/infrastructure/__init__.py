"""Treesmith Infrastructure Layer.

Services shared by the rules and transforms packages:
- Logger: Structured logging system
- ConfigManager: Layered configuration (defaults, YAML, environment, runtime)
- PatternCache: Process-wide compiled-pattern cache
"""

from .cache_manager import PatternCache, get_pattern_cache, set_global_cache
from .config_manager import ConfigError
from .config_manager import ConfigManager as Config
from .config_manager import ConfigSource, get_config_manager, set_global_config
from .logger import Logger, LogLevel, get_logger, set_global_logger

__all__ = [
    # Logger exports
    "Logger",
    "LogLevel",
    "get_logger",
    "set_global_logger",
    # PatternCache exports
    "PatternCache",
    "get_pattern_cache",
    "set_global_cache",
    # ConfigManager exports
    "ConfigSource",
    "ConfigError",
    "Config",
    "get_config_manager",
    "set_global_config",
]
