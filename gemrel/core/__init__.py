"""Core domain types and logic."""

from .config import CONFIG_FILENAME, ConfigError, ReleaseConfig, load_config, load_config_or_default
from .errors import ErrorCode
from .result import Err, Ok, Result

__all__ = [
    # config
    "CONFIG_FILENAME",
    "ConfigError",
    "ReleaseConfig",
    "load_config",
    "load_config_or_default",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
]
