"""Run configuration loading and validation."""

from settings.config import (
    ConfigurationError,
    LanguageConfiguration,
    RunConfiguration,
    SpecConfiguration,
    build_configuration,
    load_config,
)

__all__ = [
    "ConfigurationError",
    "LanguageConfiguration",
    "RunConfiguration",
    "SpecConfiguration",
    "build_configuration",
    "load_config",
]
