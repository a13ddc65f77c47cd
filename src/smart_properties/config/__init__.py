"""Tooling configuration: schema, validation and layered loading."""

from smart_properties.config.loader import (
    ENV_PREFIX,
    PYPROJECT_FILE,
    ConfigLoadError,
    dump_effective_config,
    load_config,
)
from smart_properties.config.schema import (
    DEFAULT_CONFIG,
    ConfigValidationError,
    ConfigValidationIssue,
    ConfigValidationResult,
    SmartPropertiesConfig,
    assert_valid_config,
    default_config,
    merge_config,
    validate_config,
)

__all__ = [
    "ConfigLoadError",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "DEFAULT_CONFIG",
    "ENV_PREFIX",
    "PYPROJECT_FILE",
    "SmartPropertiesConfig",
    "assert_valid_config",
    "default_config",
    "dump_effective_config",
    "load_config",
    "merge_config",
    "validate_config",
]
