"""Logging helpers shared by the runtime and the command-line tools."""

from smart_properties.observability.logging import ROOT_LOGGER_NAME, get_logger, setup_logging

__all__ = ["ROOT_LOGGER_NAME", "get_logger", "setup_logging"]
