"""Orchestration layer: logging and the migration pipeline."""

from .logging import configure_cli_logging, get_logger

__all__ = ["configure_cli_logging", "get_logger"]
