"""Parser and dispatch wiring for the nextmig entrypoint."""

from .dispatch import dispatch_command
from .parser import build_parser

__all__ = ["build_parser", "dispatch_command"]
