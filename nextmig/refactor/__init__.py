"""Rewrite rules, their registry, and the engine that applies them."""

from .engine import FileState, MigrationEngine, rewrite_source
from .registry import TransformRegistry, default_registry
from .rules import DEFAULT_RULES, TransformRule
from .tokens import TokenStream, tokenize

__all__ = [
    "DEFAULT_RULES",
    "FileState",
    "MigrationEngine",
    "TokenStream",
    "TransformRegistry",
    "TransformRule",
    "default_registry",
    "rewrite_source",
    "tokenize",
]
