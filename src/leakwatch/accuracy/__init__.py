"""Accuracy filters: entropy and false-positive heuristics."""

from .entropy import shannon_entropy
from .false_positives import (
    DEFAULT_FALSE_POSITIVES,
    HASH_PATTERN,
    is_known_false_positive,
    is_likely_uuid,
)
from .programming import PROGRAMMING_PATTERNS, is_programming_pattern

__all__ = [
    "DEFAULT_FALSE_POSITIVES",
    "HASH_PATTERN",
    "PROGRAMMING_PATTERNS",
    "is_known_false_positive",
    "is_likely_uuid",
    "is_programming_pattern",
    "shannon_entropy",
]
