"""Converters from syntax trees to higher-level code definitions."""

from .definition_converter import DefinitionConverter
from .rules import LANGUAGE_RULES, DefinitionRules, get_rules

__all__ = [
    "DefinitionConverter",
    "DefinitionRules",
    "LANGUAGE_RULES",
    "get_rules",
]
