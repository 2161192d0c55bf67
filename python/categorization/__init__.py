"""
Transaction Categorization Module

Assigns a category to transactions entered without one.
"""

from .keyword_categorizer import KeywordCategorizer, DEFAULT_CATEGORY

__all__ = [
    "KeywordCategorizer",
    "DEFAULT_CATEGORY",
]
