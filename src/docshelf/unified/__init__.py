"""
Unified module - one search across documentation, tasks and memories.
"""

from .engine import STOP_WORDS, UnifiedSearchEngine, UnifiedSearchResult, extract_keywords

__all__ = [
	"UnifiedSearchEngine",
	"UnifiedSearchResult",
	"extract_keywords",
	"STOP_WORDS",
]
