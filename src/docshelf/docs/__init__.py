"""
Docs module - two-tier documentation cache.

Provides:
- DocumentStore: file-backed storage for one tier
- DualDocStore: project tier with a shared global cache
- RelevanceSearchEngine: structure-aware ranking
- DocScraper: fetch a page as markdown
"""

from .dual_store import DualDocStore, SyncFilterError, get_doc_store
from .models import Document, DocumentMetadata, DocSource, Library, SearchResult, SyncDirection, Tier
from .scraper import DocScraper, ScrapeError
from .search import RelevanceSearchEngine, SearchWeights
from .store import DocumentStore, DocumentWriteError

__all__ = [
	"Document",
	"DocumentMetadata",
	"DocSource",
	"Library",
	"SearchResult",
	"SyncDirection",
	"Tier",
	"DocumentStore",
	"DocumentWriteError",
	"DualDocStore",
	"SyncFilterError",
	"get_doc_store",
	"RelevanceSearchEngine",
	"SearchWeights",
	"DocScraper",
	"ScrapeError",
]
