"""
Relevance Search - documentation-aware ranking over in-memory documents.

Scores each document against a free-text query with weighted structural
signals: title, description, library name, raw content, markdown headers,
code blocks, and API-reference tokens. Scores are clamped to [0, 1].

This is a different scale from DocumentStore.search_documents (whose scores
are unnormalized); results from the two are not comparable.
"""

import re
from dataclasses import dataclass
from typing import Iterable

from .models import Document, SearchResult

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")
_HEADER_RE = re.compile(r"^#{1,6}\s+(.+)$", re.MULTILINE)
_FENCED_CODE_RE = re.compile(r"```[\s\S]*?```")
_INLINE_CODE_RE = re.compile(r"`([^`]+)`")
_API_PATTERNS = [
	re.compile(r"\b(\w+)\s*\("),  # function calls
	re.compile(r"\.(\w+)\s*\("),  # method calls
	re.compile(r"\b(?:function|method|api)\s+(\w+)", re.IGNORECASE),
	re.compile(r"\b(\w+):\s*function"),  # object methods
]


@dataclass(frozen=True)
class SearchWeights:
	"""Per-signal weights; the defaults sum to 1.0."""
	title: float = 0.30
	description: float = 0.15
	library: float = 0.15
	content: float = 0.10
	headers: float = 0.15
	code_blocks: float = 0.10
	api_references: float = 0.05


DEFAULT_WEIGHTS = SearchWeights()


def tokenize(text: str) -> list[str]:
	"""Lowercase query terms, non-alphanumerics stripped, longer than 2 chars."""
	terms = []
	for raw in text.lower().split():
		term = _NON_ALNUM_RE.sub("", raw)
		if len(term) > 2:
			terms.append(term)
	return terms


def extract_headers(content: str) -> list[str]:
	return _HEADER_RE.findall(content)


def extract_code_blocks(content: str) -> list[str]:
	"""Fenced blocks (markers included) followed by inline code spans."""
	blocks = _FENCED_CODE_RE.findall(content)
	blocks.extend(_INLINE_CODE_RE.findall(content))
	return blocks


def extract_api_references(content: str) -> list[str]:
	"""Deduplicated function/method-like tokens, in first-seen order."""
	refs: dict[str, None] = {}
	for pattern in _API_PATTERNS:
		for name in pattern.findall(content):
			refs.setdefault(name, None)
	return list(refs)


def term_score(text: str, terms: list[str]) -> float:
	"""Fraction of terms found as substrings of text."""
	if not terms:
		return 0.0
	return sum(1 for term in terms if term in text) / len(terms)


class RelevanceSearchEngine:
	"""
	Stateless multi-signal scorer.

	Usage:
		engine = RelevanceSearchEngine()
		results = engine.search(documents, "useEffect cleanup", limit=5)
	"""

	def __init__(self, weights: SearchWeights = DEFAULT_WEIGHTS):
		self.weights = weights

	def search(
		self,
		documents: Iterable[Document],
		query: str,
		limit: int = 10,
		include_highlights: bool = True,
		highlight_length: int = 100,
		min_score: float = 0.1,
	) -> list[SearchResult]:
		"""
		Rank documents against a query.

		Args:
			documents: Candidate documents (scanned linearly)
			query: Free-text query
			limit: Maximum results to return
			include_highlights: Whether to extract excerpts
			highlight_length: Context characters around each excerpt
			min_score: Results scoring below this are dropped

		Returns:
			Results ordered by descending score
		"""
		query_lower = query.strip().lower()
		if not query_lower:
			return []
		terms = tokenize(query_lower)

		results = []
		for doc in documents:
			score = self.score(doc, query_lower, terms)
			if score < min_score:
				continue
			highlights = self.extract_highlights(doc, query_lower, highlight_length) if include_highlights else []
			results.append(SearchResult(document=doc, score=score, highlights=highlights))

		results.sort(key=lambda r: r.score, reverse=True)
		return results[:limit]

	def score(self, doc: Document, query_lower: str, terms: list[str]) -> float:
		"""Weighted relevance of one document, clamped to [0, 1]."""
		w = self.weights
		score = 0.0

		if doc.metadata.title:
			score += w.title * self._field_score(doc.metadata.title.lower(), query_lower, terms, bonus=2.0)
		if doc.metadata.description:
			score += w.description * self._field_score(
				doc.metadata.description.lower(), query_lower, terms, bonus=1.5
			)
		score += w.library * self._field_score(doc.library.lower(), query_lower, terms, bonus=2.0)

		score += w.headers * self._header_score(extract_headers(doc.content), query_lower, terms)
		score += w.code_blocks * self._code_score(extract_code_blocks(doc.content), query_lower, terms)
		score += w.api_references * self._api_score(extract_api_references(doc.content), query_lower, terms)
		score += w.content * self._field_score(doc.content.lower(), query_lower, terms, bonus=1.0)

		return max(0.0, min(1.0, score))

	@staticmethod
	def _field_score(text: str, query_lower: str, terms: list[str], bonus: float) -> float:
		if query_lower in text:
			return bonus
		return term_score(text, terms)

	@staticmethod
	def _header_score(headers: list[str], query_lower: str, terms: list[str]) -> float:
		if not headers:
			return 0.0
		total = 0.0
		for header in headers:
			header_lower = header.lower()
			if query_lower in header_lower:
				total += 1.0
			else:
				total += term_score(header_lower, terms) * 0.5
		return min(1.0, total / len(headers))

	@staticmethod
	def _code_score(blocks: list[str], query_lower: str, terms: list[str]) -> float:
		if not blocks:
			return 0.0
		matches = 0
		for block in blocks:
			block_lower = block.lower()
			if query_lower in block_lower or any(term in block_lower for term in terms):
				matches += 1
		return min(1.0, matches / len(blocks))

	@staticmethod
	def _api_score(refs: list[str], query_lower: str, terms: list[str]) -> float:
		# A tenth of the references matching is already a full score
		if not refs:
			return 0.0
		matches = 0
		for ref in refs:
			ref_lower = ref.lower()
			if any(needle in ref_lower or ref_lower in needle for needle in [query_lower, *terms]):
				matches += 1
		return min(1.0, matches / max(1.0, len(refs) / 10))

	@staticmethod
	def extract_highlights(doc: Document, query_lower: str, max_length: int = 100) -> list[str]:
		"""
		Up to three excerpts around the first occurrences of the query.

		Falls back to the first header containing the query.
		"""
		content = doc.content
		content_lower = content.lower()
		half = max_length // 2
		highlights = []

		index = content_lower.find(query_lower)
		while index != -1 and len(highlights) < 3:
			start = max(0, index - half)
			end = min(len(content), index + len(query_lower) + half)
			excerpt = content[start:end]
			if start > 0:
				excerpt = "..." + excerpt
			if end < len(content):
				excerpt = excerpt + "..."
			highlights.append(excerpt)
			index = content_lower.find(query_lower, index + 1)

		if not highlights:
			for header in extract_headers(content):
				if query_lower in header.lower():
					highlights.append(f"### {header}")
					break

		return highlights
