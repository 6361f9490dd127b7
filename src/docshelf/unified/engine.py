"""
Unified Search - one query across documentation, tasks and memories.

Each source is searched concurrently; a failing source contributes no
results instead of failing the whole query.
"""

import asyncio
import logging
import re
from collections import Counter
from typing import Literal, Union

from pydantic import BaseModel, Field

from ..docs.dual_store import DualDocStore
from ..docs.models import SearchResult
from ..records.memories import MemoryStore
from ..records.models import MemorySearchResult, Task, TaskStatus
from ..records.tasks import TaskStore

logger = logging.getLogger(__name__)

ItemType = Literal["memory", "task", "document"]

SOURCE_LIMIT = 50
MEMORY_THRESHOLD = 0.1
MAX_KEYWORDS = 10
QUERY_KEYWORDS = 5

STOP_WORDS = frozenset({
	"the", "is", "at", "which", "on", "and", "a", "an", "as", "are",
	"been", "by", "for", "from", "has", "have", "in", "of", "that",
	"this", "to", "was", "will", "with", "be", "can", "could", "do",
	"does", "did", "doing", "done", "should", "would", "may",
	"might", "must", "shall", "about", "above", "after", "again",
	"all", "also", "am", "any", "because", "being", "but",
	"each", "few", "had", "having", "he",
	"her", "here", "him", "his", "how", "i", "if", "into",
	"it", "its", "just", "me", "more", "most", "my", "no", "not", "now",
	"once", "only", "or", "other", "our", "out", "over",
	"own", "same", "she", "so", "some", "such", "than",
	"their", "them", "then", "there", "these", "they", "those",
	"through", "too", "under", "up", "very", "we", "were",
	"what", "when", "where", "while", "who", "why",
	"you", "your",
})

_TASK_STATUS_BOOST = {
	TaskStatus.IN_PROGRESS: 1.2,
	TaskStatus.PENDING: 1.1,
}


class UnifiedSearchResult(BaseModel):
	"""A result from any source, tagged with its type."""
	type: ItemType
	score: float
	data: Union[SearchResult, Task, MemorySearchResult]
	highlights: list[str] = Field(default_factory=list)


def extract_keywords(text: str) -> list[str]:
	"""Most frequent non-stop-words longer than three characters (top 10)."""
	words = [
		word for word in re.split(r"\s+", text.lower())
		if len(word) > 3 and word not in STOP_WORDS
	]
	# Counter keeps first-seen order for equal counts
	return [word for word, _ in Counter(words).most_common(MAX_KEYWORDS)]


def score_task(task: Task, query_lower: str) -> tuple[float, list[str]]:
	"""Substring score over name, details and tags, boosted by status."""
	score = 0.0
	highlights = []

	if query_lower in task.name.lower():
		score += 0.4
		highlights.append(f"Task: {task.name}")

	details_lower = task.details.lower()
	if query_lower in details_lower:
		score += 0.3
		index = details_lower.index(query_lower)
		start = max(0, index - 50)
		end = min(len(task.details), index + len(query_lower) + 50)
		highlights.append("..." + task.details[start:end] + "...")

	for tag in task.tags:
		if query_lower in tag.lower():
			score += 0.2
			highlights.append(f"Tag: {tag}")

	score *= _TASK_STATUS_BOOST.get(task.status, 1.0)
	return min(1.0, score), highlights


class UnifiedSearchEngine:
	"""
	Fans a query out to documentation, tasks and memories and merges results.

	Usage:
		engine = UnifiedSearchEngine(memory_store, task_store, doc_store)
		results = await engine.search("auth tokens", limit=10)
		related = await engine.get_related_content("task", task_id)
	"""

	def __init__(self, memories: MemoryStore, tasks: TaskStore, documents: DualDocStore):
		self.memories = memories
		self.tasks = tasks
		self.documents = documents

	async def search(
		self,
		query: str,
		include_memories: bool = True,
		include_tasks: bool = True,
		include_documents: bool = True,
		limit: int = 20,
		min_score: float = 0.1,
	) -> list[UnifiedSearchResult]:
		"""
		Search all included sources concurrently.

		Returns:
			Results scoring at least min_score, highest first, at most limit
		"""
		searches = []
		if include_memories:
			searches.append(self._search_memories(query))
		if include_tasks:
			searches.append(self._search_tasks(query))
		if include_documents:
			searches.append(self._search_documents(query))

		batches = await asyncio.gather(*searches)
		results = [r for batch in batches for r in batch if r.score >= min_score]
		results.sort(key=lambda r: r.score, reverse=True)
		return results[:limit]

	async def _search_memories(self, query: str) -> list[UnifiedSearchResult]:
		try:
			found = await self.memories.search(query, limit=SOURCE_LIMIT, threshold=MEMORY_THRESHOLD)
		except Exception as e:
			logger.error(f"Memory search failed for '{query}': {e}")
			return []

		return [
			UnifiedSearchResult(
				type="memory",
				score=r.score,
				data=r,
				highlights=[r.memory.content[:200] + "..."],
			)
			for r in found
		]

	async def _search_tasks(self, query: str) -> list[UnifiedSearchResult]:
		try:
			tasks = await self.tasks.list_tasks()
		except Exception as e:
			logger.error(f"Task search failed for '{query}': {e}")
			return []

		query_lower = query.lower()
		results = []
		for task in tasks:
			score, highlights = score_task(task, query_lower)
			if score > 0:
				results.append(UnifiedSearchResult(type="task", score=score, data=task, highlights=highlights))
		return results

	async def _search_documents(self, query: str) -> list[UnifiedSearchResult]:
		try:
			found = await self.documents.search_documents(query, SOURCE_LIMIT)
		except Exception as e:
			logger.error(f"Document search failed for '{query}': {e}")
			return []

		return [
			UnifiedSearchResult(type="document", score=r.score, data=r, highlights=r.highlights)
			for r in found
		]

	async def get_related_content(
		self,
		item_type: ItemType,
		item_id: str,
		limit: int = 10,
	) -> list[UnifiedSearchResult]:
		"""Search using keywords drawn from an existing memory, task or document."""
		keywords: list[str] = []

		if item_type == "memory":
			memory = await self.memories.get_memory(item_id)
			if memory:
				keywords = extract_keywords(f"{memory.title} {memory.content}")
		elif item_type == "task":
			task = await self.tasks.get_task(item_id)
			if task:
				keywords = extract_keywords(f"{task.name} {task.details}")
				keywords.extend(task.tags)
		elif item_type == "document":
			doc = await self.documents.get_document_by_id(item_id)
			if doc:
				keywords = extract_keywords(f"{doc.metadata.title or ''} {doc.content}")

		if not keywords:
			return []

		query = " ".join(keywords[:QUERY_KEYWORDS])
		logger.debug(f"Related content for {item_type} {item_id}: '{query}'")
		return await self.search(query, limit=limit)
