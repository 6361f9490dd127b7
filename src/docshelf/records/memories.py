"""
Memory Store - SQLite-backed memories with simple relevance search.
"""

import logging
import uuid
from pathlib import Path
from typing import Optional

import aiosqlite

from ..docs.search import term_score, tokenize
from .models import Memory, MemorySearchResult

logger = logging.getLogger(__name__)


def score_memory(memory: Memory, query: str) -> float:
	"""Title matches count more than content matches; result is in [0, 1]."""
	query_lower = query.strip().lower()
	if not query_lower:
		return 0.0
	terms = tokenize(query_lower)
	title = memory.title.lower()
	content = memory.content.lower()

	title_score = 1.0 if query_lower in title else term_score(title, terms)
	content_score = 1.0 if query_lower in content else term_score(content, terms)
	return min(1.0, 0.6 * title_score + 0.4 * content_score)


class MemoryStore:
	"""
	SQLite-backed memory storage.

	Usage:
		store = MemoryStore("data/records.db")
		await store.create_memory("Auth flow", "Tokens refresh every 15 minutes")
		results = await store.search("token refresh", limit=5, threshold=0.2)
	"""

	def __init__(self, db_path: str | Path):
		self.db_path = Path(db_path)
		self.db_path.parent.mkdir(parents=True, exist_ok=True)
		self._db: Optional[aiosqlite.Connection] = None

	async def init(self):
		"""Initialize the database schema."""
		self._db = await aiosqlite.connect(str(self.db_path))
		self._db.row_factory = aiosqlite.Row

		await self._db.execute("""
			CREATE TABLE IF NOT EXISTS memories (
				id TEXT PRIMARY KEY,
				category TEXT NOT NULL,
				data TEXT NOT NULL,
				created_at TEXT NOT NULL
			)
		""")
		await self._db.commit()
		logger.info(f"Memory store initialized: {self.db_path}")

	async def close(self):
		if self._db:
			await self._db.close()
			self._db = None

	async def create_memory(self, title: str, content: str, category: str = "") -> Memory:
		if not self._db:
			await self.init()

		memory = Memory(id=str(uuid.uuid4())[:12], title=title, content=content, category=category)
		await self._db.execute(
			"INSERT INTO memories (id, category, data, created_at) VALUES (?, ?, ?, ?)",
			(memory.id, memory.category, memory.model_dump_json(), memory.created_at),
		)
		await self._db.commit()
		logger.info(f"Created memory {memory.id}: {title}")
		return memory

	async def get_memory(self, memory_id: str) -> Optional[Memory]:
		if not self._db:
			await self.init()

		async with self._db.execute("SELECT data FROM memories WHERE id = ?", (memory_id,)) as cursor:
			row = await cursor.fetchone()
		return Memory.model_validate_json(row["data"]) if row else None

	async def list_memories(self, category: Optional[str] = None) -> list[Memory]:
		if not self._db:
			await self.init()

		if category:
			query, params = "SELECT data FROM memories WHERE category = ? ORDER BY created_at", (category,)
		else:
			query, params = "SELECT data FROM memories ORDER BY created_at", ()

		async with self._db.execute(query, params) as cursor:
			rows = await cursor.fetchall()
		return [Memory.model_validate_json(row["data"]) for row in rows]

	async def search(self, query: str, limit: int = 10, threshold: float = 0.1) -> list[MemorySearchResult]:
		"""Score every memory against the query and keep those at or above threshold."""
		results = []
		for memory in await self.list_memories():
			score = score_memory(memory, query)
			if score >= threshold:
				results.append(MemorySearchResult(memory=memory, score=score))

		results.sort(key=lambda r: r.score, reverse=True)
		return results[:limit]


# Global store instance
_store: Optional[MemoryStore] = None


async def get_memory_store(db_path: str | Path) -> MemoryStore:
	"""Get or create the global memory store."""
	global _store
	if _store is None:
		_store = MemoryStore(db_path)
		await _store.init()
	return _store
