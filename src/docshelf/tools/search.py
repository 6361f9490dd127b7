"""Unified search tools - one query across docs, tasks and memories."""

import json
import os

from mcp.server.fastmcp import FastMCP

from ..config import Config
from ..docs.dual_store import get_doc_store
from ..records import get_memory_store, get_task_store
from ..unified import UnifiedSearchEngine, UnifiedSearchResult

ITEM_TYPES = ("memory", "task", "document")


def _result_summary(result: UnifiedSearchResult) -> dict:
	"""Flatten a unified result for JSON output."""
	summary = {
		"type": result.type,
		"score": round(result.score, 4),
		"highlights": result.highlights,
	}
	if result.type == "memory":
		summary["id"] = result.data.memory.id
		summary["title"] = result.data.memory.title
	elif result.type == "task":
		summary["id"] = result.data.id
		summary["title"] = result.data.name
		summary["status"] = result.data.status.value
	else:
		doc = result.data.document
		summary["id"] = doc.id
		summary["title"] = doc.title
		summary["library"] = doc.library
		summary["version"] = doc.version
		summary["tier"] = result.data.tier.value if result.data.tier else None
	return summary


def register_search_tools(mcp: FastMCP, config: Config) -> None:
	"""Register unified search tools."""

	async def _engine(working_directory: str) -> UnifiedSearchEngine:
		return UnifiedSearchEngine(
			memories=await get_memory_store(config.records_db_path),
			tasks=await get_task_store(config.records_db_path),
			documents=await get_doc_store(config, working_directory or os.getcwd()),
		)

	@mcp.tool()
	async def unified_search(
		query: str,
		include_memories: bool = True,
		include_tasks: bool = True,
		include_documents: bool = True,
		limit: int = 20,
		min_score: float = 0.1,
		working_directory: str = "",
	) -> str:
		"""
		Search documentation, tasks and memories at once.

		Args:
			query: Search text
			include_memories: Search memories (default: True)
			include_tasks: Search tasks (default: True)
			include_documents: Search documentation (default: True)
			limit: Maximum results (default: 20)
			min_score: Minimum score to include (default: 0.1)
			working_directory: Project root (default: current directory)
		"""
		engine = await _engine(working_directory)
		results = await engine.search(
			query,
			include_memories=include_memories,
			include_tasks=include_tasks,
			include_documents=include_documents,
			limit=limit,
			min_score=min_score,
		)
		return json.dumps({
			"query": query,
			"results": [_result_summary(r) for r in results],
			"total": len(results),
		}, indent=2)

	@mcp.tool()
	async def find_related_content(
		item_type: str,
		item_id: str,
		limit: int = 10,
		working_directory: str = "",
	) -> str:
		"""
		Find content related to an existing memory, task or document.

		Args:
			item_type: "memory", "task" or "document"
			item_id: Identifier of the item
			limit: Maximum results (default: 10)
			working_directory: Project root (default: current directory)
		"""
		if item_type not in ITEM_TYPES:
			return json.dumps({"error": f"Unknown item type '{item_type}' (expected memory, task or document)"})

		engine = await _engine(working_directory)
		results = await engine.get_related_content(item_type, item_id, limit=limit)
		return json.dumps({
			"item_type": item_type,
			"item_id": item_id,
			"results": [_result_summary(r) for r in results],
			"total": len(results),
		}, indent=2)
