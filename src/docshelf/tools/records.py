"""Task and memory tools - the records unified search draws on."""

import json

from mcp.server.fastmcp import FastMCP

from ..config import Config
from ..records import TaskNotFoundError, TaskStatus, get_memory_store, get_task_store


def _parse_tags(tags: str) -> list[str]:
	return [t.strip() for t in tags.split(",") if t.strip()]


def register_records_tools(mcp: FastMCP, config: Config) -> None:
	"""Register task and memory tools."""

	@mcp.tool()
	async def create_task(name: str, details: str = "", tags: str = "") -> str:
		"""
		Create a task.

		Args:
			name: Short task name
			details: Longer description (optional)
			tags: Comma-separated tags (optional)
		"""
		store = await get_task_store(config.records_db_path)
		task = await store.create_task(name, details=details, tags=_parse_tags(tags))
		return json.dumps({"success": True, "task": task.model_dump(mode="json")}, indent=2)

	@mcp.tool()
	async def list_tasks(status: str = "") -> str:
		"""
		List tasks, optionally filtered by status.

		Args:
			status: "pending", "in-progress", "done" or "blocked" (optional)
		"""
		try:
			task_status = TaskStatus(status) if status else None
		except ValueError:
			return json.dumps({"error": f"Unknown status '{status}'"})

		store = await get_task_store(config.records_db_path)
		tasks = await store.list_tasks(task_status)
		return json.dumps({
			"tasks": [t.model_dump(mode="json") for t in tasks],
			"total": len(tasks),
		}, indent=2)

	@mcp.tool()
	async def update_task_status(task_id: str, status: str) -> str:
		"""
		Change the status of a task.

		Args:
			task_id: The task ID
			status: "pending", "in-progress", "done" or "blocked"
		"""
		try:
			task_status = TaskStatus(status)
		except ValueError:
			return json.dumps({"error": f"Unknown status '{status}'"})

		store = await get_task_store(config.records_db_path)
		try:
			task = await store.update_task_status(task_id, task_status)
		except TaskNotFoundError as e:
			return json.dumps({"error": str(e)})
		return json.dumps({"success": True, "task": task.model_dump(mode="json")}, indent=2)

	@mcp.tool()
	async def create_memory(title: str, content: str, category: str = "") -> str:
		"""
		Remember a fact or note.

		Args:
			title: Short title
			content: The note itself
			category: Optional category
		"""
		store = await get_memory_store(config.records_db_path)
		memory = await store.create_memory(title, content, category)
		return json.dumps({"success": True, "memory": memory.model_dump(mode="json")}, indent=2)

	@mcp.tool()
	async def search_memories(query: str, limit: int = 10) -> str:
		"""
		Search memories by title and content.

		Args:
			query: Search text
			limit: Maximum results (default: 10)
		"""
		store = await get_memory_store(config.records_db_path)
		results = await store.search(query, limit=limit)
		return json.dumps({
			"results": [
				{**r.memory.model_dump(mode="json"), "score": round(r.score, 4)}
				for r in results
			],
			"total": len(results),
		}, indent=2)
