"""
Task Store - SQLite-backed task records.
"""

import logging
import uuid
from pathlib import Path
from typing import Optional

import aiosqlite

from ..docs.models import utc_now
from .models import Task, TaskStatus

logger = logging.getLogger(__name__)


class TaskNotFoundError(Exception):
	"""Raised when a task is not found."""
	pass


class TaskStore:
	"""
	SQLite-backed task storage.

	Usage:
		store = TaskStore("data/records.db")
		await store.init()

		task = await store.create_task("Upgrade react", details="Move to 18.2")
		tasks = await store.list_tasks(status=TaskStatus.PENDING)
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
			CREATE TABLE IF NOT EXISTS tasks (
				id TEXT PRIMARY KEY,
				status TEXT NOT NULL,
				data TEXT NOT NULL,
				created_at TEXT NOT NULL,
				updated_at TEXT NOT NULL
			)
		""")
		await self._db.commit()
		logger.info(f"Task store initialized: {self.db_path}")

	async def close(self):
		"""Close the database connection."""
		if self._db:
			await self._db.close()
			self._db = None

	async def create_task(
		self,
		name: str,
		details: str = "",
		tags: Optional[list[str]] = None,
		status: TaskStatus = TaskStatus.PENDING,
	) -> Task:
		if not self._db:
			await self.init()

		task = Task(id=str(uuid.uuid4())[:12], name=name, details=details, tags=tags or [], status=status)
		await self._db.execute(
			"INSERT INTO tasks (id, status, data, created_at, updated_at) VALUES (?, ?, ?, ?, ?)",
			(task.id, task.status.value, task.model_dump_json(), task.created_at, task.updated_at),
		)
		await self._db.commit()
		logger.info(f"Created task {task.id}: {name}")
		return task

	async def get_task(self, task_id: str) -> Optional[Task]:
		if not self._db:
			await self.init()

		async with self._db.execute("SELECT data FROM tasks WHERE id = ?", (task_id,)) as cursor:
			row = await cursor.fetchone()
		return Task.model_validate_json(row["data"]) if row else None

	async def list_tasks(self, status: Optional[TaskStatus] = None) -> list[Task]:
		if not self._db:
			await self.init()

		if status:
			query, params = "SELECT data FROM tasks WHERE status = ? ORDER BY created_at", (status.value,)
		else:
			query, params = "SELECT data FROM tasks ORDER BY created_at", ()

		async with self._db.execute(query, params) as cursor:
			rows = await cursor.fetchall()
		return [Task.model_validate_json(row["data"]) for row in rows]

	async def update_task_status(self, task_id: str, status: TaskStatus) -> Task:
		"""
		Raises:
			TaskNotFoundError: If no task has that id
		"""
		task = await self.get_task(task_id)
		if task is None:
			raise TaskNotFoundError(f"Task not found: {task_id}")

		task.status = status
		task.updated_at = utc_now()
		await self._db.execute(
			"UPDATE tasks SET status = ?, data = ?, updated_at = ? WHERE id = ?",
			(task.status.value, task.model_dump_json(), task.updated_at, task_id),
		)
		await self._db.commit()
		return task


# Global store instance
_store: Optional[TaskStore] = None


async def get_task_store(db_path: str | Path) -> TaskStore:
	"""Get or create the global task store."""
	global _store
	if _store is None:
		_store = TaskStore(db_path)
		await _store.init()
	return _store
