"""
Record Models - tasks and memories consulted by unified search.
"""

from enum import Enum

from pydantic import BaseModel, Field

from ..docs.models import utc_now


class TaskStatus(str, Enum):
	"""Status of a task."""
	PENDING = "pending"
	IN_PROGRESS = "in-progress"
	DONE = "done"
	BLOCKED = "blocked"


class Task(BaseModel):
	"""A unit of work tracked for a project."""
	id: str = Field(description="Unique task identifier")
	name: str = Field(description="Short task name")
	details: str = Field(default="", description="Longer description")
	tags: list[str] = Field(default_factory=list)
	status: TaskStatus = Field(default=TaskStatus.PENDING)
	created_at: str = Field(default_factory=utc_now)
	updated_at: str = Field(default_factory=utc_now)


class Memory(BaseModel):
	"""A remembered fact or note."""
	id: str = Field(description="Unique memory identifier")
	title: str
	content: str
	category: str = Field(default="")
	created_at: str = Field(default_factory=utc_now)


class MemorySearchResult(BaseModel):
	memory: Memory
	score: float
