"""Records module - task and memory stores consulted by unified search."""

from .memories import MemoryStore, get_memory_store
from .models import Memory, MemorySearchResult, Task, TaskStatus
from .tasks import TaskNotFoundError, TaskStore, get_task_store

__all__ = [
	"Task",
	"TaskStatus",
	"Memory",
	"MemorySearchResult",
	"TaskStore",
	"TaskNotFoundError",
	"MemoryStore",
	"get_task_store",
	"get_memory_store",
]
