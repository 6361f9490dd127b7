"""Shared test fixtures and helpers for docshelf tests."""

from pathlib import Path
from typing import Callable, Optional

from docshelf.config import Config
from docshelf.docs.dual_store import DualDocStore
from docshelf.docs.models import Document, DocumentMetadata, Tier
from docshelf.docs.store import DocumentStore

OLD_TIMESTAMP = "2020-01-01T00:00:00+00:00"


def capture_tools(config: Config, register_fn: Callable) -> dict:
	"""Register tools on a mock MCP and return the captured tool functions.

	Args:
		config: Config object to pass to the registration function
		register_fn: The registration function (e.g., register_docs_tools)

	Returns:
		Dict mapping tool name to the tool function
	"""
	captured = {}

	class MockMCP:
		def tool(self):
			def decorator(fn):
				captured[fn.__name__] = fn
				return fn
			return decorator

	register_fn(MockMCP(), config)
	return captured


def make_config(root: Path) -> Config:
	"""Config with every path under root."""
	config = Config(config_dir=root / "config", data_dir=root / "data")
	config.ensure_dirs()
	return config


def make_dual_store(root: Path) -> DualDocStore:
	return DualDocStore(
		project=DocumentStore(root / "project", Tier.PROJECT),
		global_store=DocumentStore(root / "global", Tier.GLOBAL),
	)


def make_doc(
	library: str = "react",
	version: str = "18.2.0",
	content: str = "# Hooks\n\nuseEffect runs after render.",
	title: Optional[str] = "React Hooks",
	description: Optional[str] = None,
	url: str = "https://react.dev/reference/react",
	updated_at: Optional[str] = None,
	doc_id: Optional[str] = None,
) -> Document:
	"""Create a Document with realistic content for testing."""
	doc = Document.new(
		library=library,
		version=version,
		url=url,
		content=content,
		metadata=DocumentMetadata(title=title, description=description),
	)
	updates = {}
	if updated_at:
		updates["updated_at"] = updated_at
		updates["created_at"] = updated_at
	if doc_id:
		updates["id"] = doc_id
	return doc.model_copy(update=updates) if updates else doc
