"""
Documentation Models - Pydantic schemas for cached documentation.

Defines documents, the per-tier library aggregate, and the transient
values produced by searches, syncs and staleness checks.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


def utc_now() -> str:
	"""Current time as an ISO-8601 string (UTC)."""
	return datetime.now(timezone.utc).isoformat()


def parse_timestamp(value: str) -> datetime:
	"""Parse an ISO-8601 timestamp; naive values are treated as UTC."""
	parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
	if parsed.tzinfo is None:
		parsed = parsed.replace(tzinfo=timezone.utc)
	return parsed


class DocSource(str, Enum):
	"""Where a document's content came from."""
	WEB = "web"
	GITHUB = "github"
	NPM = "npm"
	PYPI = "pypi"
	LOCAL = "local"


class Tier(str, Enum):
	"""The two physical document stores."""
	PROJECT = "project"
	GLOBAL = "global"


class DocumentMetadata(BaseModel):
	"""Descriptive metadata extracted at scrape time."""
	title: Optional[str] = Field(default=None)
	description: Optional[str] = Field(default=None)
	last_updated: Optional[str] = Field(default=None, description="Upstream last-modified marker")
	source: Optional[DocSource] = Field(default=None)


class Document(BaseModel):
	"""
	One scraped unit of documentation.

	Addressed within a tier by (library, version); ``id`` is unique store-wide.
	"""
	id: str = Field(description="Opaque identifier")
	library: str = Field(description="Library name (e.g., 'react')")
	version: str = Field(description="Version string (e.g., '18.2.0' or 'latest')")
	url: str = Field(default="", description="Source URL")
	content: str = Field(default="", description="Markdown-like text content")
	metadata: DocumentMetadata = Field(default_factory=DocumentMetadata)
	project_id: Optional[str] = Field(default=None, description="Set on project-associated copies")

	created_at: str = Field(default_factory=utc_now)
	updated_at: str = Field(default_factory=utc_now)

	@classmethod
	def new(
		cls,
		library: str,
		version: str,
		url: str,
		content: str,
		metadata: Optional[DocumentMetadata] = None,
		project_id: Optional[str] = None,
	) -> "Document":
		"""Create a document with a fresh identifier and timestamps."""
		now = utc_now()
		return cls(
			id=str(uuid.uuid4()),
			library=library,
			version=version,
			url=url,
			content=content,
			metadata=metadata or DocumentMetadata(),
			project_id=project_id,
			created_at=now,
			updated_at=now,
		)

	@property
	def title(self) -> str:
		return self.metadata.title or "Untitled"


class Library(BaseModel):
	"""Aggregate record for one documentation library within a tier."""
	name: str
	versions: list[str] = Field(default_factory=list)
	source: str = Field(default="unknown")
	last_scraped: str = Field(default_factory=utc_now)
	project_specific: bool = Field(default=True)

	def add_version(self, version: str) -> None:
		if version not in self.versions:
			self.versions.append(version)

	def remove_version(self, version: str) -> None:
		self.versions = [v for v in self.versions if v != version]


class SearchResult(BaseModel):
	"""A scored document reference. Never persisted."""
	document: Document
	score: float
	highlights: list[str] = Field(default_factory=list)
	tier: Optional[Tier] = Field(default=None)


class StorageStats(BaseModel):
	"""Document and library counts for one tier."""
	total_documents: int = 0
	total_libraries: int = 0
	documents_by_library: dict[str, int] = Field(default_factory=dict)


class SyncDirection(str, Enum):
	"""Direction of a directed sync between tiers."""
	TO_GLOBAL = "to-global"
	FROM_GLOBAL = "from-global"
	BIDIRECTIONAL = "bidirectional"


class SyncReport(BaseModel):
	"""Outcome of a sync batch: counts plus one log line per transfer."""
	synced: int = 0
	errors: int = 0
	details: list[str] = Field(default_factory=list)

	def merge(self, other: "SyncReport") -> None:
		self.synced += other.synced
		self.errors += other.errors
		self.details.extend(other.details)


class OutdatedItem(BaseModel):
	"""A document whose last update is older than the staleness threshold."""
	library: str
	version: str
	last_updated: str
	age: str
	url: str = ""
	tier: Tier
