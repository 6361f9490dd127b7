"""
Dual Document Store - project tier backed by a shared global cache.

Features:
- Version-compatible lookups with project precedence
- Copy-on-read promotion of global documents into the project tier
- Merged search across both tiers
- Last-writer-wins sync in either direction
- Staleness detection by library and by document
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

from ..config import Config
from .models import (
	Document,
	OutdatedItem,
	SearchResult,
	SyncDirection,
	SyncReport,
	Tier,
	parse_timestamp,
)
from .search import RelevanceSearchEngine
from .store import DocumentStore
from .versions import find_best_version

logger = logging.getLogger(__name__)

GLOBAL_SCORE_FACTOR = 0.9
PROJECT_COPY_MARKER = "current"
DEFAULT_MAX_AGE = timedelta(days=7)


class SyncFilterError(ValueError):
	"""Raised when a sync filter is incomplete (version given without library)."""
	pass


def format_age(age: timedelta) -> str:
	"""Human readable age, e.g. '3 days 4h' or '5 hours'."""
	total_hours = int(age.total_seconds() // 3600)
	days, hours = divmod(total_hours, 24)
	if days > 0:
		suffix = f" {hours}h" if hours > 0 else ""
		return f"{days} day{'s' if days > 1 else ''}{suffix}"
	return f"{hours} hour{'s' if hours != 1 else ''}"


class DualDocStore:
	"""
	One logical document store over a project tier and a global tier.

	Usage:
		storage = DualDocStore.from_config(config, "/path/to/project")
		await storage.initialize()

		doc = await storage.get_document("react", "^18.0.0")
		results = await storage.search_documents("hooks", limit=10)
		report = await storage.sync(SyncDirection.TO_GLOBAL)
	"""

	def __init__(self, project: DocumentStore, global_store: DocumentStore):
		self.project = project
		self.global_store = global_store

	@classmethod
	def from_config(cls, config: Config, working_directory: str | Path) -> "DualDocStore":
		return cls(
			project=DocumentStore(config.project_docs_dir(working_directory), Tier.PROJECT),
			global_store=DocumentStore(config.global_docs_dir, Tier.GLOBAL),
		)

	def tier(self, tier: Tier) -> DocumentStore:
		return self.project if tier == Tier.PROJECT else self.global_store

	async def initialize(self) -> None:
		"""
		Initialize both tiers concurrently.

		One failing tier is logged and tolerated; the first error is raised
		only when both fail.
		"""
		outcomes = await asyncio.gather(
			self.project.initialize(),
			self.global_store.initialize(),
			return_exceptions=True,
		)
		failures = [
			(store.tier, outcome)
			for store, outcome in zip((self.project, self.global_store), outcomes)
			if isinstance(outcome, Exception)
		]
		if len(failures) == len(outcomes):
			raise failures[0][1]
		for tier, error in failures:
			logger.warning(f"{tier.value} documentation tier unavailable: {error}")

	# -- lookup -----------------------------------------------------------

	async def _best_in_tier(self, store: DocumentStore, library: str, version: str) -> Optional[Document]:
		record = await store.get_library(library)
		if record is None or record.name != library or not record.versions:
			return None
		best = find_best_version(record.versions, version)
		if best is None:
			return None
		return await store.get_document(library, best)

	async def resolve(self, library: str, version: str) -> Optional[tuple[Document, Tier]]:
		"""
		Resolve (library, version) to a document and the tier it came from.

		Order: exact in project, compatible in project, exact in global,
		compatible in global. Global hits are copied into the project tier.
		"""
		doc = await self.project.get_document(library, version)
		if doc is None:
			doc = await self._best_in_tier(self.project, library, version)
		if doc is not None:
			return doc, Tier.PROJECT

		doc = await self.global_store.get_document(library, version)
		if doc is None:
			doc = await self._best_in_tier(self.global_store, library, version)
		if doc is not None:
			await self._copy_to_project(doc)
			return doc, Tier.GLOBAL

		return None

	async def get_document(self, library: str, version: str) -> Optional[Document]:
		resolved = await self.resolve(library, version)
		return resolved[0] if resolved else None

	async def _copy_to_project(self, doc: Document) -> None:
		"""Promote a global document unless the project already has that address."""
		try:
			existing = await self.project.get_document(doc.library, doc.version)
			if existing is None:
				await self.project.save_document(doc.model_copy(update={"project_id": PROJECT_COPY_MARKER}))
				logger.info(f"Cached {doc.library}@{doc.version} into project storage")
		except Exception as e:
			logger.warning(f"Could not cache {doc.library}@{doc.version} into project storage: {e}")

	async def get_document_by_id(self, doc_id: str) -> Optional[Document]:
		doc = await self.project.get_document_by_id(doc_id)
		if doc is None:
			doc = await self.global_store.get_document_by_id(doc_id)
		return doc

	# -- search -----------------------------------------------------------

	async def search_documents(self, query: str, limit: int = 10) -> list[SearchResult]:
		"""
		Search both tiers with the stores' built-in scorer.

		Global-only results are discounted; a document present in both tiers
		is reported once, from the project tier.
		"""
		project_results, global_results = await asyncio.gather(
			self.project.search_documents(query, limit),
			self.global_store.search_documents(query, limit),
		)

		merged = list(project_results)
		project_ids = {r.document.id for r in project_results}
		for result in global_results:
			if result.document.id not in project_ids:
				merged.append(result.model_copy(update={"score": result.score * GLOBAL_SCORE_FACTOR}))

		merged.sort(key=lambda r: r.score, reverse=True)
		return merged[:limit]

	async def list_documents(self, include_global: bool = True) -> list[tuple[Document, Tier]]:
		"""Documents from the included tiers, project copy first on duplicate ids."""
		if include_global:
			project_docs, global_docs = await asyncio.gather(
				self.project.list_documents(),
				self.global_store.list_documents(),
			)
		else:
			project_docs, global_docs = await self.project.list_documents(), []

		seen = {doc.id for doc in project_docs}
		documents = [(doc, Tier.PROJECT) for doc in project_docs]
		documents.extend((doc, Tier.GLOBAL) for doc in global_docs if doc.id not in seen)
		return documents

	async def rank_documents(
		self,
		query: str,
		limit: int = 10,
		engine: Optional[RelevanceSearchEngine] = None,
		include_global: bool = True,
	) -> list[SearchResult]:
		"""Rank documents of the included tiers with the relevance engine."""
		engine = engine or RelevanceSearchEngine()
		documents = await self.list_documents(include_global)
		tiers = {doc.id: tier for doc, tier in documents}
		results = engine.search([doc for doc, _ in documents], query, limit=limit)
		return [r.model_copy(update={"tier": tiers[r.document.id]}) for r in results]

	# -- sync -------------------------------------------------------------

	async def sync(
		self,
		direction: SyncDirection = SyncDirection.TO_GLOBAL,
		library: Optional[str] = None,
		version: Optional[str] = None,
	) -> SyncReport:
		"""
		Copy documents between tiers, newest update timestamp wins.

		A destination copy is overwritten only when missing or strictly older.
		Per-item failures are recorded and the batch continues.

		Raises:
			SyncFilterError: If version is given without library
		"""
		if version and not library:
			raise SyncFilterError("A version filter requires a library")

		report = SyncReport()
		if direction in (SyncDirection.TO_GLOBAL, SyncDirection.BIDIRECTIONAL):
			report.merge(await self._sync_tier(self.project, self.global_store, library, version))
		if direction in (SyncDirection.FROM_GLOBAL, SyncDirection.BIDIRECTIONAL):
			report.merge(await self._sync_tier(self.global_store, self.project, library, version))

		logger.info(f"Sync {direction.value}: {report.synced} synced, {report.errors} errors")
		return report

	async def _sync_tier(
		self,
		source: DocumentStore,
		destination: DocumentStore,
		library: Optional[str],
		version: Optional[str],
	) -> SyncReport:
		report = SyncReport()
		to_global = destination.tier == Tier.GLOBAL

		libraries = await source.get_libraries()
		if library:
			libraries = [lib for lib in libraries if lib.name == library]

		for lib in libraries:
			versions = [version] if version else list(lib.versions)
			for ver in versions:
				try:
					doc = await source.get_document(lib.name, ver)
					if doc is None:
						continue

					existing = await destination.get_document(lib.name, ver)
					if existing is not None and parse_timestamp(doc.updated_at) <= parse_timestamp(existing.updated_at):
						continue

					if to_global:
						await destination.save_document(doc)
						report.details.append(f"↑ {lib.name}@{ver} → global")
					else:
						await destination.save_document(doc.model_copy(update={"project_id": PROJECT_COPY_MARKER}))
						report.details.append(f"↓ {lib.name}@{ver} ← global")
					report.synced += 1
				except Exception as e:
					logger.warning(f"Failed to sync {lib.name}@{ver}: {e}")
					report.errors += 1
					report.details.append(f"✗ Failed to sync {lib.name}@{ver}: {e}")

		return report

	async def sync_with_global(self) -> SyncReport:
		"""Push every newer project document into the global tier."""
		return await self.sync(SyncDirection.TO_GLOBAL)

	# -- staleness --------------------------------------------------------

	async def update_outdated(
		self,
		max_age: timedelta = DEFAULT_MAX_AGE,
		now: Optional[datetime] = None,
	) -> list[str]:
		"""
		List project libraries whose last scrape is older than max_age.

		Nothing is modified; re-scraping is the caller's job.
		"""
		now = now or datetime.now(timezone.utc)
		flagged = []
		for library in await self.project.get_libraries():
			try:
				age = now - parse_timestamp(library.last_scraped)
			except ValueError:
				logger.debug(f"Unparseable last_scraped on {library.name}: {library.last_scraped}")
				continue
			if age > max_age:
				flagged.append(f"{library.name} (last updated: {library.last_scraped})")
		return flagged

	async def find_outdated(
		self,
		max_age: timedelta = DEFAULT_MAX_AGE,
		tiers: tuple[Tier, ...] = (Tier.PROJECT,),
		library: Optional[str] = None,
		now: Optional[datetime] = None,
	) -> list[OutdatedItem]:
		"""Documents in the given tiers not updated within max_age."""
		now = now or datetime.now(timezone.utc)
		outdated = []

		for tier in tiers:
			store = self.tier(tier)
			libraries = await store.get_libraries()
			if library:
				libraries = [lib for lib in libraries if lib.name == library]

			for lib in libraries:
				for ver in lib.versions:
					doc = await store.get_document(lib.name, ver)
					if doc is None:
						continue
					try:
						age = now - parse_timestamp(doc.updated_at)
					except ValueError:
						continue
					if age > max_age:
						outdated.append(OutdatedItem(
							library=lib.name,
							version=ver,
							last_updated=doc.updated_at,
							age=format_age(age),
							url=doc.url,
							tier=tier,
						))

		return outdated


# Per-project store instances
_stores: dict[str, DualDocStore] = {}


async def get_doc_store(config: Config, working_directory: str | Path) -> DualDocStore:
	"""Get or create the initialized store for a working directory."""
	key = str(config.project_docs_dir(working_directory).resolve())
	store = _stores.get(key)
	if store is None:
		store = DualDocStore.from_config(config, working_directory)
		await store.initialize()
		_stores[key] = store
	return store
