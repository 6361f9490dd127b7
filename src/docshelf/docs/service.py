"""
Documentation Service - operations behind the documentation MCP tools.

Each function takes the dual store (and scraper where needed) and returns a
JSON string, so the tool layer stays a thin registration shim.
"""

import json
import logging
from datetime import timedelta
from typing import Optional

from .dual_store import DualDocStore, SyncFilterError
from .models import Document, DocSource, SearchResult, SyncDirection, Tier
from .scraper import DocScraper, ScrapeError
from .search import RelevanceSearchEngine
from .store import DocumentWriteError

logger = logging.getLogger(__name__)

MAX_SEARCH_LIMIT = 50
SNIPPET_LENGTH = 150

RANKING_BASIC = "basic"
RANKING_RELEVANCE = "relevance"

_TIER_SELECTORS = {
	"project": (Tier.PROJECT,),
	"global": (Tier.GLOBAL,),
	"both": (Tier.PROJECT, Tier.GLOBAL),
}


def _select_tiers(selector: str) -> tuple[Tier, ...]:
	try:
		return _TIER_SELECTORS[selector]
	except KeyError:
		raise ValueError(f"Unknown storage '{selector}' (expected project, global or both)") from None


def _snippet(result: SearchResult) -> str:
	if result.highlights:
		return result.highlights[0]
	return result.document.content[:SNIPPET_LENGTH] + "..."


async def scrape_docs(
	storage: DualDocStore,
	scraper: DocScraper,
	url: str,
	library: str,
	version: str = "latest",
	project_specific: bool = True,
) -> str:
	"""
	Scrape a URL and store it as documentation for library@version.

	Re-scraping an address that already holds a document replaces its content
	and metadata but keeps its identifier and creation time.
	"""
	tier = Tier.PROJECT if project_specific else Tier.GLOBAL
	target = storage.tier(tier)

	try:
		scraped = await scraper.fetch(url)
	except ScrapeError as e:
		logger.error(f"Scrape failed for {library}@{version}: {e}")
		return json.dumps({"error": str(e), "library": library, "version": version, "url": url})

	metadata = scraped.metadata.model_copy(update={"source": DocSource.WEB})
	project_id = "current" if project_specific else None

	try:
		existing = await target.get_document(library, version)
		if existing is not None:
			doc = await target.update_document(existing.id, {
				"url": url,
				"content": scraped.content,
				"metadata": metadata.model_dump(),
				"project_id": project_id,
			})
		else:
			doc = await target.save_document(Document.new(
				library=library,
				version=version,
				url=url,
				content=scraped.content,
				metadata=metadata,
				project_id=project_id,
			))
	except DocumentWriteError as e:
		logger.error(f"Storing {library}@{version} failed: {e}")
		return json.dumps({"error": str(e), "library": library, "version": version})

	return json.dumps({
		"success": True,
		"document_id": doc.id,
		"library": library,
		"version": version,
		"title": doc.title,
		"content_length": len(doc.content),
		"storage": tier.value,
		"replaced": existing is not None,
	}, indent=2)


async def get_doc(storage: DualDocStore, library: str, version: str = "latest") -> str:
	"""Resolve library@version (ranges allowed) and return the full document."""
	resolved = await storage.resolve(library, version)
	if resolved is None:
		return json.dumps({
			"error": f"No documentation found for {library}@{version}",
			"library": library,
			"version": version,
			"hint": "Use list_libraries to see what is stored, or scrape_docs to add it",
		})

	doc, tier = resolved
	return json.dumps({
		"library": doc.library,
		"requested_version": version,
		"version": doc.version,
		"tier": tier.value,
		"document": doc.model_dump(mode="json"),
	}, indent=2)


async def search_docs(
	storage: DualDocStore,
	query: str,
	limit: int = 10,
	search_global: bool = True,
	ranking: str = RANKING_BASIC,
) -> str:
	"""
	Search stored documentation.

	ranking="basic" uses the stores' substring scorer (merged across tiers when
	search_global is set); ranking="relevance" uses the structural relevance
	engine. The two score on different scales.
	"""
	limit = max(1, min(limit, MAX_SEARCH_LIMIT))

	if ranking == RANKING_BASIC:
		if search_global:
			results = await storage.search_documents(query, limit)
		else:
			results = await storage.project.search_documents(query, limit)
	elif ranking == RANKING_RELEVANCE:
		results = await storage.rank_documents(
			query, limit, engine=RelevanceSearchEngine(), include_global=search_global,
		)
	else:
		return json.dumps({"error": f"Unknown ranking '{ranking}' (expected basic or relevance)"})

	if not results:
		return json.dumps({
			"results": [],
			"query": query,
			"message": f"No documentation found for query: \"{query}\"",
		})

	return json.dumps({
		"results": [{
			"library": r.document.library,
			"version": r.document.version,
			"title": r.document.title,
			"url": r.document.url,
			"score": round(r.score, 4),
			"tier": r.tier.value if r.tier else None,
			"snippet": _snippet(r),
		} for r in results],
		"total": len(results),
		"query": query,
		"ranking": ranking,
	}, indent=2)


async def list_libraries(storage: DualDocStore, include_global: bool = True) -> str:
	"""Merged library view; storage is project, global or both."""
	merged: dict[str, dict] = {}

	for lib in await storage.project.get_libraries():
		merged[lib.name] = {**lib.model_dump(), "storage": Tier.PROJECT.value}

	if include_global:
		for lib in await storage.global_store.get_libraries():
			existing = merged.get(lib.name)
			if existing is None:
				merged[lib.name] = {**lib.model_dump(), "storage": Tier.GLOBAL.value}
				continue
			existing["storage"] = "both"
			existing["versions"] = existing["versions"] + [v for v in lib.versions if v not in existing["versions"]]

	stats = {"project": (await storage.project.get_statistics()).model_dump()}
	if include_global:
		stats["global"] = (await storage.global_store.get_statistics()).model_dump()

	libraries = sorted(merged.values(), key=lambda lib: lib["name"].lower())
	if not libraries:
		return json.dumps({"libraries": [], "message": "No documentation libraries found.", "statistics": stats})

	return json.dumps({
		"libraries": libraries,
		"total": len(libraries),
		"statistics": stats,
	}, indent=2)


async def remove_docs(
	storage: DualDocStore,
	library: str,
	version: Optional[str] = None,
	storage_tier: str = "project",
	confirm: bool = False,
) -> str:
	"""
	Remove one version, or a whole library, from the selected tiers.

	Without confirm=True nothing is deleted and a cancelled response is returned.
	"""
	if confirm is not True:
		return json.dumps({
			"success": False,
			"cancelled": True,
			"message": "Set confirm to true to delete documentation",
		})

	try:
		tiers = _select_tiers(storage_tier)
	except ValueError as e:
		return json.dumps({"error": str(e), "library": library, "version": version})

	deleted = 0
	details = []
	try:
		for tier in tiers:
			store = storage.tier(tier)
			if version:
				doc = await store.get_document(library, version)
				if doc and await store.delete_document(doc.id):
					deleted += 1
					details.append(f"Removed {library}@{version} from {tier.value} storage")
			elif await store.delete_library(library):
				deleted += 1
				details.append(f"Removed all versions of {library} from {tier.value} storage")
	except DocumentWriteError as e:
		logger.error(f"Remove failed for {library}@{version or '*'}: {e}")
		return json.dumps({"error": str(e), "library": library, "version": version, "deleted": deleted})

	if deleted == 0:
		return json.dumps({"success": True, "deleted": 0, "message": "No documentation found to remove"})

	return json.dumps({"success": True, "deleted": deleted, "details": details}, indent=2)


async def sync_docs(
	storage: DualDocStore,
	direction: str = SyncDirection.TO_GLOBAL.value,
	library: Optional[str] = None,
	version: Optional[str] = None,
) -> str:
	"""Synchronize tiers (to-global, from-global or bidirectional)."""
	try:
		sync_direction = SyncDirection(direction)
	except ValueError:
		return json.dumps({
			"error": f"Unknown direction '{direction}' (expected to-global, from-global or bidirectional)",
		})

	try:
		report = await storage.sync(sync_direction, library=library, version=version)
	except SyncFilterError as e:
		return json.dumps({"error": str(e), "library": library, "version": version})

	return json.dumps({
		"success": report.errors == 0,
		"synced": report.synced,
		"errors": report.errors,
		"message": f"Synchronized {report.synced} document(s) with {report.errors} error(s)",
		"details": report.details,
	}, indent=2)


async def update_docs(
	storage: DualDocStore,
	scraper: DocScraper,
	max_age_days: float = 7,
	library: Optional[str] = None,
	auto_update: bool = False,
	storage_tier: str = "project",
) -> str:
	"""
	Report documents older than max_age_days and optionally re-scrape them.

	Each re-scraped document keeps its id and creation time and is written back
	to the tier it was found in. Failures are reported per item.
	"""
	try:
		tiers = _select_tiers(storage_tier)
	except ValueError as e:
		return json.dumps({"error": str(e)})

	outdated = await storage.find_outdated(timedelta(days=max_age_days), tiers, library=library)

	updated = []
	errors = []
	if auto_update:
		for item in outdated:
			if not item.url:
				continue
			key = f"{item.library}@{item.version}"
			store = storage.tier(item.tier)
			try:
				doc = await store.get_document(item.library, item.version)
				if doc is None:
					continue
				scraped = await scraper.fetch(item.url)
				merged_metadata = {
					**doc.metadata.model_dump(),
					**scraped.metadata.model_dump(exclude_none=True),
				}
				await store.update_document(doc.id, {"content": scraped.content, "metadata": merged_metadata})
				updated.append(f"{key} ({item.tier.value})")
			except (ScrapeError, DocumentWriteError) as e:
				logger.warning(f"Failed to update {key}: {e}")
				errors.append(f"Failed to update {key}: {e}")

	if not outdated:
		message = "All documentation is up to date"
	else:
		message = f"Found {len(outdated)} outdated document(s)"
		if updated:
			message += f", updated {len(updated)}"

	response = {
		"success": True,
		"outdated": [
			{**item.model_dump(mode="json"), "needs_update": f"Last updated {item.age} ago"}
			for item in outdated
		],
		"message": message,
	}
	if updated:
		response["updated"] = updated
	if errors:
		response["errors"] = errors
	return json.dumps(response, indent=2)


async def docs_stats(storage: DualDocStore) -> str:
	"""Per-tier document and library counts."""
	project_stats = await storage.project.get_statistics()
	global_stats = await storage.global_store.get_statistics()
	return json.dumps({
		"project": project_stats.model_dump(),
		"global": global_stats.model_dump(),
	}, indent=2)
