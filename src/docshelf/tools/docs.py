"""Documentation cache tools - scrape, resolve, search, sync."""

import os

from mcp.server.fastmcp import FastMCP

from ..config import Config
from ..docs import service
from ..docs.dual_store import DualDocStore, get_doc_store
from ..docs.scraper import DocScraper


def register_docs_tools(mcp: FastMCP, config: Config) -> None:
	"""Register documentation tools."""

	async def _storage(working_directory: str) -> DualDocStore:
		return await get_doc_store(config, working_directory or os.getcwd())

	def _scraper() -> DocScraper:
		return DocScraper(config.scrape_timeout, config.max_content_length, config.user_agent)

	@mcp.tool()
	async def scrape_docs(
		url: str,
		library: str,
		version: str = "latest",
		project_specific: bool = True,
		working_directory: str = "",
	) -> str:
		"""
		Scrape a documentation page and store it for library@version.

		Args:
			url: Page to scrape
			library: Library name (e.g., "react")
			version: Version label (default: "latest")
			project_specific: Store in the project tier (True) or the global tier (False)
			working_directory: Project root (default: current directory)
		"""
		storage = await _storage(working_directory)
		return await service.scrape_docs(storage, _scraper(), url, library, version, project_specific)

	@mcp.tool()
	async def get_doc(library: str, version: str = "latest", working_directory: str = "") -> str:
		"""
		Get documentation for a library version.

		Accepts exact versions and ranges ("^18.0.0", "~1.2", "18", "latest").
		Checks the project tier first, then the global tier.

		Args:
			library: Library name
			version: Version or range (default: "latest")
			working_directory: Project root (default: current directory)
		"""
		return await service.get_doc(await _storage(working_directory), library, version)

	@mcp.tool()
	async def search_docs(
		query: str,
		limit: int = 10,
		search_global: bool = True,
		ranking: str = "basic",
		working_directory: str = "",
	) -> str:
		"""
		Search stored documentation.

		Args:
			query: Search text
			limit: Maximum results, 1-50 (default: 10)
			search_global: Include the global tier (default: True)
			ranking: "basic" substring scoring or "relevance" structural scoring
			working_directory: Project root (default: current directory)
		"""
		storage = await _storage(working_directory)
		return await service.search_docs(storage, query, limit, search_global, ranking)

	@mcp.tool()
	async def list_libraries(include_global: bool = True, working_directory: str = "") -> str:
		"""
		List stored libraries and their versions.

		Args:
			include_global: Include the global tier (default: True)
			working_directory: Project root (default: current directory)
		"""
		return await service.list_libraries(await _storage(working_directory), include_global)

	@mcp.tool()
	async def remove_docs(
		library: str,
		version: str = "",
		storage: str = "project",
		confirm: bool = False,
		working_directory: str = "",
	) -> str:
		"""
		Remove documentation for a library version, or the whole library.

		Args:
			library: Library name
			version: Version to remove (empty removes every version)
			storage: "project", "global" or "both"
			confirm: Must be True to actually delete
			working_directory: Project root (default: current directory)
		"""
		return await service.remove_docs(
			await _storage(working_directory), library,
			version=version or None, storage_tier=storage, confirm=confirm,
		)

	@mcp.tool()
	async def sync_docs(
		direction: str = "to-global",
		library: str = "",
		version: str = "",
		working_directory: str = "",
	) -> str:
		"""
		Synchronize documentation between project and global tiers.

		Args:
			direction: "to-global", "from-global" or "bidirectional"
			library: Only sync this library (optional)
			version: Only sync this version; requires library (optional)
			working_directory: Project root (default: current directory)
		"""
		return await service.sync_docs(
			await _storage(working_directory), direction,
			library=library or None, version=version or None,
		)

	@mcp.tool()
	async def update_docs(
		max_age_days: float = 0,
		library: str = "",
		auto_update: bool = False,
		storage: str = "project",
		working_directory: str = "",
	) -> str:
		"""
		Find documentation older than max_age_days and optionally re-scrape it.

		Args:
			max_age_days: Age threshold in days (default: configured stale_after_days)
			library: Only check this library (optional)
			auto_update: Re-scrape outdated documents (default: False)
			storage: "project", "global" or "both"
			working_directory: Project root (default: current directory)
		"""
		return await service.update_docs(
			await _storage(working_directory), _scraper(),
			max_age_days=max_age_days or config.stale_after_days, library=library or None,
			auto_update=auto_update, storage_tier=storage,
		)

	@mcp.tool()
	async def docs_stats(working_directory: str = "") -> str:
		"""Document and library counts for both tiers."""
		return await service.docs_stats(await _storage(working_directory))
