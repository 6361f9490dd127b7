"""Core health check tool."""

import json

from mcp.server.fastmcp import FastMCP

from .. import __version__
from ..config import Config


def register_core_tools(mcp: FastMCP, config: Config) -> None:
	"""Register core tools."""

	@mcp.tool()
	async def health_check() -> str:
		"""
		Check the health of the docshelf server.
		Returns status of all components.
		"""
		status = {
			"server": "running",
			"version": __version__,
			"config_dir": str(config.config_dir),
			"data_dir": str(config.data_dir),
			"global_docs_dir": str(config.global_docs_dir),
			"global_docs_exists": config.global_docs_dir.exists(),
			"records_db_exists": config.records_db_path.exists(),
			"use_global_directory": config.use_global_directory,
		}
		return json.dumps(status, indent=2)
