"""MCP tool registration - modular tool definitions."""

from mcp.server.fastmcp import FastMCP

from ..config import Config
from .core import register_core_tools
from .docs import register_docs_tools
from .records import register_records_tools
from .search import register_search_tools


def register_all_tools(mcp: FastMCP, config: Config) -> None:
	"""Register all MCP tools."""
	register_core_tools(mcp, config)
	register_docs_tools(mcp, config)
	register_search_tools(mcp, config)
	register_records_tools(mcp, config)
