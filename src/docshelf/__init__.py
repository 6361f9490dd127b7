"""docshelf - two-tier documentation cache exposed as an MCP server."""

__version__ = "0.3.0"
