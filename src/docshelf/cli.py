"""CLI for docshelf: serve, stats, outdated and doctor commands."""

import argparse
import asyncio
import platform
import sys
from datetime import timedelta
from importlib.metadata import version as pkg_version
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table

from .config import Config, get_config, load_config
from .docs.dual_store import DualDocStore
from .docs.models import Tier
from .logging_config import setup_logging


def cmd_serve(args: argparse.Namespace) -> None:
	"""Run the MCP server (stdio transport)."""
	config = get_config()
	setup_logging(level=config.log_level, log_dir=config.log_dir)
	from .server import mcp
	mcp.run()


async def _open_storage(config: Config, working_directory: str) -> DualDocStore:
	storage = DualDocStore.from_config(config, working_directory)
	await storage.initialize()
	return storage


def render_stats(storage_stats: dict, console: Optional[Console] = None) -> None:
	"""Render per-tier, per-library document counts."""
	console = console or Console()

	table = Table(title="Documentation Cache")
	table.add_column("Tier", style="cyan")
	table.add_column("Library")
	table.add_column("Documents", justify="right")

	for tier_name, stats in storage_stats.items():
		if not stats.documents_by_library:
			table.add_row(tier_name, "[dim]empty[/dim]", "0")
			continue
		for library, count in sorted(stats.documents_by_library.items()):
			table.add_row(tier_name, library, str(count))

	console.print(table)
	for tier_name, stats in storage_stats.items():
		console.print(
			f"  [bold]{tier_name}[/bold]: {stats.total_documents} documents, "
			f"{stats.total_libraries} libraries"
		)


def cmd_stats(args: argparse.Namespace) -> None:
	"""Show what is stored in each tier."""
	config = load_config()

	async def collect() -> dict:
		storage = await _open_storage(config, args.directory)
		return {
			Tier.PROJECT.value: await storage.project.get_statistics(),
			Tier.GLOBAL.value: await storage.global_store.get_statistics(),
		}

	render_stats(asyncio.run(collect()))


def cmd_outdated(args: argparse.Namespace) -> None:
	"""List documents not updated within --days."""
	config = load_config()
	days = args.days if args.days is not None else config.stale_after_days
	tiers = (Tier.PROJECT, Tier.GLOBAL) if args.all else (Tier.PROJECT,)

	async def collect():
		storage = await _open_storage(config, args.directory)
		return await storage.find_outdated(timedelta(days=days), tiers)

	items = asyncio.run(collect())
	console = Console()
	if not items:
		console.print(f"[green]All documentation is newer than {days} days[/green]")
		return

	table = Table(title=f"Outdated documentation (> {days} days)")
	table.add_column("Library", style="cyan")
	table.add_column("Version")
	table.add_column("Tier")
	table.add_column("Age", justify="right")
	table.add_column("URL", style="dim")
	for item in items:
		table.add_row(item.library, item.version, item.tier.value, item.age, item.url)
	console.print(table)


def cmd_doctor(args: argparse.Namespace) -> None:
	"""Health check - verify installation and configuration."""
	print("docshelf doctor")
	print(f"{'=' * 40}")

	config = load_config()

	py_ver = f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
	print(f"  Python:       {py_ver}")
	print(f"  Platform:     {platform.system()} {platform.machine()}")
	print()

	print("  Dependencies:")
	missing = []
	for dep in ["mcp", "pydantic", "aiohttp", "beautifulsoup4", "markdownify", "aiosqlite", "platformdirs", "rich"]:
		try:
			print(f"    {dep:16s} {pkg_version(dep)}")
		except Exception:
			print(f"    {dep:16s} NOT INSTALLED")
			missing.append(dep)
	print()

	print("  Paths:")
	print(f"    config:       {config.config_dir}")
	print(f"    data:         {config.data_dir}")
	print(f"    global docs:  {config.global_docs_dir}")
	print(f"    project docs: {config.project_docs_dir(Path.cwd())}")
	print()

	if missing:
		print(f"  {len(missing)} issue(s): missing {', '.join(missing)}")
		sys.exit(1)
	print("  All checks passed")


def main() -> None:
	"""CLI entry point."""
	parser = argparse.ArgumentParser(
		prog="docshelf",
		description="MCP server for versioned, two-tier documentation caching",
	)
	subparsers = parser.add_subparsers(dest="command")

	# serve
	serve_parser = subparsers.add_parser("serve", help="Run MCP server (stdio)")
	serve_parser.set_defaults(func=cmd_serve)

	# stats
	stats_parser = subparsers.add_parser("stats", help="Show stored documentation per tier")
	stats_parser.add_argument("--directory", type=str, default=".", help="Project root (default: .)")
	stats_parser.set_defaults(func=cmd_stats)

	# outdated
	outdated_parser = subparsers.add_parser("outdated", help="List stale documentation")
	outdated_parser.add_argument("--directory", type=str, default=".", help="Project root (default: .)")
	outdated_parser.add_argument("--days", type=float, default=None, help="Age threshold in days")
	outdated_parser.add_argument("--all", action="store_true", help="Include the global tier")
	outdated_parser.set_defaults(func=cmd_outdated)

	# doctor
	doctor_parser = subparsers.add_parser("doctor", help="Health check")
	doctor_parser.set_defaults(func=cmd_doctor)

	args = parser.parse_args()

	if not args.command:
		parser.print_help()
		sys.exit(1)

	args.func(args)


if __name__ == "__main__":
	main()
