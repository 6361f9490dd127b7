"""
Version Resolver - parsing, comparison and range matching for version strings.

Supported request forms:
- Exact: "1.2.3"
- Latest: "latest" or "*"
- Caret: "^1.2.3" (same major, at least minor.patch)
- Tilde: "~1.2.3" (same major.minor, at least patch)
- Major only: "1" (any 1.x.x)
- Major.minor: "1.2" (any 1.2.x)

Unparseable versions never match a range and compare as equal to anything.
"""

import re
from typing import NamedTuple, Optional

LATEST_SENTINELS = frozenset({"latest", "*"})

_PREFIX_RE = re.compile(r"^[v^~]")
_VERSION_RE = re.compile(r"^(\d+)(?:\.(\d+))?(?:\.(\d+))?")


class ParsedVersion(NamedTuple):
	major: int
	minor: int
	patch: int


def is_latest(version: str) -> bool:
	return version in LATEST_SENTINELS


def parse_version(version: str) -> Optional[ParsedVersion]:
	"""Parse a version string into (major, minor, patch), or None."""
	if is_latest(version):
		return None

	cleaned = _PREFIX_RE.sub("", version, count=1)
	match = _VERSION_RE.match(cleaned)
	if not match:
		return None

	major, minor, patch = match.groups()
	return ParsedVersion(int(major), int(minor or 0), int(patch or 0))


def is_compatible(stored: str, requested: str) -> bool:
	"""Check whether a stored version satisfies a requested version or range."""
	if is_latest(requested):
		return True

	if stored == requested:
		return True

	stored_parsed = parse_version(stored)
	requested_parsed = parse_version(requested)
	if stored_parsed is None or requested_parsed is None:
		return False

	if requested.startswith("^"):
		return (
			stored_parsed.major == requested_parsed.major
			and (stored_parsed.minor, stored_parsed.patch) >= (requested_parsed.minor, requested_parsed.patch)
		)

	if requested.startswith("~"):
		return (
			stored_parsed.major == requested_parsed.major
			and stored_parsed.minor == requested_parsed.minor
			and stored_parsed.patch >= requested_parsed.patch
		)

	# Partial versions match on the parts given
	requested_parts = len(requested.split("."))
	if requested_parts == 1:
		return stored_parsed.major == requested_parsed.major
	if requested_parts == 2:
		return stored_parsed[:2] == requested_parsed[:2]

	return stored_parsed == requested_parsed


def compare_versions(v1: str, v2: str) -> int:
	"""
	Compare two versions: 1 if v1 > v2, -1 if v1 < v2, 0 otherwise.

	Returns 0 when either side is unparseable, so mixing tags such as
	"edge" or "canary" with numeric versions gives order-dependent results
	in find_best_version.
	"""
	p1 = parse_version(v1)
	p2 = parse_version(v2)
	if p1 is None or p2 is None:
		return 0

	if p1 == p2:
		return 0
	return 1 if p1 > p2 else -1


def _highest(versions: list[str]) -> str:
	highest = versions[0]
	for current in versions[1:]:
		if compare_versions(current, highest) > 0:
			highest = current
	return highest


def find_best_version(available: list[str], requested: str) -> Optional[str]:
	"""Pick the highest available version that satisfies the request."""
	if not available:
		return None

	if is_latest(requested):
		return _highest(available)

	compatible = [v for v in available if is_compatible(v, requested)]
	if not compatible:
		return None

	return _highest(compatible)
