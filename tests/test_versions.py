"""Tests for version parsing, range matching and best-version selection."""

from docshelf.docs.versions import (
	ParsedVersion,
	compare_versions,
	find_best_version,
	is_compatible,
	parse_version,
)


class TestParseVersion:

	def test_full_version(self):
		assert parse_version("1.2.3") == ParsedVersion(1, 2, 3)

	def test_partial_versions_default_to_zero(self):
		assert parse_version("2") == ParsedVersion(2, 0, 0)
		assert parse_version("2.5") == ParsedVersion(2, 5, 0)

	def test_single_prefix_is_stripped(self):
		assert parse_version("v1.0.0") == ParsedVersion(1, 0, 0)
		assert parse_version("^1.2") == ParsedVersion(1, 2, 0)
		assert parse_version("~3.1.4") == ParsedVersion(3, 1, 4)

	def test_trailing_text_is_ignored(self):
		assert parse_version("1.2.3-beta.1") == ParsedVersion(1, 2, 3)

	def test_unparseable(self):
		assert parse_version("latest") is None
		assert parse_version("*") is None
		assert parse_version("edge") is None
		assert parse_version("") is None


class TestIsCompatible:

	def test_latest_matches_anything(self):
		assert is_compatible("1.0.0", "latest")
		assert is_compatible("edge", "*")

	def test_identical_strings_match(self):
		assert is_compatible("edge", "edge")
		assert is_compatible("1.2.3", "1.2.3")

	def test_caret(self):
		assert is_compatible("1.5.0", "^1.2.0")
		assert is_compatible("1.2.0", "^1.2.0")
		assert not is_compatible("1.1.9", "^1.2.0")
		assert not is_compatible("2.0.0", "^1.2.0")

	def test_tilde(self):
		assert is_compatible("1.2.9", "~1.2.3")
		assert not is_compatible("1.2.2", "~1.2.3")
		assert not is_compatible("1.3.0", "~1.2.3")

	def test_major_only(self):
		assert is_compatible("1.9.9", "1")
		assert not is_compatible("2.0.0", "1")

	def test_major_minor(self):
		assert is_compatible("1.2.7", "1.2")
		assert not is_compatible("1.3.0", "1.2")

	def test_exact_three_part(self):
		assert is_compatible("v1.2.3", "1.2.3")
		assert not is_compatible("1.2.4", "1.2.3")

	def test_unparseable_never_matches_range(self):
		assert not is_compatible("edge", "1")
		assert not is_compatible("1.0.0", "^edge")


class TestCompareVersions:

	def test_numeric_ordering(self):
		assert compare_versions("1.10.0", "1.9.0") == 1
		assert compare_versions("1.9.0", "1.10.0") == -1

	def test_missing_parts_are_zero(self):
		assert compare_versions("1.0", "1.0.0") == 0

	def test_unparseable_compares_equal(self):
		assert compare_versions("edge", "1.0.0") == 0
		assert compare_versions("1.0.0", "latest") == 0


class TestFindBestVersion:

	def test_highest_compatible(self):
		assert find_best_version(["1.0.0", "1.2.0", "2.0.0"], "^1.0.0") == "1.2.0"

	def test_tilde_picks_highest_patch(self):
		assert find_best_version(["1.0.0", "1.2.0", "2.0.0"], "~1.0.0") == "1.0.0"

	def test_major_only_picks_highest_in_major(self):
		assert find_best_version(["1.0.0", "1.2.0", "2.0.0"], "1") == "1.2.0"

	def test_latest_picks_highest(self):
		assert find_best_version(["1.0.0", "2.1.0", "2.0.0"], "latest") == "2.1.0"

	def test_no_match(self):
		assert find_best_version(["1.0.0"], "^2.0.0") is None

	def test_empty(self):
		assert find_best_version([], "latest") is None

	def test_unparseable_tags_are_order_dependent(self):
		"""Non-numeric tags compare equal to everything, so the first one seen wins."""
		assert find_best_version(["edge", "1.0.0"], "latest") == "edge"
		assert find_best_version(["1.0.0", "edge"], "latest") == "1.0.0"
