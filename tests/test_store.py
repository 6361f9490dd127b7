"""Tests for the single-tier file-backed document store."""

from unittest.mock import patch

import pytest

from docshelf.docs.models import Tier
from docshelf.docs.store import DocumentStore, DocumentWriteError, sanitize_name

from .helpers import OLD_TIMESTAMP, make_doc


@pytest.fixture
def store(tmp_path):
	return DocumentStore(tmp_path / "docs", Tier.PROJECT)


class TestSanitizeName:

	def test_hostile_characters_and_whitespace(self):
		assert sanitize_name("my lib/v1") == "my_lib_v1"
		assert sanitize_name('a:b*c?"d<e>f|g') == "a_b_c_d_e_f_g"

	def test_repeated_and_edge_underscores(self):
		assert sanitize_name("__a  //  b__") == "a_b"

	def test_dot_names_cannot_escape(self):
		assert sanitize_name("..") == "doc"
		assert sanitize_name(".") == "doc"
		assert "/" not in sanitize_name("../etc/passwd")

	def test_empty_and_long(self):
		assert sanitize_name("") == "doc"
		assert sanitize_name("///") == "doc"
		assert len(sanitize_name("x" * 300)) == 100


class TestDocuments:

	@pytest.mark.asyncio
	async def test_initialize_creates_layout(self, store):
		await store.initialize()
		await store.initialize()
		assert store.docs_dir.is_dir()
		assert store.libraries_dir.is_dir()

	@pytest.mark.asyncio
	async def test_save_and_get(self, store):
		doc = make_doc()
		await store.save_document(doc)

		loaded = await store.get_document("react", "18.2.0")
		assert loaded == doc

		library = await store.get_library("react")
		assert library.versions == ["18.2.0"]

	@pytest.mark.asyncio
	async def test_save_same_address_overwrites(self, store):
		await store.save_document(make_doc(content="first"))
		second = make_doc(content="second")
		await store.save_document(second)

		loaded = await store.get_document("react", "18.2.0")
		assert loaded.content == "second"
		assert (await store.get_library("react")).versions == ["18.2.0"]
		assert len(await store.list_documents()) == 1

	@pytest.mark.asyncio
	async def test_sanitized_names_resolve_to_same_entry(self, store):
		await store.save_document(make_doc(library="my lib", version="1.0"))
		loaded = await store.get_document("my lib", "1.0")
		assert loaded is not None
		assert loaded.library == "my lib"

	@pytest.mark.asyncio
	async def test_missing_document(self, store):
		assert await store.get_document("react", "1.0.0") is None
		assert await store.get_document_by_id("nope") is None

	@pytest.mark.asyncio
	async def test_corrupt_file_reads_as_missing(self, store):
		await store.save_document(make_doc())
		path = store.docs_dir / "react" / "18.2.0.json"
		path.write_text("{not json")
		assert await store.get_document("react", "18.2.0") is None

	@pytest.mark.asyncio
	async def test_get_by_id(self, store):
		doc = make_doc()
		await store.save_document(doc)
		await store.save_document(make_doc(version="17.0.0"))
		assert (await store.get_document_by_id(doc.id)).version == "18.2.0"

	@pytest.mark.asyncio
	async def test_failed_library_write_rolls_back_new_document(self, store):
		with patch.object(store, "_record_version", side_effect=OSError("disk full")):
			with pytest.raises(DocumentWriteError):
				await store.save_document(make_doc())
		assert await store.get_document("react", "18.2.0") is None

	@pytest.mark.asyncio
	async def test_failed_library_write_restores_previous_document(self, store):
		await store.save_document(make_doc(content="original"))
		with patch.object(store, "_record_version", side_effect=OSError("disk full")):
			with pytest.raises(DocumentWriteError):
				await store.save_document(make_doc(content="replacement"))
		assert (await store.get_document("react", "18.2.0")).content == "original"


class TestUpdateDocument:

	@pytest.mark.asyncio
	async def test_update_preserves_identity(self, store):
		doc = make_doc(updated_at=OLD_TIMESTAMP)
		await store.save_document(doc)

		updated = await store.update_document(doc.id, {"content": "new content"})
		assert updated.id == doc.id
		assert updated.created_at == OLD_TIMESTAMP
		assert updated.updated_at != OLD_TIMESTAMP
		assert (await store.get_document("react", "18.2.0")).content == "new content"

	@pytest.mark.asyncio
	async def test_update_ignores_id_and_created_at(self, store):
		doc = make_doc(updated_at=OLD_TIMESTAMP)
		await store.save_document(doc)

		updated = await store.update_document(doc.id, {"id": "other", "created_at": "2030-01-01T00:00:00+00:00"})
		assert updated.id == doc.id
		assert updated.created_at == OLD_TIMESTAMP

	@pytest.mark.asyncio
	async def test_update_moves_version(self, store):
		doc = make_doc(version="18.2.0")
		await store.save_document(doc)

		updated = await store.update_document(doc.id, {"version": "18.3.0"})
		assert updated.version == "18.3.0"
		assert await store.get_document("react", "18.2.0") is None
		assert (await store.get_document("react", "18.3.0")).id == doc.id
		assert (await store.get_library("react")).versions == ["18.3.0"]

	@pytest.mark.asyncio
	async def test_update_moves_library(self, store):
		doc = make_doc(library="react")
		await store.save_document(doc)

		await store.update_document(doc.id, {"library": "preact"})
		assert (await store.get_library("react")).versions == []
		assert (await store.get_library("preact")).versions == ["18.2.0"]

	@pytest.mark.asyncio
	async def test_update_missing(self, store):
		assert await store.update_document("missing", {"content": "x"}) is None

	@pytest.mark.asyncio
	async def test_invalid_update_raises(self, store):
		doc = make_doc()
		await store.save_document(doc)
		with pytest.raises(DocumentWriteError):
			await store.update_document(doc.id, {"metadata": "not a mapping"})

	@pytest.mark.asyncio
	async def test_update_in_place_refreshes_last_scraped(self, store):
		doc = make_doc()
		await store.save_document(doc)
		await store.update_library("react", {"last_scraped": OLD_TIMESTAMP})

		await store.update_document(doc.id, {"content": "rescraped"})
		library = await store.get_library("react")
		assert library.last_scraped != OLD_TIMESTAMP
		assert library.versions == ["18.2.0"]

	@pytest.mark.asyncio
	async def test_failed_move_is_rolled_back(self, store):
		doc = make_doc(version="18.2.0", content="original")
		await store.save_document(doc)
		forget_version = store._forget_version

		def fail_for_old_version(name, version):
			if version == "18.2.0":
				raise OSError("disk full")
			forget_version(name, version)

		with patch.object(store, "_forget_version", side_effect=fail_for_old_version):
			with pytest.raises(DocumentWriteError):
				await store.update_document(doc.id, {"version": "18.3.0"})

		assert await store.get_document("react", "18.3.0") is None
		restored = await store.get_document("react", "18.2.0")
		assert restored.id == doc.id
		assert restored.content == "original"
		assert (await store.get_library("react")).versions == ["18.2.0"]
		assert len(await store.list_documents()) == 1


class TestDeleteDocument:

	@pytest.mark.asyncio
	async def test_delete_removes_version_keeps_library(self, store):
		doc = make_doc()
		await store.save_document(doc)

		assert await store.delete_document(doc.id) is True
		assert await store.get_document("react", "18.2.0") is None
		library = await store.get_library("react")
		assert library is not None
		assert library.versions == []

	@pytest.mark.asyncio
	async def test_delete_missing(self, store):
		assert await store.delete_document("missing") is False


class TestSearch:

	@pytest.mark.asyncio
	async def test_scores_by_field(self, store):
		await store.save_document(make_doc(title="Hooks overview", content="hooks everywhere"))
		await store.save_document(make_doc(library="vue", title="Composition", content="no match here"))

		results = await store.search_documents("hooks")
		assert len(results) == 1
		assert results[0].score == pytest.approx(0.6)
		assert results[0].tier == Tier.PROJECT

	@pytest.mark.asyncio
	async def test_url_only_match_scores_zero(self, store):
		await store.save_document(make_doc(
			title="Intro", content="nothing", url="https://example.com/special-page",
		))
		results = await store.search_documents("special-page")
		assert len(results) == 1
		assert results[0].score == 0

	@pytest.mark.asyncio
	async def test_highlight_context(self, store):
		content = "a" * 100 + "needle" + "b" * 100
		await store.save_document(make_doc(title=None, content=content))

		results = await store.search_documents("needle")
		assert results[0].highlights == ["..." + "a" * 50 + "needle" + "b" * 50 + "..."]

	@pytest.mark.asyncio
	async def test_ordering_and_limit(self, store):
		await store.save_document(make_doc(library="a", title="router", content="router"))
		await store.save_document(make_doc(library="b", title="other", content="router"))
		await store.save_document(make_doc(library="router", title="router", content="router"))

		results = await store.search_documents("router", limit=2)
		assert [r.document.library for r in results] == ["router", "a"]


class TestLibraries:

	@pytest.mark.asyncio
	async def test_get_libraries(self, store):
		await store.save_document(make_doc(library="vue"))
		await store.save_document(make_doc(library="react"))
		assert [lib.name for lib in await store.get_libraries()] == ["react", "vue"]

	@pytest.mark.asyncio
	async def test_update_library_keeps_name(self, store):
		await store.save_document(make_doc())
		updated = await store.update_library("react", {"name": "other", "source": "npm"})
		assert updated.name == "react"
		assert updated.source == "npm"
		assert await store.update_library("missing", {"source": "npm"}) is None

	@pytest.mark.asyncio
	async def test_delete_library(self, store):
		await store.save_document(make_doc(version="17.0.0"))
		await store.save_document(make_doc(version="18.2.0"))

		assert await store.delete_library("react") is True
		assert await store.get_library("react") is None
		assert await store.list_documents() == []
		assert await store.delete_library("react") is False

	@pytest.mark.asyncio
	async def test_statistics(self, store):
		await store.save_document(make_doc(version="17.0.0"))
		await store.save_document(make_doc(version="18.2.0"))
		await store.save_document(make_doc(library="vue", version="3.0.0"))

		stats = await store.get_statistics()
		assert stats.total_documents == 3
		assert stats.total_libraries == 2
		assert stats.documents_by_library == {"react": 2, "vue": 1}
