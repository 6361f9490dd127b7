"""
Document Store - file-backed storage for one documentation tier.

Layout under the tier's base path:
	documents/<library>/<version>.json   one Document per (library, version)
	libraries/<library>.json             one Library aggregate per library

Names are sanitized before they touch the filesystem, so every lookup must go
through the same sanitizer as the write that created the entry.

Read paths report I/O and parse failures as "not found". Write paths raise
DocumentWriteError; a document write whose library update fails is rolled back.
"""

import logging
import os
import re
import shutil
import uuid
from pathlib import Path
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from .models import Document, Library, SearchResult, StorageStats, Tier, utc_now

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

MAX_NAME_LENGTH = 100
HIGHLIGHT_CONTEXT = 50

_HOSTILE_CHARS_RE = re.compile(r'[/\\:*?"<>|]')
_WHITESPACE_RE = re.compile(r"\s+")
_REPEATED_UNDERSCORE_RE = re.compile(r"_{2,}")


class DocumentWriteError(Exception):
	"""Raised when a document or library record cannot be persisted."""
	pass


def sanitize_name(value: str) -> str:
	"""Map a library or version name to a safe file name."""
	safe = _HOSTILE_CHARS_RE.sub("_", value)
	safe = _WHITESPACE_RE.sub("_", safe)
	safe = _REPEATED_UNDERSCORE_RE.sub("_", safe)
	safe = safe.strip("_")[:MAX_NAME_LENGTH]
	# "." and ".." would address the parent directories
	if not safe or set(safe) == {"."}:
		return "doc"
	return safe


class DocumentStore:
	"""
	Single-tier persistent document store.

	Usage:
		store = DocumentStore(Path(".docshelf/docs"), Tier.PROJECT)
		await store.initialize()

		await store.save_document(doc)
		doc = await store.get_document("react", "18.2.0")
		results = await store.search_documents("hooks", limit=5)
	"""

	def __init__(self, base_path: str | Path, tier: Tier = Tier.PROJECT):
		self.base_path = Path(base_path)
		self.tier = tier
		self.docs_dir = self.base_path / "documents"
		self.libraries_dir = self.base_path / "libraries"

	async def initialize(self) -> None:
		"""Create the tier's directory hierarchy. Safe to call repeatedly."""
		try:
			self.docs_dir.mkdir(parents=True, exist_ok=True)
			self.libraries_dir.mkdir(parents=True, exist_ok=True)
		except OSError as e:
			raise DocumentWriteError(
				f"Failed to initialize {self.tier.value} documentation storage at {self.base_path}: {e}"
			) from e
		logger.debug(f"Document store initialized: {self.base_path}")

	# -- addressing -------------------------------------------------------

	def _document_path(self, library: str, version: str) -> Path:
		return self.docs_dir / sanitize_name(library) / f"{sanitize_name(version)}.json"

	def _library_path(self, name: str) -> Path:
		return self.libraries_dir / f"{sanitize_name(name)}.json"

	def _document_files(self) -> list[Path]:
		"""All document files, in a stable order."""
		try:
			return sorted(self.docs_dir.glob("*/*.json"))
		except OSError as e:
			logger.debug(f"Cannot list {self.docs_dir}: {e}")
			return []

	# -- raw file helpers -------------------------------------------------

	def _read_model(self, path: Path, model: type[ModelT]) -> Optional[ModelT]:
		try:
			return model.model_validate_json(path.read_text(encoding="utf-8"))
		except FileNotFoundError:
			return None
		except (OSError, ValueError) as e:
			logger.debug(f"Unreadable record {path}: {e}")
			return None

	def _write_model(self, path: Path, record: BaseModel) -> None:
		"""Write a record atomically (temp file + rename)."""
		path.parent.mkdir(parents=True, exist_ok=True)
		tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex[:8]}.tmp")
		try:
			tmp_path.write_text(record.model_dump_json(indent=2), encoding="utf-8")
			os.replace(tmp_path, path)
		finally:
			if tmp_path.exists():
				tmp_path.unlink()

	def _find_document_by_id(self, doc_id: str) -> Optional[tuple[Path, Document]]:
		"""Linear scan over every document file."""
		for path in self._document_files():
			doc = self._read_model(path, Document)
			if doc is not None and doc.id == doc_id:
				return path, doc
		return None

	# -- documents --------------------------------------------------------

	async def save_document(self, doc: Document) -> Document:
		"""
		Persist a document at its (library, version) address.

		Also records the version on the owning library and refreshes its
		last-scraped timestamp.

		Raises:
			DocumentWriteError: If either file cannot be written
		"""
		path = self._document_path(doc.library, doc.version)
		previous: Optional[bytes] = None
		try:
			if path.exists():
				previous = path.read_bytes()
			self._write_model(path, doc)
		except OSError as e:
			logger.error(f"Failed to write {doc.library}@{doc.version} ({self.tier.value}): {e}")
			raise DocumentWriteError(
				f"Failed to save {doc.library}@{doc.version} in {self.tier.value} storage: {e}"
			) from e

		try:
			self._record_version(doc.library, doc.version)
		except OSError as e:
			logger.error(f"Failed to update library {doc.library} ({self.tier.value}): {e}")
			self._restore(path, previous)
			raise DocumentWriteError(
				f"Failed to update library record for {doc.library}@{doc.version} "
				f"in {self.tier.value} storage: {e}"
			) from e

		return doc

	def _restore(self, path: Path, previous: Optional[bytes]) -> None:
		"""Undo a document write after a failed library update."""
		try:
			if previous is None:
				path.unlink(missing_ok=True)
			else:
				path.write_bytes(previous)
		except OSError as e:
			logger.error(f"Rollback of {path} failed: {e}")

	def _record_version(self, name: str, version: str) -> None:
		library = self._read_model(self._library_path(name), Library) or Library(name=name)
		library.add_version(version)
		library.last_scraped = utc_now()
		self._write_model(self._library_path(name), library)

	def _forget_version(self, name: str, version: str) -> None:
		library = self._read_model(self._library_path(name), Library)
		if library is None or version not in library.versions:
			return
		library.remove_version(version)
		self._write_model(self._library_path(name), library)

	async def get_document(self, library: str, version: str) -> Optional[Document]:
		"""Get the document stored at exactly (library, version)."""
		return self._read_model(self._document_path(library, version), Document)

	async def get_document_by_id(self, doc_id: str) -> Optional[Document]:
		"""Find a document by identifier (scans the whole tier)."""
		found = self._find_document_by_id(doc_id)
		return found[1] if found else None

	async def list_documents(self) -> list[Document]:
		"""Load every readable document in the tier."""
		documents = []
		for path in self._document_files():
			doc = self._read_model(path, Document)
			if doc is not None:
				documents.append(doc)
		return documents

	async def update_document(self, doc_id: str, updates: dict[str, Any]) -> Optional[Document]:
		"""
		Merge fields into an existing document.

		The identifier and creation timestamp are preserved and the update
		timestamp refreshed. A changed (library, version) moves the document to
		its new address and moves the version between library records.

		Returns:
			The updated document, or None if no document has that id

		Raises:
			DocumentWriteError: If the new state cannot be persisted
		"""
		found = self._find_document_by_id(doc_id)
		if not found:
			return None
		old_path, existing = found

		merged = existing.model_dump()
		merged.update(updates)
		merged["id"] = existing.id
		merged["created_at"] = existing.created_at
		merged["updated_at"] = utc_now()
		try:
			updated = Document.model_validate(merged)
		except ValidationError as e:
			raise DocumentWriteError(f"Invalid update for document {doc_id}: {e}") from e

		if (updated.library, updated.version) == (existing.library, existing.version):
			# Rewrites in place and refreshes the library's last-scraped time
			return await self.save_document(updated)

		new_path = self._document_path(updated.library, updated.version)
		try:
			old_bytes = old_path.read_bytes()
			if new_path == old_path:
				new_previous: Optional[bytes] = old_bytes
			else:
				new_previous = new_path.read_bytes() if new_path.exists() else None
		except OSError as e:
			raise DocumentWriteError(f"Failed to read document {doc_id} before moving it: {e}") from e

		await self.save_document(updated)
		try:
			if new_path != old_path:
				old_path.unlink()
			self._forget_version(existing.library, existing.version)
		except OSError as e:
			logger.error(f"Failed to move document {doc_id}, rolling back: {e}")
			self._undo_move(old_path, old_bytes, new_path, new_previous, updated)
			raise DocumentWriteError(
				f"Failed to move document {doc_id} from {existing.library}@{existing.version} "
				f"to {updated.library}@{updated.version}: {e}"
			) from e

		logger.info(
			f"Moved document {doc_id}: {existing.library}@{existing.version} -> "
			f"{updated.library}@{updated.version}"
		)
		return updated

	def _undo_move(
		self,
		old_path: Path,
		old_bytes: bytes,
		new_path: Path,
		new_previous: Optional[bytes],
		updated: Document,
	) -> None:
		"""Put the old entry back and drop the half-written new one."""
		self._restore(new_path, new_previous)
		if new_path != old_path and not old_path.exists():
			self._restore(old_path, old_bytes)
		# The new version was not recorded before the move unless another document held it
		if new_previous is None or new_path == old_path:
			try:
				self._forget_version(updated.library, updated.version)
			except OSError as e:
				logger.error(f"Rollback of library {updated.library} failed: {e}")

	async def delete_document(self, doc_id: str) -> bool:
		"""
		Delete one document. Its version leaves the library record, but an
		emptied library record is kept.
		"""
		found = self._find_document_by_id(doc_id)
		if not found:
			return False
		path, doc = found

		try:
			path.unlink()
			self._forget_version(doc.library, doc.version)
		except OSError as e:
			raise DocumentWriteError(f"Failed to delete document {doc_id} ({doc.library}@{doc.version}): {e}") from e

		logger.info(f"Deleted {doc.library}@{doc.version} from {self.tier.value} storage")
		return True

	async def search_documents(self, query: str, limit: int = 10) -> list[SearchResult]:
		"""
		Lightweight substring search over the tier.

		Scoring: title 0.4, description 0.2, library 0.2, content 0.2. Scores
		are not normalized. A URL-only match is returned with score 0.
		"""
		query_lower = query.lower()
		results: list[SearchResult] = []

		for doc in await self.list_documents():
			title_match = query_lower in (doc.metadata.title or "").lower()
			desc_match = query_lower in (doc.metadata.description or "").lower()
			content_lower = doc.content.lower()
			content_match = query_lower in content_lower
			library_match = query_lower in doc.library.lower()
			url_match = query_lower in doc.url.lower()

			if not (title_match or desc_match or content_match or library_match or url_match):
				continue

			score = 0.0
			if title_match:
				score += 0.4
			if desc_match:
				score += 0.2
			if library_match:
				score += 0.2
			if content_match:
				score += 0.2

			highlights = []
			if content_match:
				index = content_lower.index(query_lower)
				start = max(0, index - HIGHLIGHT_CONTEXT)
				end = min(len(doc.content), index + len(query_lower) + HIGHLIGHT_CONTEXT)
				highlights.append("..." + doc.content[start:end] + "...")

			results.append(SearchResult(document=doc, score=score, highlights=highlights, tier=self.tier))

		results.sort(key=lambda r: r.score, reverse=True)
		return results[:limit]

	# -- libraries --------------------------------------------------------

	async def get_library(self, name: str) -> Optional[Library]:
		return self._read_model(self._library_path(name), Library)

	async def get_libraries(self) -> list[Library]:
		"""All readable library records, ordered by file name."""
		try:
			paths = sorted(self.libraries_dir.glob("*.json"))
		except OSError as e:
			logger.debug(f"Cannot list {self.libraries_dir}: {e}")
			return []

		libraries = []
		for path in paths:
			library = self._read_model(path, Library)
			if library is not None:
				libraries.append(library)
		return libraries

	async def update_library(self, name: str, updates: dict[str, Any]) -> Optional[Library]:
		"""Merge fields into a library record. The name never changes."""
		library = await self.get_library(name)
		if library is None:
			return None

		merged = library.model_dump()
		merged.update(updates)
		merged["name"] = library.name
		try:
			updated = Library.model_validate(merged)
			self._write_model(self._library_path(name), updated)
		except (OSError, ValidationError) as e:
			raise DocumentWriteError(f"Failed to update library {name}: {e}") from e
		return updated

	async def delete_library(self, name: str) -> bool:
		"""
		Delete a library record and every document stored under it.

		Returns:
			True if anything was removed
		"""
		library_path = self._library_path(name)
		docs_path = self.docs_dir / sanitize_name(name)
		removed = False
		try:
			if library_path.exists():
				library_path.unlink()
				removed = True
			if docs_path.exists():
				shutil.rmtree(docs_path)
				removed = True
		except OSError as e:
			raise DocumentWriteError(f"Failed to delete library {name} from {self.tier.value} storage: {e}") from e

		if removed:
			logger.info(f"Deleted library {name} from {self.tier.value} storage")
		return removed

	async def get_statistics(self) -> StorageStats:
		stats = StorageStats(total_libraries=len(await self.get_libraries()))
		for doc in await self.list_documents():
			stats.documents_by_library[doc.library] = stats.documents_by_library.get(doc.library, 0) + 1
			stats.total_documents += 1
		return stats
