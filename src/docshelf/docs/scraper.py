"""
Documentation Scraper - fetches a page and converts it to markdown.

Features:
- Async fetching with aiohttp
- Main-content selection and page chrome removal
- HTML to ATX markdown conversion
- Title / description / last-modified metadata
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

import aiohttp
from bs4 import BeautifulSoup
from markdownify import markdownify as md

from .models import DocumentMetadata

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; docshelf/0.3)"


class ScrapeError(Exception):
	"""Raised when a page cannot be fetched or converted."""
	pass


@dataclass
class ScrapeResult:
	"""Converted content of a single page."""
	content: str
	metadata: DocumentMetadata = field(default_factory=DocumentMetadata)


# Selectors tried in order for the main content element
CONTENT_SELECTORS = [
	"main",
	"article",
	"[role='main']",
	".content",
	".documentation",
	"#content",
	"body",
]

# Elements removed before conversion
REMOVE_SELECTORS = [
	"script",
	"style",
	"noscript",
	"nav",
	"header",
	"footer",
	".sidebar",
	".navigation",
	".breadcrumb",
	".edit-page",
]

_HIDDEN_STYLE_RE = re.compile(r"display\s*:\s*none", re.IGNORECASE)


def _meta_content(soup: BeautifulSoup, name: str) -> Optional[str]:
	tag = soup.find("meta", attrs={"name": name})
	if tag and tag.get("content"):
		return tag["content"].strip()
	return None


def clean_markdown(markdown: str) -> str:
	"""Collapse blank lines and strip trailing whitespace."""
	markdown = re.sub(r"\n{3,}", "\n\n", markdown)
	lines = [line.rstrip() for line in markdown.split("\n")]
	return "\n".join(lines).strip()


def parse_html(html: str) -> ScrapeResult:
	"""Extract metadata and markdown content from an HTML page."""
	soup = BeautifulSoup(html, "html.parser")

	title_tag = soup.find("title")
	metadata = DocumentMetadata(
		title=title_tag.get_text().strip() if title_tag else None,
		description=_meta_content(soup, "description"),
		last_updated=_meta_content(soup, "last-modified"),
	)

	for selector in REMOVE_SELECTORS:
		for element in soup.select(selector):
			element.decompose()
	for element in soup.find_all(style=_HIDDEN_STYLE_RE):
		element.decompose()

	content_element = None
	for selector in CONTENT_SELECTORS:
		content_element = soup.select_one(selector)
		if content_element:
			break
	if content_element is None:
		content_element = soup

	markdown = md(str(content_element), heading_style="ATX")
	return ScrapeResult(content=clean_markdown(markdown), metadata=metadata)


class DocScraper:
	"""
	Fetches documentation pages.

	Usage:
		scraper = DocScraper()
		result = await scraper.fetch("https://react.dev/reference/react/useEffect")
	"""

	def __init__(
		self,
		timeout: int = 30,
		max_content_length: int = 1_000_000,
		user_agent: str = DEFAULT_USER_AGENT,
	):
		"""
		Initialize the scraper.

		Args:
			timeout: Request timeout in seconds
			max_content_length: Largest accepted response body, in characters
			user_agent: User agent string
		"""
		self.timeout = timeout
		self.max_content_length = max_content_length
		self.user_agent = user_agent

	async def fetch(self, url: str) -> ScrapeResult:
		"""
		Fetch a URL and convert it to markdown.

		Raises:
			ScrapeError: On network errors, non-200 responses, oversize pages
		"""
		logger.debug(f"Fetching: {url}")
		try:
			async with aiohttp.ClientSession(
				headers={"User-Agent": self.user_agent},
				timeout=aiohttp.ClientTimeout(total=self.timeout),
			) as session:
				async with session.get(url) as response:
					if response.status != 200:
						raise ScrapeError(f"Failed to scrape {url}: HTTP {response.status}")
					html = await response.text()
		except aiohttp.ClientError as e:
			raise ScrapeError(f"Failed to scrape {url}: {e}") from e
		except TimeoutError as e:
			raise ScrapeError(f"Failed to scrape {url}: timed out after {self.timeout}s") from e

		if len(html) > self.max_content_length:
			raise ScrapeError(
				f"Failed to scrape {url}: content too large ({len(html)} chars, max {self.max_content_length})"
			)

		result = parse_html(html)
		logger.info(f"Scraped {url}: {len(result.content)} chars")
		return result
