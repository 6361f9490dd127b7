"""Tests for HTML conversion and fetch error handling (no network)."""

from unittest.mock import patch

import aiohttp
import pytest

from docshelf.docs.scraper import DocScraper, ScrapeError, clean_markdown, parse_html

PAGE = """
<html>
<head>
	<title> useEffect – React </title>
	<meta name="description" content="Synchronize a component with an external system.">
	<meta name="last-modified" content="2024-03-01">
	<script>var tracking = 1;</script>
</head>
<body>
	<nav><a href="/">Home</a></nav>
	<div class="sidebar">Sidebar links</div>
	<main>
		<h1>useEffect</h1>
		<p>Call <code>useEffect</code> at the top level.</p>
		<div style="display: none">hidden text</div>
	</main>
	<footer>Copyright</footer>
</body>
</html>
"""


class FakeResponse:
	def __init__(self, status=200, body=""):
		self.status = status
		self.body = body

	async def text(self):
		return self.body

	async def __aenter__(self):
		return self

	async def __aexit__(self, *exc):
		return False


class FakeSession:
	def __init__(self, response):
		self.response = response

	def get(self, url):
		return self.response

	async def __aenter__(self):
		return self

	async def __aexit__(self, *exc):
		return False


def _session_factory(response):
	return lambda **kwargs: FakeSession(response)


def test_parse_html_metadata():
	result = parse_html(PAGE)
	assert result.metadata.title == "useEffect – React"
	assert result.metadata.description == "Synchronize a component with an external system."
	assert result.metadata.last_updated == "2024-03-01"


def test_parse_html_content():
	result = parse_html(PAGE)
	assert result.content.startswith("# useEffect")
	assert "useEffect" in result.content
	for removed in ("tracking", "Sidebar links", "Home", "Copyright", "hidden text"):
		assert removed not in result.content


def test_parse_html_falls_back_to_body():
	result = parse_html("<html><body><p>Just text</p></body></html>")
	assert result.content == "Just text"
	assert result.metadata.title is None


def test_clean_markdown():
	assert clean_markdown("a  \n\n\n\nb\n") == "a\n\nb"


@pytest.mark.asyncio
async def test_fetch_success():
	response = FakeResponse(body=PAGE)
	with patch("docshelf.docs.scraper.aiohttp.ClientSession", _session_factory(response)):
		result = await DocScraper().fetch("https://react.dev/reference/react/useEffect")
	assert result.metadata.title == "useEffect – React"


@pytest.mark.asyncio
async def test_fetch_http_error():
	with patch("docshelf.docs.scraper.aiohttp.ClientSession", _session_factory(FakeResponse(status=404))):
		with pytest.raises(ScrapeError, match="HTTP 404"):
			await DocScraper().fetch("https://example.com/missing")


@pytest.mark.asyncio
async def test_fetch_oversize():
	response = FakeResponse(body="x" * 200)
	with patch("docshelf.docs.scraper.aiohttp.ClientSession", _session_factory(response)):
		with pytest.raises(ScrapeError, match="too large"):
			await DocScraper(max_content_length=100).fetch("https://example.com/big")


@pytest.mark.asyncio
async def test_fetch_network_error():
	with patch(
		"docshelf.docs.scraper.aiohttp.ClientSession",
		side_effect=aiohttp.ClientConnectionError("connection refused"),
	):
		with pytest.raises(ScrapeError, match="https://example.com"):
			await DocScraper().fetch("https://example.com")
