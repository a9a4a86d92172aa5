"""
Unit tests for the web search and page reading clients.

HTTP traffic is served by ``httpx.MockTransport`` handlers.
"""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from search_agent.errors import FetchError, SearchError
from search_agent.web import BraveSearch, JinaReader, WebContentFetcher

BRAVE_RESPONSE = {
    "web": {
        "results": [
            {
                "url": "https://vuejs.org/guide",
                "title": "Vue Guide",
                "description": "Official guide",
                "age": "2 days",
            },
            {"url": "https://example.com/vue", "title": "Vue fetch"},
        ]
    }
}


def recording_transport(responses):
    """MockTransport replaying ``responses`` in order and recording requests."""
    requests = []
    remaining = list(responses)

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        response = remaining.pop(0) if len(remaining) > 1 else remaining[0]
        if isinstance(response, Exception):
            raise response
        # Fresh copy so a repeated response is not bound to two requests
        return httpx.Response(
            response.status_code, headers=response.headers, content=response.content
        )

    return httpx.MockTransport(handler), requests


class TestBraveSearch:
    @pytest.mark.asyncio
    async def test_results_in_rank_order(self):
        transport, requests = recording_transport(
            [httpx.Response(200, json=BRAVE_RESPONSE)]
        )
        searcher = BraveSearch("brave-key", transport=transport)

        results = await searcher.search("vue fetch")

        assert results == [
            {
                "url": "https://vuejs.org/guide",
                "title": "Vue Guide",
                "description": "Official guide",
            },
            {"url": "https://example.com/vue", "title": "Vue fetch", "description": ""},
        ]
        request = requests[0]
        assert request.headers["X-Subscription-Token"] == "brave-key"
        assert request.url.params["q"] == "vue fetch"
        assert request.url.params["count"] == "10"

    @pytest.mark.asyncio
    async def test_count_capped_at_api_max(self):
        transport, requests = recording_transport([httpx.Response(200, json={})])

        results = await BraveSearch("k", count=50, transport=transport).search("q")

        assert results == []
        assert requests[0].url.params["count"] == "20"

    @pytest.mark.asyncio
    async def test_rate_limit_is_retried(self):
        transport, requests = recording_transport(
            [httpx.Response(429), httpx.Response(200, json=BRAVE_RESPONSE)]
        )
        searcher = BraveSearch("k", backoff_factor=0, transport=transport)

        results = await searcher.search("q")

        assert len(requests) == 2
        assert len(results) == 2

    @pytest.mark.asyncio
    async def test_rate_limit_gives_up_after_retries(self):
        transport, requests = recording_transport([httpx.Response(429)])
        searcher = BraveSearch("k", max_retries=2, backoff_factor=0, transport=transport)

        with pytest.raises(SearchError, match="429") as exc_info:
            await searcher.search("q")

        assert len(requests) == 3
        assert exc_info.value.query == "q"

    @pytest.mark.asyncio
    async def test_server_error_not_retried(self):
        transport, requests = recording_transport([httpx.Response(500, text="oops")])

        with pytest.raises(SearchError, match="500"):
            await BraveSearch("k", transport=transport).search("q")

        assert len(requests) == 1

    @pytest.mark.asyncio
    async def test_timeout(self):
        transport, _ = recording_transport([httpx.ReadTimeout("slow")])

        with pytest.raises(SearchError, match="timed out"):
            await BraveSearch("k", transport=transport).search("q")

    @pytest.mark.asyncio
    async def test_missing_api_key(self):
        with pytest.raises(SearchError, match="BRAVE_API_KEY"):
            await BraveSearch("").search("q")


class TestJinaReader:
    @pytest.mark.asyncio
    async def test_reads_through_jina(self):
        transport, requests = recording_transport(
            [httpx.Response(200, text="# Vue Guide\n\nUse fetch.")]
        )
        reader = JinaReader("jina-key", transport=transport)

        content = await reader.fetch("https://vuejs.org/guide")

        assert content == "# Vue Guide\n\nUse fetch."
        request = requests[0]
        assert str(request.url).startswith("https://r.jina.ai/")
        assert str(request.url).endswith("vuejs.org/guide")
        assert request.headers["Authorization"] == "Bearer jina-key"
        assert request.headers["X-Md-Link-Style"] == "discarded"
        assert request.headers["X-Remove-Selector"] == "header, footer, nav"
        assert request.headers["X-Retain-Images"] == "none"

    @pytest.mark.asyncio
    async def test_http_error(self):
        transport, _ = recording_transport([httpx.Response(451)])

        with pytest.raises(FetchError) as exc_info:
            await JinaReader("k", transport=transport).fetch("https://a.example")

        assert exc_info.value.url == "https://a.example"
        assert "HTTP 451" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_network_error(self):
        transport, _ = recording_transport([httpx.ConnectError("refused")])

        with pytest.raises(FetchError, match="Request failed"):
            await JinaReader("k", transport=transport).fetch("https://a.example")

    @pytest.mark.asyncio
    async def test_missing_api_key(self):
        with pytest.raises(FetchError, match="JINA_API_KEY"):
            await JinaReader("").fetch("https://a.example")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url", ["ftp://a.example", "https://r.jina.ai/https://a.example"])
    async def test_rejected_urls(self, url):
        transport, requests = recording_transport([httpx.Response(200)])

        with pytest.raises(FetchError):
            await JinaReader("k", transport=transport).fetch(url)

        assert requests == []


class TestWebContentFetcher:
    HTML = """
    <html>
      <head><title>Vue</title><style>.x {}</style></head>
      <body>
        <nav>Home | Docs</nav>
        <main>
          <h1>Fetching data</h1>
          <p>Use <code>fetch</code> inside onMounted.</p>
          <ul><li>Composition API</li><li>Options API</li></ul>
          <script>track()</script>
        </main>
        <footer>Copyright</footer>
      </body>
    </html>
    """

    def test_extract_text_keeps_main_content(self):
        text = WebContentFetcher().extract_text(self.HTML)

        assert "Fetching data" in text
        assert "Use fetch inside onMounted." in text
        assert "• Composition API" in text
        assert "Home | Docs" not in text
        assert "Copyright" not in text
        assert "track()" not in text

    def test_extract_text_falls_back_to_body(self):
        text = WebContentFetcher().extract_text("<body><div>Plain page</div></body>")
        assert text == "Plain page"

    @pytest.mark.asyncio
    async def test_fetch_returns_extracted_text(self):
        transport, requests = recording_transport(
            [httpx.Response(200, html=self.HTML)]
        )

        text = await WebContentFetcher(transport=transport).fetch("https://vuejs.org/guide")

        assert "Fetching data" in text
        assert "Mozilla" in requests[0].headers["User-Agent"]

    @pytest.mark.asyncio
    async def test_rate_limit_retried_once(self):
        transport, requests = recording_transport(
            [httpx.Response(429), httpx.Response(200, html="<p>ok</p>")]
        )

        with patch("search_agent.web.content_fetcher.asyncio.sleep", new=AsyncMock()):
            text = await WebContentFetcher(transport=transport).fetch("https://a.example")

        assert text == "ok"
        assert len(requests) == 2

    @pytest.mark.asyncio
    async def test_http_error(self):
        transport, _ = recording_transport([httpx.Response(404)])

        with pytest.raises(FetchError, match="HTTP 404"):
            await WebContentFetcher(transport=transport).fetch("https://a.example")
