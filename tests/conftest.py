"""Pytest configuration and fixtures"""
import httpx
import pytest
from fastapi.testclient import TestClient

from constellation.main import app, limiter
from constellation.wikipedia import WikipediaClient, get_wikipedia_client


def make_hit(pageid, title, snippet=""):
    return {"ns": 0, "title": title, "pageid": pageid, "snippet": snippet}


def make_page(pageid, title, links=None, extract="", fullurl=None):
    page = {"pageid": pageid, "ns": 0, "title": title, "extract": extract}
    if links is not None:
        page["links"] = [{"ns": 0, "title": link} for link in links]
    if fullurl is not None:
        page["fullurl"] = fullurl
    return page


def search_response(hits):
    return {"batchcomplete": "", "query": {"searchinfo": {"totalhits": len(hits)}, "search": hits}}


def detail_response(page):
    return {"batchcomplete": "", "query": {"pages": {str(page["pageid"]): page}}}


MOON_HITS = [
    make_hit(19331, "Moon", 'The <span class="searchmatch">Moon</span> is Earth\'s only natural satellite'),
    make_hit(18837, "Lunar phase", 'The <span class="searchmatch">lunar</span> phase is the shape'),
    make_hit(30718, "Tide", "Tides are the rise and fall of sea levels"),
]

MOON_PAGES = {
    "19331": make_page(19331, "Moon", links=["Earth", "Tide"], extract="The Moon is Earth's only natural satellite.",
                       fullurl="https://en.wikipedia.org/wiki/Moon"),
    "18837": make_page(18837, "Lunar phase", extract="The lunar phase is the apparent shape of the Moon.",
                       fullurl="https://en.wikipedia.org/wiki/Lunar_phase"),
    "30718": make_page(30718, "Tide", links=["Ocean"], fullurl="https://en.wikipedia.org/wiki/Tide"),
}


class FakeWikipedia:
    """In-memory stand-in for the MediaWiki action API"""

    def __init__(self):
        self.search_hits = {"moon": list(MOON_HITS)}
        self.pages = dict(MOON_PAGES)
        self.suggestions = []
        self.failing_page_ids = set()
        self.search_status = 200
        self.search_payload = None
        self.page_payload = None
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        params = dict(request.url.params)
        self.requests.append(params)

        if params.get("action") == "opensearch":
            return httpx.Response(200, json=[params["search"], self.suggestions, [], []])

        if params.get("list") == "search":
            if self.search_status != 200:
                return httpx.Response(self.search_status, json={"error": {"code": "internal"}})
            if self.search_payload is not None:
                return httpx.Response(200, json=self.search_payload)
            return httpx.Response(200, json=search_response(self.search_hits.get(params["srsearch"], [])))

        page_id = params.get("pageids")
        if page_id in self.failing_page_ids:
            return httpx.Response(503, text="Service Unavailable")
        if self.page_payload is not None:
            return httpx.Response(200, json=self.page_payload)
        page = self.pages.get(page_id, {"pageid": int(page_id), "ns": 0, "missing": ""})
        return httpx.Response(200, json={"batchcomplete": "", "query": {"pages": {page_id: page}}})

    def searched_terms(self):
        return [p["srsearch"] for p in self.requests if p.get("list") == "search"]

    def wiki_client(self, http_client: httpx.AsyncClient) -> WikipediaClient:
        return WikipediaClient(client=http_client, api_endpoint="https://en.wikipedia.test/w/api.php",
                               request_delay=0)


@pytest.fixture
def fake_wiki():
    return FakeWikipedia()


@pytest.fixture
def client(fake_wiki):
    """Test client for the FastAPI app, wired to the fake Wikipedia"""
    async def override_wikipedia_client():
        async with httpx.AsyncClient(transport=httpx.MockTransport(fake_wiki.handler)) as http_client:
            yield fake_wiki.wiki_client(http_client)

    app.dependency_overrides[get_wikipedia_client] = override_wikipedia_client
    limiter.enabled = False
    limiter.reset()
    with TestClient(app) as test_client:
        yield test_client
    limiter.enabled = True
    app.dependency_overrides = {}
