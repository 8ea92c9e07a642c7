"""
Wikipedia API access

All requests go through one shared httpx.AsyncClient for connection pooling.
Page details are fetched sequentially with a fixed delay between requests to
respect Wikipedia's informal rate limits.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from constellation import config
from constellation.errors import InvalidWikipediaResponse, SearchTermTooShort, TopicNotFound

logger = logging.getLogger(__name__)


_shared_http_client: Optional[httpx.AsyncClient] = None

_TIMEOUT = httpx.Timeout(30.0, connect=5.0, write=5.0, pool=5.0)
_LIMITS = httpx.Limits(max_connections=100, max_keepalive_connections=20)


async def get_shared_http_client() -> httpx.AsyncClient:
    """Return the pooled HTTP/2 client used for every Wikipedia request, creating it on first use"""
    global _shared_http_client

    if _shared_http_client is None:
        _shared_http_client = httpx.AsyncClient(
            timeout=_TIMEOUT,
            limits=_LIMITS,
            headers={'User-Agent': config.USER_AGENT, 'Accept': 'application/json'},
            http2=True
        )
    return _shared_http_client


async def close_shared_http_client():
    """Close the shared HTTP client (called on application shutdown)"""
    global _shared_http_client
    if _shared_http_client is not None:
        await _shared_http_client.aclose()
        _shared_http_client = None


class WikipediaClient:
    """
    Thin async wrapper around the MediaWiki action API

    Usage:
        async with WikipediaClient() as wiki:
            results = await wiki.search("astronomy")
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None,
                 api_endpoint: str = config.WIKI_API_ENDPOINT,
                 request_delay: float = config.DETAIL_FETCH_DELAY):
        self.client = client
        self.api_endpoint = api_endpoint
        self.request_delay = request_delay
        self._owns_reference = client is None

    async def __aenter__(self):
        """Async context manager entry - get shared HTTP client unless one was injected"""
        if self.client is None:
            self.client = await get_shared_http_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """
        Async context manager exit

        Note: We don't close the client here since it's shared across requests.
        The client is closed on application shutdown.
        """
        if self._owns_reference:
            self.client = None
        return False

    async def _get(self, params: Dict[str, Any]) -> Any:
        response = await self.client.get(self.api_endpoint, params={**params, "format": "json", "origin": "*"})
        response.raise_for_status()
        return response.json()

    async def search(self, topic: str, limit: int = config.SEARCH_LIMIT) -> Dict[str, Any]:
        """
        Full-text search for pages about a topic

        Args:
            topic: Search term (may contain CirrusSearch syntax such as a trailing '*')
            limit: Maximum number of hits

        Returns:
            Raw search response; hits are under query.search
        """
        return await self._get({
            "action": "query",
            "list": "search",
            "srsearch": topic,
            "srlimit": limit,
            "utf8": 1
        })

    async def get_page_details(self, page_id) -> Dict[str, Any]:
        """
        Get links, categories, canonical URL and intro extract for a page

        Args:
            page_id: Wikipedia page id

        Returns:
            Raw query response; the page is under query.pages[<page_id>]
        """
        return await self._get({
            "action": "query",
            "pageids": page_id,
            "prop": "links|categories|info|extracts",
            "pllimit": "max",
            "cllimit": "max",
            "inprop": "url",
            "exintro": 1,
            "explaintext": 1,
            "utf8": 1
        })

    async def suggest(self, topic: str, limit: int = config.SUGGESTION_LIMIT) -> List[str]:
        """
        Get title suggestions for a topic via opensearch

        OpenSearch returns: [query, [titles], [descriptions], [urls]]

        Returns:
            Suggested titles, empty if there are none
        """
        data = await self._get({
            "action": "opensearch",
            "search": topic,
            "limit": limit
        })
        if isinstance(data, list) and len(data) >= 2 and isinstance(data[1], list):
            return data[1]
        return []

    async def search_with_fallback(self, topic: str, limit: int = config.CONSTELLATION_SEARCH_LIMIT) -> Dict[str, Any]:
        """
        Search for a topic, retrying with a wildcard and then looking for suggestions

        Args:
            topic: Search term
            limit: Maximum number of hits

        Returns:
            Raw search response with at least one hit

        Raises:
            SearchTermTooShort: No hits and the topic is too short for a wildcard retry
            TopicNotFound: No hits even with the wildcard (carries suggestions if any)
        """
        results = await self.search(topic, limit)
        if _hits(results):
            return results

        logger.info(f"No results found for topic: {topic}. Trying alternative search.")
        if len(topic) < config.MIN_WILDCARD_TOPIC_LENGTH:
            raise SearchTermTooShort()

        wildcard_results = await self.search(f"{topic}*", limit)
        if _hits(wildcard_results):
            logger.info(f"Found {len(_hits(wildcard_results))} results using wildcard search")
            return wildcard_results

        logger.info("Trying opensearch for suggestions")
        raise TopicNotFound(suggestions=await self.suggest(topic))

    async def fetch_page_details(self, hits: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Fetch page details for each search hit, one request at a time

        A page that fails to load is logged and skipped.

        Args:
            hits: Search hits (each with a pageid)

        Returns:
            Raw detail responses for the pages that loaded
        """
        page_details = []
        for hit in hits:
            page_id = hit.get("pageid")
            try:
                if page_details:
                    await asyncio.sleep(self.request_delay)
                page_details.append(await self.get_page_details(page_id))
            except (httpx.HTTPError, ValueError) as e:
                logger.error(f"Error fetching page {page_id}: {e}", extra={"error_type": type(e).__name__})
        return page_details


def _query(payload: Any) -> Dict[str, Any]:
    """The query object of an API response, or an empty dict if there is none"""
    query = payload.get("query") if isinstance(payload, dict) else None
    return query if isinstance(query, dict) else {}


def _hits(search_results: Dict[str, Any]) -> List[Dict[str, Any]]:
    hits = _query(search_results).get("search")
    return hits if isinstance(hits, list) else []


def require_search_hits(search_results: Dict[str, Any]) -> Dict[str, Any]:
    """Raise InvalidWikipediaResponse unless the response carries query.search"""
    if "search" not in _query(search_results):
        raise InvalidWikipediaResponse()
    return search_results


def require_pages(page_details: Dict[str, Any]) -> Dict[str, Any]:
    """Raise InvalidWikipediaResponse unless the response carries query.pages"""
    if "pages" not in _query(page_details):
        raise InvalidWikipediaResponse()
    return page_details


async def get_wikipedia_client():
    """FastAPI dependency yielding a WikipediaClient on the shared HTTP client"""
    async with WikipediaClient() as wiki:
        yield wiki
