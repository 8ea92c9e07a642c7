"""
Graph construction from Wikipedia search and page detail responses

Turns raw MediaWiki API payloads into constellation nodes and links:
- Scores each hit by search rank and outbound link count
- Derives links by exact title matching against the node set
- Drops links that don't reference known nodes
- Synthesizes a star of fallback links when no genuine links exist
"""
import logging
from typing import Any, Dict, List

from constellation import config
from constellation.models import ConstellationGraph, Link, Node
from constellation.utils import strip_highlight_markup

logger = logging.getLogger(__name__)

BASE_IMPORTANCE = 100
RANK_FACTOR = 5
LINKS_FACTOR = 0.5
MIN_IMPORTANCE = 10


def calculate_importance(search_rank: int, links_count: int) -> float:
    """
    Calculate a node's importance from its search rank and number of links

    Args:
        search_rank: Zero-based position in the search results (lower is better)
        links_count: Number of outbound links on the page

    Returns:
        Importance score, never below 10
    """
    return max(MIN_IMPORTANCE, BASE_IMPORTANCE - search_rank * RANK_FACTOR + links_count * LINKS_FACTOR)


def _query(payload: Any) -> Dict[str, Any]:
    query = payload.get("query") if isinstance(payload, dict) else None
    return query if isinstance(query, dict) else {}


def index_page_details(page_details: List[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """
    Map page ids to their page records

    Each detail response holds a single page under query.pages, keyed by page id.

    Args:
        page_details: Raw responses from the page detail API

    Returns:
        Dictionary of page id (string) -> page record
    """
    pages_by_id = {}
    for detail in page_details:
        pages = _query(detail).get("pages")
        if not isinstance(pages, dict) or not pages:
            logger.warning("Ignoring page detail response without query.pages")
            continue
        page_id = next(iter(pages))
        pages_by_id[str(page_id)] = pages[page_id]
    return pages_by_id


def _build_node(hit: Dict[str, Any], page: Dict[str, Any], rank: int) -> Node:
    page_id = str(hit["pageid"])

    missing = [field for field in ("title", "snippet") if field not in hit]
    missing += [field for field in ("fullurl", "extract") if field not in page]
    if missing:
        logger.warning(f"Page {page_id} is missing fields, using defaults", extra={"missing": missing})

    links = page.get("links") or []
    return Node(
        id=page_id,
        title=hit.get("title", ""),
        snippet=strip_highlight_markup(hit.get("snippet", "")),
        url=page.get("fullurl") or config.WIKI_PAGE_URL_TEMPLATE.format(page_id=page_id),
        extract=page.get("extract") or "",
        importance=calculate_importance(rank, len(links)),
    )


def derive_links(nodes: List[Node], pages_by_id: Dict[str, Dict[str, Any]]) -> List[Link]:
    """
    Find links between pages by exact title match

    For every outbound link of every page, the first node whose title equals the
    link title becomes the target. No normalization or redirect resolution.
    """
    links = []
    for page_id, page in pages_by_id.items():
        for page_link in page.get("links") or []:
            link_title = page_link.get("title")
            target = next((node for node in nodes if node.title == link_title), None)
            if target:
                links.append(Link(source=page_id, target=target.id))
    return links


def filter_valid_links(nodes: List[Node], links: List[Link]) -> List[Link]:
    """Drop links whose source or target is not one of the nodes"""
    node_ids = {node.id for node in nodes}
    valid = [link for link in links if link.source in node_ids and link.target in node_ids]
    if len(valid) != len(links):
        logger.warning(f"Dropped {len(links) - len(valid)} links referencing unknown nodes")
    return valid


def create_fallback_links(nodes: List[Node]) -> List[Link]:
    """
    Link the most important node to every other node

    Keeps the constellation connected when no genuine links were found.
    Ties in importance resolve to the earlier search result.
    """
    if len(nodes) < 2:
        return []
    ranked = sorted(nodes, key=lambda node: node.importance, reverse=True)
    central = ranked[0]
    return [Link(source=central.id, target=node.id) for node in ranked[1:]]


def build_constellation_graph(search_results: Dict[str, Any], page_details: List[Dict[str, Any]]) -> ConstellationGraph:
    """
    Build the constellation graph from search results and page details

    Args:
        search_results: Raw search API response (hits under query.search)
        page_details: Raw page detail API responses, one per fetched page

    Returns:
        ConstellationGraph whose links all reference existing nodes
    """
    hits = _query(search_results).get("search") or []
    pages_by_id = index_page_details(page_details)

    nodes = []
    for rank, hit in enumerate(hits):
        page_id = str(hit.get("pageid", ""))
        page = pages_by_id.get(page_id)
        if page is None:
            logger.debug(f"No page details for page ID {page_id}, skipping")
            continue
        nodes.append(_build_node(hit, page, rank))

    links = filter_valid_links(nodes, derive_links(nodes, pages_by_id))
    logger.info(f"Created {len(nodes)} nodes and {len(links)} links")

    if not links and len(nodes) > 1:
        links = create_fallback_links(nodes)
        logger.info(f"No links found, created {len(links)} fallback links")

    return ConstellationGraph(nodes=nodes, links=links)
