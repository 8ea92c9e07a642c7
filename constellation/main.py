from fastapi import Depends, FastAPI, Path, Query, Request
from fastapi.responses import HTMLResponse
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from contextlib import asynccontextmanager
import logging

from constellation import config
from constellation.errors import ConstellationError, internal_error_response, register_error_handlers
from constellation.graph import build_constellation_graph
from constellation.layout import assign_radial_layout
from constellation.models import ConstellationGraph, ErrorResponse, HealthResponse
from constellation.wikipedia import (
    WikipediaClient, close_shared_http_client, get_wikipedia_client,
    require_pages, require_search_hits
)

# Configure structured logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler()
    ]
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Cleanup: Close the shared HTTP client on application shutdown
    await close_shared_http_client()


# Initialize rate limiter
limiter = Limiter(key_func=get_remote_address)

app = FastAPI(title=config.API_TITLE, version=config.API_VERSION, lifespan=lifespan)

# Add rate limit exception handler
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)

TOPIC_MAX_LENGTH = 200

ERROR_RESPONSES = {
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@app.get('/health', response_model=HealthResponse)
async def health():
    """Liveness check"""
    return HealthResponse(status="ok", version=config.API_VERSION, environment=config.ENVIRONMENT)


@app.get('/api/search/{topic:path}', responses=ERROR_RESPONSES)
async def search_topic(
    topic: str = Path(..., min_length=1, max_length=TOPIC_MAX_LENGTH),
    wiki: WikipediaClient = Depends(get_wikipedia_client)
):
    """
    Search Wikipedia for pages about a topic

    Returns the raw Wikipedia search response (up to 20 hits).
    """
    logger.info(f"Searching for topic: {topic}")
    try:
        results = require_search_hits(await wiki.search(topic, limit=config.SEARCH_LIMIT))
    except ConstellationError:
        raise
    except Exception as e:
        logger.exception(f"Error searching Wikipedia for {topic}")
        return internal_error_response('Failed to fetch data from Wikipedia', e)

    logger.info(f"Found {len(results['query']['search'] or [])} results for topic: {topic}")
    return results


@app.get('/api/page/{page_id}', responses=ERROR_RESPONSES)
async def page_details(page_id: int, wiki: WikipediaClient = Depends(get_wikipedia_client)):
    """
    Get links, categories, URL and intro extract for a page

    Returns the raw Wikipedia query response.
    """
    logger.info(f"Fetching details for page ID: {page_id}")
    try:
        details = require_pages(await wiki.get_page_details(page_id))
    except ConstellationError:
        raise
    except Exception as e:
        logger.exception(f"Error fetching page details for {page_id}")
        return internal_error_response('Failed to fetch page details from Wikipedia', e)

    logger.info(f"Successfully fetched details for page ID: {page_id}")
    return details


@app.get('/api/constellation/{topic:path}', response_model=ConstellationGraph, responses=ERROR_RESPONSES)
@limiter.limit(config.CONSTELLATION_RATE_LIMIT)
async def constellation(
    request: Request,
    topic: str = Path(..., min_length=1, max_length=TOPIC_MAX_LENGTH),
    width: float = Query(default=config.LAYOUT_WIDTH, gt=0, le=10000),
    height: float = Query(default=config.LAYOUT_HEIGHT, gt=0, le=10000),
    wiki: WikipediaClient = Depends(get_wikipedia_client)
):
    """
    Build the constellation graph for a topic

    Searches Wikipedia (falling back to a wildcard search, then to suggestions),
    fetches details for each hit, and returns positioned nodes and links.
    """
    logger.info(f"Building constellation data for topic: {topic}")
    try:
        search_results = await wiki.search_with_fallback(topic, limit=config.CONSTELLATION_SEARCH_LIMIT)
        hits = search_results["query"]["search"]
        logger.info(f"Found {len(hits)} results for topic: {topic}")

        page_details = await wiki.fetch_page_details(hits)
        graph = build_constellation_graph(search_results, page_details)
        assign_radial_layout(graph.nodes, width=width, height=height)
    except ConstellationError:
        raise
    except Exception as e:
        logger.exception(f"Error building constellation for {topic}")
        return internal_error_response('Failed to build constellation data', e)

    logger.info(
        "Constellation built",
        extra={"topic": topic, "nodes": len(graph.nodes), "links": len(graph.links)}
    )
    return graph


if not config.IS_PRODUCTION:
    @app.get("/", response_class=HTMLResponse)
    async def index():
        """Point developers at the frontend dev server"""
        return """
        <h1>Development Server</h1>
        <p>This is the API server. For the frontend, please use the Vite dev server at
        <a href="http://localhost:3000">http://localhost:3000</a></p>
        """


if __name__ == '__main__':
    import uvicorn
    uvicorn.run(app, host='0.0.0.0', port=config.PORT)
