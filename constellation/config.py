"""
Application configuration and environment variables
"""
import os

# Server configuration
PORT = int(os.environ.get('PORT', 5000))

# 'development' exposes stack traces in error responses
ENVIRONMENT = os.environ.get('ENVIRONMENT', 'production').strip().lower()
IS_DEVELOPMENT = ENVIRONMENT == 'development'
IS_PRODUCTION = ENVIRONMENT == 'production'

# API configuration
API_TITLE = "Constellation of Knowledge API"
API_VERSION = "1.0.0"

# Wikipedia API configuration
WIKI_API_ENDPOINT = os.environ.get('WIKI_API_ENDPOINT', 'https://en.wikipedia.org/w/api.php')
WIKI_PAGE_URL_TEMPLATE = 'https://en.wikipedia.org/?curid={page_id}'
USER_AGENT = (
    'ConstellationOfKnowledge/1.0 '
    '(https://github.com/jpvigop/constellation-of-knowledge; jpvigopasto@gmail.com)'
)

# Search configuration
SEARCH_LIMIT = 20
CONSTELLATION_SEARCH_LIMIT = 10
SUGGESTION_LIMIT = 5
MIN_WILDCARD_TOPIC_LENGTH = 3

# Seconds between sequential page detail requests (Wikipedia's informal rate limits)
DETAIL_FETCH_DELAY = float(os.environ.get('DETAIL_FETCH_DELAY', 0.3))

# Layout configuration
LAYOUT_WIDTH = 900
LAYOUT_HEIGHT = 600
LAYOUT_RING_SPACING = 100
LAYOUT_NODES_PER_RING = 8
LAYOUT_JITTER = 20

# Rate limiting for the constellation endpoint (one request fans out to ~11 API calls)
CONSTELLATION_RATE_LIMIT = "10/minute"

# CORS origins
CORS_ORIGINS = [
    "http://localhost:3000",
]
