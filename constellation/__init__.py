"""
Constellation of Knowledge - FastAPI Application

This package turns Wikipedia search results into a node-link "constellation":
pages become stars sized by importance, and links between them become lines.
"""

__version__ = "1.0.0"
