from pydantic import BaseModel, Field
from typing import Optional, List


class Node(BaseModel):
    """A Wikipedia page drawn as a star"""
    id: str = Field(..., description="Wikipedia page id")
    title: str
    snippet: str = ""
    url: str
    extract: str = ""
    importance: float = Field(..., ge=10, description="Score used for layout and visual sizing")
    x: float = 0.0
    y: float = 0.0
    radius: float = Field(default=0.0, description="Display radius derived from importance")


class Link(BaseModel):
    """Directed reference from one page to another"""
    source: str
    target: str
    value: int = 1


class ConstellationGraph(BaseModel):
    """Response model for the constellation endpoint"""
    nodes: List[Node] = []
    links: List[Link] = []


class ErrorResponse(BaseModel):
    """Response model for failed requests"""
    error: str
    message: Optional[str] = None
    suggestions: Optional[List[str]] = None
    stack: Optional[str] = None  # Development mode only


class HealthResponse(BaseModel):
    status: str
    version: str
    environment: str
