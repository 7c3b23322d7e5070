"""Marketplace search request/response schemas."""
from typing import Optional, List, Dict, Any

from pydantic import BaseModel, Field


class SearchRequest(BaseModel):
    """Text search or image search; one of the two is required."""
    query: Optional[str] = Field(None, max_length=500)
    image_url: Optional[str] = Field(None, max_length=2000)
    page: int = Field(1, ge=1)
    page_size: Optional[int] = Field(None, ge=1, le=100)


class SearchResponse(BaseModel):
    items: List[Dict[str, Any]]
    total: int
    cached: bool
    translated: bool
