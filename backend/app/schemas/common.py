"""Common schemas for API responses."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel

Document = Dict[str, Any]


class ErrorDetail(BaseModel):
    """Error body content."""

    message: str
    details: Optional[Any] = None


class ErrorResponse(BaseModel):
    """Error response: ``{"error": {"message": ..., "details": ...}}``."""

    error: ErrorDetail


class Pagination(BaseModel):
    """Offset pagination echo."""

    limit: int
    skip: int


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str


class DocumentList(BaseModel):
    """Plain list of documents with count."""

    articles: List[Document]
    count: int
