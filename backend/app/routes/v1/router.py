"""API v1 router - aggregates all route modules."""

from fastapi import APIRouter

from app.routes.v1 import articles, entities

api_router = APIRouter()

# Include REST API route modules
api_router.include_router(entities.router, prefix="/entities", tags=["entities"])
api_router.include_router(articles.router, prefix="/articles", tags=["articles"])
