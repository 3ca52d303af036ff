"""The pytest configuration for the news organizer tests.

Services are wired through the real ``register_core_services`` with the
document stores replaced by in-memory doubles, so no database is needed.
"""

import pytest
from fastapi.testclient import TestClient

from app.main import create_application
from domains.article_hub.services import ArticleService
from domains.core import ServiceRegistry, register_core_services
from domains.entity_hub.services import EntityService, ReferenceService, SubcategoryService

from tests.fakes import InMemoryArticleStore, in_memory_entity_stores


@pytest.fixture
def stores():
    """In-memory stores for the four entity kinds."""
    return in_memory_entity_stores()


@pytest.fixture
def article_store():
    """In-memory article store."""
    return InMemoryArticleStore()


@pytest.fixture
def entity_service(stores):
    return EntityService(stores)


@pytest.fixture
def reference_service(stores):
    return ReferenceService(stores)


@pytest.fixture
def subcategory_service(stores):
    return SubcategoryService(stores.categories)


@pytest.fixture
def article_service(article_store):
    return ArticleService(article_store)


@pytest.fixture
def registry(stores, article_store):
    """Service registry with the stores replaced by in-memory doubles."""
    registry = register_core_services(ServiceRegistry())
    registry.set("entity_stores", stores)
    registry.set("article_store", article_store)
    return registry


@pytest.fixture
def client(registry):
    """Test client running the full application (middleware, handlers, lifespan)."""
    app = create_application(registry)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def seed(stores, article_store):
    """Factory that inserts documents directly into a store."""

    def _seed(kind: str, *docs):
        store = article_store if kind == "articles" else getattr(stores, kind)
        return [store.create(doc) for doc in docs]

    return _seed
