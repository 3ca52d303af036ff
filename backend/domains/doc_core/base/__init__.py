"""
存储层基础组件

提供 DocumentStore 接口和 PostgreSQL JSONB 实现。
"""

from .store import (
    Document,
    DocumentDatabase,
    DocumentStore,
    JsonbDocumentStore,
    StoreConfigMixin,
    ThreadSafeConnectionMixin,
    generate_id,
    get_database_url,
    utc_now,
)

__all__ = [
    "Document",
    "DocumentDatabase",
    "DocumentStore",
    "JsonbDocumentStore",
    "StoreConfigMixin",
    "ThreadSafeConnectionMixin",
    "generate_id",
    "get_database_url",
    "utc_now",
]
