"""
服务层：批量协调、子分类、引用维护
"""

from .entity_service import BatchResult, EntityService, parse_ids, parse_kinds
from .reference_service import REFERENCE_FIELDS, ReferenceService
from .subcategory_service import SubcategoryService

__all__ = [
    "EntityService",
    "BatchResult",
    "parse_ids",
    "parse_kinds",
    "SubcategoryService",
    "ReferenceService",
    "REFERENCE_FIELDS",
]
