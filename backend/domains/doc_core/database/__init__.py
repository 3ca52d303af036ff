"""
数据库查询工具
"""

from .query_builder import QueryBuilder, escape_like

__all__ = ["QueryBuilder", "escape_like"]
