"""
JSONB 文档查询构建器

文档以 ``(id TEXT, doc JSONB)`` 形式存储，字段通过 ``doc->>'field'`` 访问。
提供安全、可组合的查询构建功能：
- WHERE 条件构建（支持比较、空值、包含、JSON 包含匹配）
- 多字段子串搜索（文本字段、字符串数组、嵌套对象数组）
- 分页处理
- 排序验证
- 参数安全
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from psycopg2.extras import Json

logger = logging.getLogger(__name__)

# 字段名只允许小写字母、数字和下划线，保证拼接进 SQL 时安全
_FIELD_NAME = re.compile(r"^[a-z_][a-z0-9_]*$")


def escape_like(keyword: str) -> str:
    """转义 LIKE 通配符，使关键字按字面子串匹配"""
    return (
        keyword.replace("\\", "\\\\")
        .replace("%", "\\%")
        .replace("_", "\\_")
    )


def _array_expr(field_name: str) -> str:
    """返回 JSON 数组表达式，非数组值视为空数组"""
    return (
        f"CASE WHEN jsonb_typeof(doc->'{field_name}') = 'array' "
        f"THEN doc->'{field_name}' ELSE '[]'::jsonb END"
    )


@dataclass
class QueryBuilder:
    """
    JSONB 文档查询构建器

    使用示例:
        builder = QueryBuilder(
            table="topics",
            allowed_fields={"name", "description", "priority"},
            numeric_fields={"priority"},
        )

        sql, params = (
            builder
            .where("priority", ">=3")
            .search("ai", text_fields=["name", "description"], array_fields=["keywords"])
            .order_by("priority DESC")
            .order_by("name ASC")
            .limit(20)
            .offset(0)
            .build()
        )
    """

    table: str
    allowed_fields: set[str]
    numeric_fields: set[str] = field(default_factory=set)

    # 内部状态
    _where_clauses: list[str] = field(default_factory=list)
    _params: list[Any] = field(default_factory=list)
    _order_by: list[str] = field(default_factory=list)
    _limit: int | None = None
    _offset: int | None = None

    def __post_init__(self):
        # 确保使用新列表，避免共享状态
        self._where_clauses = []
        self._params = []
        self._order_by = []

    def field_expr(self, field_name: str) -> str | None:
        """
        返回字段的 SQL 表达式

        数值字段会被转换为 numeric，其余字段按文本比较
        （ISO-8601 日期按文本排序即按时间排序）。
        """
        if field_name not in self.allowed_fields or not _FIELD_NAME.match(field_name):
            logger.warning(f"Invalid field ignored: {field_name}")
            return None
        if field_name in self.numeric_fields:
            return f"(doc->>'{field_name}')::numeric"
        return f"doc->>'{field_name}'"

    def where(self, field_name: str, value: Any) -> 'QueryBuilder':
        """
        添加 WHERE 条件

        支持的值格式:
        - 非字符串值: JSON 包含匹配（数值、布尔值精确相等）
        - ">=value", "<=value", ">value", "<value": 比较运算
        - "empty": 空值检查
        - "not_empty": 非空检查
        - "contains:keyword": 子串包含（ILIKE）
        - 列表: 多个条件 AND 组合
        """
        if field_name not in self.allowed_fields:
            logger.warning(f"Invalid filter field ignored: {field_name}")
            return self

        values = value if isinstance(value, list) else [value]

        for v in values:
            clause, params = self._parse_condition(field_name, v)
            if clause:
                self._where_clauses.append(clause)
                self._params.extend(params)

        return self

    def where_contains(self, match: dict[str, Any]) -> 'QueryBuilder':
        """
        添加 JSON 包含匹配条件（``doc @> match``）

        标量按相等匹配，``{"tags": ["a"]}`` 表示数组中包含 "a"。
        """
        if match:
            self._where_clauses.append("doc @> %s")
            self._params.append(Json(match))
        return self

    def search(
        self,
        keyword: str,
        text_fields: list[str] | None = None,
        array_fields: list[str] | None = None,
        nested_fields: dict[str, str] | None = None,
    ) -> 'QueryBuilder':
        """
        多字段大小写不敏感子串搜索，任一字段命中即匹配

        Args:
            keyword: 搜索关键字（按字面匹配）
            text_fields: 文本字段
            array_fields: 字符串数组字段，任一元素命中即可
            nested_fields: 对象数组字段 -> 子字段，如 {"subcategories": "name"}
        """
        pattern = f"%{escape_like(keyword)}%"
        branches: list[str] = []
        params: list[Any] = []

        for name in text_fields or []:
            expr = self.field_expr(name)
            if expr:
                branches.append(f"{expr} ILIKE %s")
                params.append(pattern)

        for name in array_fields or []:
            if self.field_expr(name):
                branches.append(
                    f"EXISTS (SELECT 1 FROM jsonb_array_elements_text({_array_expr(name)}) AS item(value) "
                    f"WHERE item.value ILIKE %s)"
                )
                params.append(pattern)

        for name, sub_field in (nested_fields or {}).items():
            if self.field_expr(name) and _FIELD_NAME.match(sub_field):
                branches.append(
                    f"EXISTS (SELECT 1 FROM jsonb_array_elements({_array_expr(name)}) AS item(value) "
                    f"WHERE item.value->>'{sub_field}' ILIKE %s)"
                )
                params.append(pattern)

        if branches:
            self._where_clauses.append("(" + " OR ".join(branches) + ")")
            self._params.extend(params)
        return self

    def order_by(self, order: str) -> 'QueryBuilder':
        """
        追加排序

        Args:
            order: 排序表达式，如 "priority DESC"
        """
        order_parts = order.strip().split()
        if not order_parts:
            return self

        column = order_parts[0].lower()
        direction = order_parts[1].upper() if len(order_parts) > 1 else 'ASC'

        if direction not in ('ASC', 'DESC'):
            logger.warning(f"Invalid order direction ignored: {direction}")
            return self

        expr = self.field_expr(column)
        if expr is None:
            return self

        self._order_by.append(f'{expr} {direction} NULLS LAST')
        return self

    def limit(self, limit: int) -> 'QueryBuilder':
        """设置 LIMIT"""
        self._limit = limit
        return self

    def offset(self, offset: int) -> 'QueryBuilder':
        """设置 OFFSET"""
        self._offset = offset
        return self

    def build(self) -> tuple[str, list[Any]]:
        """
        构建查询

        Returns:
            (sql, params) 元组
        """
        sql = f'SELECT doc FROM {self.table}'

        if self._where_clauses:
            sql += ' WHERE ' + ' AND '.join(self._where_clauses)

        # id 作为最后的排序键，保证分页结果稳定
        order = self._order_by + ['id ASC']
        sql += ' ORDER BY ' + ', '.join(order)

        params = list(self._params)

        if self._limit is not None:
            sql += ' LIMIT %s'
            params.append(self._limit)

        if self._offset is not None:
            sql += ' OFFSET %s'
            params.append(self._offset)

        return sql, params

    def build_count(self) -> tuple[str, list[Any]]:
        """
        构建 COUNT 查询

        Returns:
            (sql, params) 元组
        """
        sql = f'SELECT COUNT(*) as count FROM {self.table}'

        if self._where_clauses:
            sql += ' WHERE ' + ' AND '.join(self._where_clauses)

        return sql, list(self._params)

    def _parse_condition(
        self,
        field_name: str,
        value: Any
    ) -> tuple[str | None, list[Any]]:
        """
        解析条件值，返回 SQL 子句和参数
        """
        expr = self.field_expr(field_name)
        if expr is None:
            return None, []

        if not isinstance(value, str):
            # 非字符串值使用 JSON 包含匹配，保留类型语义
            return 'doc @> %s', [Json({field_name: value})]

        # 比较运算符
        for op in ('>=', '<=', '>', '<'):
            if value.startswith(op):
                return f'{expr} {op} %s', [self._parse_operand(field_name, value[len(op):])]

        # 空值检查
        if value == 'empty':
            if field_name in self.numeric_fields:
                return f'{expr} IS NULL', []
            return f"({expr} IS NULL OR {expr} = '')", []

        if value == 'not_empty':
            if field_name in self.numeric_fields:
                return f'{expr} IS NOT NULL', []
            return f"({expr} IS NOT NULL AND {expr} != '')", []

        # 包含搜索
        if value.startswith('contains:'):
            keyword = value[9:]
            return f'{expr} ILIKE %s', [f'%{escape_like(keyword)}%']

        # 普通等于
        return f'{expr} = %s', [value]

    def _parse_operand(self, field_name: str, value: str) -> Any:
        """比较运算的右值：数值字段解析为数字，其余保持文本"""
        if field_name not in self.numeric_fields:
            return value
        try:
            if '.' in value:
                return float(value)
            return int(value)
        except ValueError:
            return float(value)
