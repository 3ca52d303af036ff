"""Entity API schemas.

批量接口的请求体保持原样传给协调器（错误项需要回显原始数据），
这里只定义结构固定的辅助请求体。
"""

from typing import List

from pydantic import BaseModel, Field


class ReferenceChange(BaseModel):
    """引用数组增删请求"""

    field: str = Field(..., description="引用字段名，如 articles_ids、timeline.events")
    ids: List[str] = Field(..., description="要添加或移除的 ID")


class TagsChange(BaseModel):
    """笔记标签增删请求"""

    tags: List[str] = Field(..., description="标签列表")
