from pydantic import BaseModel, Field
from datetime import datetime
from enum import Enum
from typing import Optional, List


class TagSortField(str, Enum):
    """Columns a tag listing may be ordered by."""

    ID = "id"
    NAME = "name"
    SLUG = "slug"
    USE_COUNT = "use_count"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class TagBase(BaseModel):
    name: str
    slug: str
    color: Optional[str] = None


class TagCreate(TagBase):
    pass


class TagUpdate(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    color: Optional[str] = None


class Tag(TagBase):
    id: int
    use_count: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TagCreated(BaseModel):
    id: int


class TagQuery(BaseModel):
    """Filters, ordering and paging for the tag listing."""

    page: int = 1
    page_size: int = 10
    name: Optional[str] = None
    slug: Optional[str] = None
    search_text: Optional[str] = None
    min_use_count: Optional[int] = None
    only_popular: bool = False
    sort_field: Optional[TagSortField] = None
    sort_order: SortOrder = SortOrder.DESC


class TagPage(BaseModel):
    data: List[Tag]
    total: int
    page: int
    page_size: int
    total_pages: int


class TagStats(BaseModel):
    total: int
    used: int
    unused: int


class ExistsResponse(BaseModel):
    exists: bool
