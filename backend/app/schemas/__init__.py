from app.schemas.tag import (
    Tag,
    TagCreate,
    TagUpdate,
    TagCreated,
    TagQuery,
    TagPage,
    TagStats,
    TagSortField,
    SortOrder,
    ExistsResponse,
)
from app.schemas.article_tag import OperationResult, CountResponse

__all__ = [
    "Tag",
    "TagCreate",
    "TagUpdate",
    "TagCreated",
    "TagQuery",
    "TagPage",
    "TagStats",
    "TagSortField",
    "SortOrder",
    "ExistsResponse",
    "OperationResult",
    "CountResponse",
]
