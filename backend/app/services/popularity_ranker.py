"""
Popular tags, ranked two ways that are never reconciled:

- by the denormalized ``use_count`` counter
- by the number of articles currently linked to each tag
"""

from typing import List, Optional
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.tag import Tag
from app.services.article_tag_store import ArticleTagStore
from app.services.tag_store import TagStore


class PopularityRanker:
    def __init__(self, db: Session):
        self.tags = TagStore(db)
        self.links = ArticleTagStore(db)

    @staticmethod
    def _limit(limit: Optional[int]) -> int:
        if limit is None or limit <= 0:
            return settings.POPULAR_TAGS_DEFAULT_LIMIT
        return limit

    def by_use_count(self, limit: Optional[int] = None) -> List[Tag]:
        return self.tags.list_by_use_count_desc(self._limit(limit))

    def by_association_count(self, limit: Optional[int] = None) -> List[int]:
        return self.links.popular_tag_ids_by_association_count(self._limit(limit))

    def by_association_count_tags(self, limit: Optional[int] = None) -> List[Tag]:
        """Same ranking as ``by_association_count``, as live Tag rows."""
        return self.tags.list_by_ids(self.by_association_count(limit))
