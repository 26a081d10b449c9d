"""
Article-tag association store.

Queries are keyed by raw ids: whether the article or tag exists is the
caller's business. Nothing here commits; the caller owns the transaction.
"""

from datetime import datetime
from typing import Iterable, List, Optional, Tuple
from sqlalchemy import exists, func, not_, select
from sqlalchemy.orm import Session

from app.models.article_tag import ArticleTag
from app.models.tag import Tag


def _tag_is_live():
    """True unless the association points at a soft-deleted tag."""
    return not_(
        exists(
            select(Tag.id).where(Tag.id == ArticleTag.tag_id, Tag.is_deleted == True)
        )
    )


class ArticleTagStore:
    """Persistence for article/tag links."""

    def __init__(self, db: Session):
        self.db = db

    def exists(self, article_id: int, tag_id: int) -> bool:
        return (
            self.db.query(ArticleTag.id)
            .filter(ArticleTag.article_id == article_id, ArticleTag.tag_id == tag_id)
            .first()
            is not None
        )

    def insert_many(
        self, pairs: Iterable[Tuple[int, int]], created_at: Optional[datetime] = None
    ) -> int:
        """
        Insert one row per (article_id, tag_id) pair, all sharing ``created_at``.

        Pairs must already be filtered against existing rows.
        """
        created_at = created_at or datetime.utcnow()
        rows = [
            ArticleTag(article_id=article_id, tag_id=tag_id, created_at=created_at)
            for article_id, tag_id in pairs
        ]
        if not rows:
            return 0
        self.db.add_all(rows)
        self.db.flush()
        return len(rows)

    def delete_by_article(self, article_id: int) -> int:
        return (
            self.db.query(ArticleTag)
            .filter(ArticleTag.article_id == article_id)
            .delete(synchronize_session=False)
        )

    def delete_by_tag(self, tag_id: int) -> int:
        return (
            self.db.query(ArticleTag)
            .filter(ArticleTag.tag_id == tag_id)
            .delete(synchronize_session=False)
        )

    def delete_by_article_and_tags(self, article_id: int, tag_ids: List[int]) -> int:
        if not tag_ids:
            return 0
        return (
            self.db.query(ArticleTag)
            .filter(ArticleTag.article_id == article_id, ArticleTag.tag_id.in_(tag_ids))
            .delete(synchronize_session=False)
        )

    def tag_ids_for_article(self, article_id: int) -> List[int]:
        rows = (
            self.db.query(ArticleTag.tag_id)
            .filter(ArticleTag.article_id == article_id, _tag_is_live())
            .order_by(ArticleTag.created_at.asc(), ArticleTag.id.asc())
            .all()
        )
        return [row.tag_id for row in rows]

    def article_ids_for_tag(self, tag_id: int) -> List[int]:
        rows = (
            self.db.query(ArticleTag.article_id)
            .filter(ArticleTag.tag_id == tag_id)
            .order_by(ArticleTag.created_at.asc(), ArticleTag.id.asc())
            .all()
        )
        return [row.article_id for row in rows]

    def count_by_article(self, article_id: int) -> int:
        return (
            self.db.query(ArticleTag)
            .filter(ArticleTag.article_id == article_id, _tag_is_live())
            .count()
        )

    def count_by_tag(self, tag_id: int) -> int:
        return self.db.query(ArticleTag).filter(ArticleTag.tag_id == tag_id).count()

    def popular_tag_ids_by_association_count(self, limit: int) -> List[int]:
        """Tag ids ranked by how many distinct articles use them."""
        if limit is None or limit <= 0:
            return []
        article_count = func.count(func.distinct(ArticleTag.article_id))
        rows = (
            self.db.query(ArticleTag.tag_id, article_count.label("article_count"))
            .filter(_tag_is_live())
            .group_by(ArticleTag.tag_id)
            .order_by(article_count.desc(), ArticleTag.tag_id.asc())
            .limit(limit)
            .all()
        )
        return [row.tag_id for row in rows]
