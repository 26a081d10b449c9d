from sqlalchemy import Column, Integer, DateTime, UniqueConstraint
from datetime import datetime
from app.core.database import Base


class ArticleTag(Base):
    """Link between an article and a tag. Rows are hard-deleted."""

    __tablename__ = "article_tags"

    id = Column(Integer, primary_key=True, index=True)
    # Raw references: article rows live outside this service
    article_id = Column(Integer, nullable=False, index=True)
    tag_id = Column(Integer, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("article_id", "tag_id", name="uq_article_tag"),
        {"sqlite_autoincrement": True},
    )
