from sqlalchemy import Column, Integer, String, DateTime, Boolean, Index
from datetime import datetime
from app.core.database import Base


class Tag(Base):
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(20), nullable=False, index=True)  # e.g. "Java", "前端"
    slug = Column(String(50), nullable=False, index=True)  # e.g. "java"
    color = Column(String(20), nullable=True)  # "#FF5722", "#f00" or "teal"
    use_count = Column(Integer, nullable=False, default=0)  # Denormalized popularity

    # Metadata
    is_deleted = Column(Boolean, nullable=False, default=False, index=True)  # Soft delete flag
    deleted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Name/slug uniqueness only applies to live tags, so it is checked in TagStore
    __table_args__ = (
        Index("idx_tags_use_count_created", "use_count", "created_at"),
        {"sqlite_autoincrement": True},
    )
