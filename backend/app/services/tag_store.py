"""
Tag store - owns tag rows, their uniqueness rules, soft delete and use counts.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Tuple
from sqlalchemy import case
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import transaction
from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.core.logging_config import log_tag_event
from app.models.article_tag import ArticleTag
from app.models.tag import Tag
from app.schemas.tag import SortOrder, TagQuery, TagSortField
from app.services import tag_validator

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    TagSortField.ID: Tag.id,
    TagSortField.NAME: Tag.name,
    TagSortField.SLUG: Tag.slug,
    TagSortField.USE_COUNT: Tag.use_count,
    TagSortField.CREATED_AT: Tag.created_at,
    TagSortField.UPDATED_AT: Tag.updated_at,
}


class TagStore:
    """Persistence and rules for tags."""

    def __init__(self, db: Session):
        self.db = db

    def _live(self):
        return self.db.query(Tag).filter(Tag.is_deleted == False)

    def _default_order(self, query):
        return query.order_by(
            Tag.use_count.desc(), Tag.created_at.desc(), Tag.id.desc()
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, name: str, slug: str, color: Optional[str] = None) -> int:
        """
        Create a tag and return its id.

        Raises:
            ValidationError: name, slug or color is malformed
            ConflictError: name or slug is used by another live tag
        """
        tag_validator.validate_tag_name(name)
        tag_validator.validate_tag_slug(slug)
        color = tag_validator.validate_color(color)

        if self.exists_by_name(name):
            raise ConflictError(f"Tag name '{name}' already exists")
        if self.exists_by_slug(slug):
            raise ConflictError(f"Tag slug '{slug}' already exists")

        with transaction(self.db):
            tag = Tag(name=name, slug=slug, color=color, use_count=0, is_deleted=False)
            self.db.add(tag)
            self.db.flush()
            tag_id = tag.id

        log_tag_event("tag.created", f"Created tag {tag_id}", tag_id=tag_id, slug=slug)
        return tag_id

    def update(
        self,
        tag_id: int,
        name: Optional[str] = None,
        slug: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Tag:
        """
        Update the supplied fields of a live tag.

        ``None`` leaves a field unchanged; an empty color clears it.
        """
        tag = self.get_by_id(tag_id)

        if name is not None:
            tag_validator.validate_tag_name(name)
            if self.exists_by_name(name, exclude_id=tag.id):
                raise ConflictError(f"Tag name '{name}' already exists")
        if slug is not None:
            tag_validator.validate_tag_slug(slug)
            if self.exists_by_slug(slug, exclude_id=tag.id):
                raise ConflictError(f"Tag slug '{slug}' already exists")
        if color is not None:
            tag_validator.validate_color(color)

        with transaction(self.db):
            if name is not None:
                tag.name = name
            if slug is not None:
                tag.slug = slug
            if color is not None:
                tag.color = tag_validator.validate_color(color)
            tag.updated_at = datetime.utcnow()

        self.db.refresh(tag)
        log_tag_event("tag.updated", f"Updated tag {tag.id}", tag_id=tag.id)
        return tag

    def soft_delete(self, tag_id: int) -> None:
        """
        Mark a tag deleted. Its associations are left in place; reads that
        list an article's tags skip them.
        """
        tag = self.get_by_id(tag_id)

        with transaction(self.db):
            tag.is_deleted = True
            tag.deleted_at = datetime.utcnow()

        log_tag_event("tag.deleted", f"Soft deleted tag {tag_id}", tag_id=tag_id)

    def increment_use_count(self, tag_ids: Optional[Iterable[int]]) -> int:
        """
        Add one to use_count of every live tag in ``tag_ids``.

        A single UPDATE statement, so concurrent callers never lose updates.
        Missing or deleted ids are ignored. The caller commits.
        """
        ids = tag_validator.unique_positive_ids(tag_ids)
        if not ids:
            return 0
        logger.debug(f"Incrementing use_count of tags {ids}")
        return (
            self.db.query(Tag)
            .filter(Tag.id.in_(ids), Tag.is_deleted == False)
            .update(
                {
                    Tag.use_count: Tag.use_count + 1,
                    Tag.updated_at: datetime.utcnow(),
                },
                synchronize_session=False,
            )
        )

    def decrement_use_count(self, tag_ids: Optional[Iterable[int]]) -> int:
        """Subtract one from use_count, never going below zero. The caller commits."""
        ids = tag_validator.unique_positive_ids(tag_ids)
        if not ids:
            return 0
        logger.debug(f"Decrementing use_count of tags {ids}")
        return (
            self.db.query(Tag)
            .filter(Tag.id.in_(ids), Tag.is_deleted == False)
            .update(
                {
                    Tag.use_count: case(
                        (Tag.use_count > 0, Tag.use_count - 1), else_=0
                    ),
                    Tag.updated_at: datetime.utcnow(),
                },
                synchronize_session=False,
            )
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_by_id(self, tag_id: int) -> Tag:
        tag_validator.validate_id(tag_id, "tag_id")
        tag = self._live().filter(Tag.id == tag_id).first()
        if not tag:
            raise NotFoundError(f"Tag {tag_id} not found")
        return tag

    def get_by_slug(self, slug: str) -> Tag:
        if tag_validator.is_blank(slug):
            raise ValidationError("Tag slug cannot be empty")
        tag = self._live().filter(Tag.slug == slug).first()
        if not tag:
            raise NotFoundError(f"Tag '{slug}' not found")
        return tag

    def list_all(self) -> List[Tag]:
        return self._default_order(self._live()).all()

    def list_by_use_count_desc(self, limit: int) -> List[Tag]:
        """Top ``limit`` live tags by use_count, newest first on ties."""
        if limit is None or limit <= 0:
            return []
        return self._default_order(self._live()).limit(limit).all()

    def list_page(self, query: TagQuery) -> Tuple[List[Tag], int]:
        """Filtered, ordered page of live tags plus the total match count."""
        tag_validator.validate_page_params(
            query.page, query.page_size, settings.TAG_PAGE_SIZE_MAX
        )

        q = self._live()
        if query.name:
            q = q.filter(Tag.name == query.name)
        if query.slug:
            q = q.filter(Tag.slug == query.slug)
        if query.search_text:
            q = q.filter(Tag.name.contains(query.search_text, autoescape=True))
        if query.min_use_count is not None and query.min_use_count > 0:
            q = q.filter(Tag.use_count >= query.min_use_count)
        if query.only_popular:
            q = q.filter(Tag.use_count > 0)

        total = q.count()

        if query.sort_field:
            column = SORT_COLUMNS[query.sort_field]
            ordered = column.asc() if query.sort_order == SortOrder.ASC else column.desc()
            q = q.order_by(ordered, Tag.id.asc())
        else:
            q = self._default_order(q)

        offset = (query.page - 1) * query.page_size
        items = q.offset(offset).limit(query.page_size).all()
        return items, total

    def list_by_article(self, article_id: int) -> List[Tag]:
        """Live tags attached to an article, in attachment order."""
        tag_validator.validate_id(article_id, "article_id")
        return (
            self._live()
            .join(ArticleTag, ArticleTag.tag_id == Tag.id)
            .filter(ArticleTag.article_id == article_id)
            .order_by(ArticleTag.created_at.asc(), ArticleTag.id.asc())
            .all()
        )

    def list_by_ids(self, tag_ids: Iterable[int]) -> List[Tag]:
        """Live tags for ``tag_ids``, returned in the order of ``tag_ids``."""
        ids = tag_validator.unique_positive_ids(tag_ids)
        if not ids:
            return []
        by_id = {tag.id: tag for tag in self._live().filter(Tag.id.in_(ids)).all()}
        return [by_id[tag_id] for tag_id in ids if tag_id in by_id]

    def list_unused(self) -> List[Tag]:
        return (
            self._live()
            .filter(Tag.use_count == 0)
            .order_by(Tag.created_at.desc(), Tag.id.desc())
            .all()
        )

    def count_tags(self) -> int:
        return self._live().count()

    def count_used_tags(self) -> int:
        return self._live().filter(Tag.use_count > 0).count()

    def exists_by_id(self, tag_id: int) -> bool:
        if not isinstance(tag_id, int) or tag_id <= 0:
            return False
        return self._live().filter(Tag.id == tag_id).first() is not None

    def exists_by_name(self, name: str, exclude_id: Optional[int] = None) -> bool:
        if tag_validator.is_blank(name):
            return False
        q = self._live().filter(Tag.name == name)
        if exclude_id is not None:
            q = q.filter(Tag.id != exclude_id)
        return q.first() is not None

    def exists_by_slug(self, slug: str, exclude_id: Optional[int] = None) -> bool:
        if tag_validator.is_blank(slug):
            return False
        q = self._live().filter(Tag.slug == slug)
        if exclude_id is not None:
            q = q.filter(Tag.id != exclude_id)
        return q.first() is not None
