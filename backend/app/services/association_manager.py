"""
Association manager - attaches, detaches and replaces the tags of an article.

Every mutating call runs in one transaction: the existence check and insert of
``add_tags`` and the delete-then-insert of ``replace_tags`` commit together or
not at all. Tag use counts are not touched here; see UsageCounter.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import transaction
from app.core.logging_config import log_tag_event
from app.services import tag_validator
from app.services.article_tag_store import ArticleTagStore

logger = logging.getLogger(__name__)


class AssociationManager:
    """Orchestrates article/tag links on top of ArticleTagStore."""

    def __init__(self, db: Session):
        self.db = db
        self.store = ArticleTagStore(db)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_tags(self, article_id: int, tag_ids: Optional[List[int]]) -> bool:
        """
        Attach tags to an article. Idempotent: already-attached tags and
        duplicates in ``tag_ids`` are skipped, and an empty list is a no-op.
        """
        tag_validator.validate_id(article_id, "article_id")
        if not tag_ids:
            return True

        with transaction(self.db):
            inserted = self._add_tags(article_id, tag_ids)

        if inserted:
            log_tag_event(
                "article_tag.added",
                f"Attached {inserted} tags to article {article_id}",
                article_id=article_id,
                tag_ids=list(tag_ids),
            )
        return True

    def remove_tags(self, article_id: int, tag_ids: Optional[List[int]]) -> bool:
        """Detach tags from an article. Missing links are not an error."""
        tag_validator.validate_id(article_id, "article_id")
        unique_ids = tag_validator.unique_positive_ids(tag_ids)
        if not unique_ids:
            return True

        with transaction(self.db):
            deleted = self.store.delete_by_article_and_tags(article_id, unique_ids)

        log_tag_event(
            "article_tag.removed",
            f"Detached {deleted} tags from article {article_id}",
            article_id=article_id,
            tag_ids=unique_ids,
        )
        return True

    def replace_tags(self, article_id: int, new_tag_ids: Optional[List[int]]) -> bool:
        """
        Make ``new_tag_ids`` the article's complete tag set.

        All existing links are deleted and the new set inserted, so every
        retained tag gets a fresh ``created_at``.
        """
        tag_validator.validate_id(article_id, "article_id")

        with transaction(self.db):
            removed = self.store.delete_by_article(article_id)
            inserted = self._add_tags(article_id, new_tag_ids) if new_tag_ids else 0

        log_tag_event(
            "article_tag.replaced",
            f"Replaced tags of article {article_id} ({removed} removed, {inserted} added)",
            article_id=article_id,
            tag_ids=list(new_tag_ids or []),
        )
        return True

    def remove_all_for_article(self, article_id: int) -> bool:
        tag_validator.validate_id(article_id, "article_id")
        with transaction(self.db):
            deleted = self.store.delete_by_article(article_id)
        log_tag_event(
            "article_tag.cleared",
            f"Removed all {deleted} tags from article {article_id}",
            article_id=article_id,
        )
        return True

    def remove_all_for_tag(self, tag_id: int) -> bool:
        tag_validator.validate_id(tag_id, "tag_id")
        with transaction(self.db):
            deleted = self.store.delete_by_tag(tag_id)
        log_tag_event(
            "article_tag.cleared",
            f"Removed tag {tag_id} from {deleted} articles",
            tag_id=tag_id,
        )
        return True

    def _add_tags(self, article_id: int, tag_ids: Iterable[int]) -> int:
        """Insert missing links inside the caller's transaction."""
        to_add = [
            tag_id
            for tag_id in tag_validator.unique_positive_ids(tag_ids)
            if not self.store.exists(article_id, tag_id)
        ]
        if not to_add:
            return 0

        created_at = datetime.utcnow()
        try:
            with self.db.begin_nested():
                return self.store.insert_many(
                    [(article_id, tag_id) for tag_id in to_add], created_at
                )
        except IntegrityError:
            # A concurrent writer inserted some of the same links
            logger.info(
                f"Duplicate links while tagging article {article_id}, retrying one by one"
            )

        inserted = 0
        for tag_id in to_add:
            try:
                with self.db.begin_nested():
                    inserted += self.store.insert_many([(article_id, tag_id)], created_at)
            except IntegrityError:
                logger.debug(f"Link ({article_id}, {tag_id}) already exists, skipping")
        return inserted

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def tag_ids_for_article(self, article_id: int) -> List[int]:
        tag_validator.validate_id(article_id, "article_id")
        return self.store.tag_ids_for_article(article_id)

    def article_ids_for_tag(self, tag_id: int) -> List[int]:
        tag_validator.validate_id(tag_id, "tag_id")
        return self.store.article_ids_for_tag(tag_id)

    def exists_relation(self, article_id: int, tag_id: int) -> bool:
        if not isinstance(article_id, int) or article_id <= 0:
            return False
        if not isinstance(tag_id, int) or tag_id <= 0:
            return False
        return self.store.exists(article_id, tag_id)

    def count_tags_for_article(self, article_id: int) -> int:
        tag_validator.validate_id(article_id, "article_id")
        return self.store.count_by_article(article_id)

    def count_articles_for_tag(self, tag_id: int) -> int:
        tag_validator.validate_id(tag_id, "tag_id")
        return self.store.count_by_tag(tag_id)

    def popular_tag_ids(self, limit: Optional[int] = None) -> List[int]:
        if limit is None or limit <= 0:
            limit = settings.POPULAR_TAGS_DEFAULT_LIMIT
        return self.store.popular_tag_ids_by_association_count(limit)
