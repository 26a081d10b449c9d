"""
Usage counter - batch adjustments of Tag.use_count.

Called by the article workflow alongside (not from) AssociationManager, so
use_count may drift from the live association count.
"""

import logging
from typing import List, Optional
from sqlalchemy.orm import Session

from app.core.database import transaction
from app.core.logging_config import log_tag_event
from app.services.tag_store import TagStore

logger = logging.getLogger(__name__)


class UsageCounter:
    def __init__(self, db: Session):
        self.db = db
        self.tags = TagStore(db)

    def increment(self, tag_ids: Optional[List[int]]) -> None:
        if not tag_ids:
            return
        with transaction(self.db):
            updated = self.tags.increment_use_count(tag_ids)
        log_tag_event(
            "tag.use_count.incremented",
            f"Incremented use count of {updated} tags",
            tag_ids=list(tag_ids),
        )

    def decrement(self, tag_ids: Optional[List[int]]) -> None:
        if not tag_ids:
            return
        with transaction(self.db):
            updated = self.tags.decrement_use_count(tag_ids)
        log_tag_event(
            "tag.use_count.decremented",
            f"Decremented use count of {updated} tags",
            tag_ids=list(tag_ids),
        )
