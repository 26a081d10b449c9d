from fastapi import APIRouter, Body, Depends, Query, Request, status
from sqlalchemy.orm import Session
from typing import List, Optional
from math import ceil
from slowapi import Limiter
from slowapi.util import get_remote_address
import logging

from app.core.config import settings
from app.core.database import get_db
from app.schemas.tag import (
    ExistsResponse,
    SortOrder,
    Tag as TagSchema,
    TagCreate,
    TagCreated,
    TagPage,
    TagQuery,
    TagSortField,
    TagStats,
    TagUpdate,
)
from app.schemas.article_tag import OperationResult
from app.services.popularity_ranker import PopularityRanker
from app.services.tag_store import TagStore
from app.services.usage_counter import UsageCounter

logger = logging.getLogger(__name__)
router = APIRouter()
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)


@router.post("/", response_model=TagCreated, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.RATE_LIMIT_WRITE)
def create_tag(
    request: Request,
    tag: TagCreate,
    db: Session = Depends(get_db),
):
    """Create a tag. Name and slug must be unused among live tags."""
    tag_id = TagStore(db).create(tag.name, tag.slug, tag.color)
    return {"id": tag_id}


@router.get("/", response_model=List[TagSchema])
def list_tags(db: Session = Depends(get_db)):
    """All live tags, most used first."""
    return TagStore(db).list_all()


@router.get("/page", response_model=TagPage)
def list_tags_page(
    page: int = Query(1, description="Page number, starting at 1"),
    page_size: int = Query(10, description="Tags per page"),
    name: Optional[str] = Query(None, description="Exact tag name"),
    slug: Optional[str] = Query(None, description="Exact tag slug"),
    search_text: Optional[str] = Query(None, description="Substring of the tag name"),
    min_use_count: Optional[int] = Query(None, description="Minimum use count"),
    only_popular: bool = Query(False, description="Only tags with use count > 0"),
    sort_field: Optional[TagSortField] = Query(None),
    sort_order: SortOrder = Query(SortOrder.DESC),
    db: Session = Depends(get_db),
):
    """
    Filtered, paginated tag listing.

    Without ``sort_field`` tags are ordered by use count, then newest first.
    """
    query = TagQuery(
        page=page,
        page_size=page_size,
        name=name,
        slug=slug,
        search_text=search_text,
        min_use_count=min_use_count,
        only_popular=only_popular,
        sort_field=sort_field,
        sort_order=sort_order,
    )
    tags, total = TagStore(db).list_page(query)
    return TagPage(
        data=tags,
        total=total,
        page=page,
        page_size=page_size,
        total_pages=ceil(total / page_size),
    )


@router.get("/popular", response_model=List[TagSchema])
def list_popular_tags(
    limit: Optional[int] = Query(None, description="Number of tags (default 10)"),
    db: Session = Depends(get_db),
):
    """Tags ranked by their use count."""
    return PopularityRanker(db).by_use_count(limit)


@router.get("/popular/associations", response_model=List[TagSchema])
def list_popular_tags_by_associations(
    limit: Optional[int] = Query(None, description="Number of tags (default 10)"),
    db: Session = Depends(get_db),
):
    """Tags ranked by how many articles currently carry them."""
    return PopularityRanker(db).by_association_count_tags(limit)


@router.get("/unused", response_model=List[TagSchema])
def list_unused_tags(db: Session = Depends(get_db)):
    return TagStore(db).list_unused()


@router.get("/stats", response_model=TagStats)
def get_tag_stats(db: Session = Depends(get_db)):
    store = TagStore(db)
    total = store.count_tags()
    used = store.count_used_tags()
    return TagStats(total=total, used=used, unused=total - used)


@router.get("/exists/name", response_model=ExistsResponse)
def tag_name_exists(name: str = Query(...), db: Session = Depends(get_db)):
    return {"exists": TagStore(db).exists_by_name(name)}


@router.get("/exists/slug", response_model=ExistsResponse)
def tag_slug_exists(slug: str = Query(...), db: Session = Depends(get_db)):
    return {"exists": TagStore(db).exists_by_slug(slug)}


@router.get("/article/{article_id}", response_model=List[TagSchema])
def list_article_tags(article_id: int, db: Session = Depends(get_db)):
    """Live tags attached to an article."""
    return TagStore(db).list_by_article(article_id)


@router.get("/slug/{slug}", response_model=TagSchema)
def get_tag_by_slug(slug: str, db: Session = Depends(get_db)):
    return TagStore(db).get_by_slug(slug)


@router.post("/increment", response_model=OperationResult)
@limiter.limit(settings.RATE_LIMIT_WRITE)
def increment_use_count(
    request: Request,
    tag_ids: List[int] = Body(...),
    db: Session = Depends(get_db),
):
    """Add one to the use count of each tag. Unknown ids are ignored."""
    UsageCounter(db).increment(tag_ids)
    return {"success": True}


@router.post("/decrement", response_model=OperationResult)
@limiter.limit(settings.RATE_LIMIT_WRITE)
def decrement_use_count(
    request: Request,
    tag_ids: List[int] = Body(...),
    db: Session = Depends(get_db),
):
    """Subtract one from the use count of each tag, stopping at zero."""
    UsageCounter(db).decrement(tag_ids)
    return {"success": True}


@router.get("/{tag_id}", response_model=TagSchema)
def get_tag(tag_id: int, db: Session = Depends(get_db)):
    return TagStore(db).get_by_id(tag_id)


@router.put("/{tag_id}", response_model=TagSchema)
@limiter.limit(settings.RATE_LIMIT_WRITE)
def update_tag(
    request: Request,
    tag_id: int,
    tag_update: TagUpdate,
    db: Session = Depends(get_db),
):
    """Update name, slug or color. Omitted fields are left unchanged."""
    update_data = tag_update.model_dump(exclude_unset=True)
    return TagStore(db).update(tag_id, **update_data)


@router.delete("/{tag_id}")
@limiter.limit(settings.RATE_LIMIT_WRITE)
def delete_tag(
    request: Request,
    tag_id: int,
    db: Session = Depends(get_db),
):
    """
    Soft delete a tag.

    The tag disappears from every listing but its article links are kept;
    they are hidden from article tag lists.
    """
    TagStore(db).soft_delete(tag_id)
    return {"message": "Tag deleted successfully"}
