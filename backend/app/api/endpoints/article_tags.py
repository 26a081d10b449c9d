from fastapi import APIRouter, Body, Depends, Query, Request
from sqlalchemy.orm import Session
from typing import List, Optional
from slowapi import Limiter
from slowapi.util import get_remote_address
import logging

from app.core.config import settings
from app.core.database import get_db
from app.schemas.article_tag import CountResponse, OperationResult
from app.schemas.tag import ExistsResponse
from app.services.association_manager import AssociationManager

logger = logging.getLogger(__name__)
router = APIRouter()
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)


@router.post("/add", response_model=OperationResult)
@limiter.limit(settings.RATE_LIMIT_WRITE)
def add_tags_to_article(
    request: Request,
    article_id: int = Query(..., description="Article ID"),
    tag_ids: List[int] = Body(..., description="Tag IDs to attach"),
    db: Session = Depends(get_db),
):
    """
    Attach tags to an article.

    - Tags already attached are skipped
    - Duplicate ids in the body are attached once
    - Use counts are not changed; call /api/tags/increment separately
    """
    return {"success": AssociationManager(db).add_tags(article_id, tag_ids)}


@router.post("/remove", response_model=OperationResult)
@limiter.limit(settings.RATE_LIMIT_WRITE)
def remove_tags_from_article(
    request: Request,
    article_id: int = Query(..., description="Article ID"),
    tag_ids: List[int] = Body(..., description="Tag IDs to detach"),
    db: Session = Depends(get_db),
):
    """Detach tags from an article. Tags that were not attached are ignored."""
    return {"success": AssociationManager(db).remove_tags(article_id, tag_ids)}


@router.post("/update", response_model=OperationResult)
@limiter.limit(settings.RATE_LIMIT_WRITE)
def replace_article_tags(
    request: Request,
    article_id: int = Query(..., description="Article ID"),
    tag_ids: List[int] = Body(..., description="Complete new tag set"),
    db: Session = Depends(get_db),
):
    """Replace all tags of an article. An empty list removes every tag."""
    return {"success": AssociationManager(db).replace_tags(article_id, tag_ids)}


@router.post("/remove-all", response_model=OperationResult)
@limiter.limit(settings.RATE_LIMIT_WRITE)
def remove_all_tags_from_article(
    request: Request,
    article_id: int = Query(..., description="Article ID"),
    db: Session = Depends(get_db),
):
    return {"success": AssociationManager(db).remove_all_for_article(article_id)}


@router.post("/remove-all-for-tag", response_model=OperationResult)
@limiter.limit(settings.RATE_LIMIT_WRITE)
def remove_tag_from_all_articles(
    request: Request,
    tag_id: int = Query(..., description="Tag ID"),
    db: Session = Depends(get_db),
):
    return {"success": AssociationManager(db).remove_all_for_tag(tag_id)}


@router.get("/tags", response_model=List[int])
def get_article_tag_ids(
    article_id: int = Query(..., description="Article ID"),
    db: Session = Depends(get_db),
):
    """IDs of the live tags attached to an article."""
    return AssociationManager(db).tag_ids_for_article(article_id)


@router.get("/articles", response_model=List[int])
def get_tag_article_ids(
    tag_id: int = Query(..., description="Tag ID"),
    db: Session = Depends(get_db),
):
    return AssociationManager(db).article_ids_for_tag(tag_id)


@router.get("/exists", response_model=ExistsResponse)
def article_tag_exists(
    article_id: int = Query(...),
    tag_id: int = Query(...),
    db: Session = Depends(get_db),
):
    return {"exists": AssociationManager(db).exists_relation(article_id, tag_id)}


@router.get("/count/tags", response_model=CountResponse)
def count_article_tags(
    article_id: int = Query(..., description="Article ID"),
    db: Session = Depends(get_db),
):
    return {"count": AssociationManager(db).count_tags_for_article(article_id)}


@router.get("/count/articles", response_model=CountResponse)
def count_tag_articles(
    tag_id: int = Query(..., description="Tag ID"),
    db: Session = Depends(get_db),
):
    return {"count": AssociationManager(db).count_articles_for_tag(tag_id)}


@router.get("/popular", response_model=List[int])
def get_popular_tag_ids(
    limit: Optional[int] = Query(None, description="Number of tags (default 10)"),
    db: Session = Depends(get_db),
):
    """Tag IDs ranked by the number of articles linked to them."""
    return AssociationManager(db).popular_tag_ids(limit)
