"""Tests for TagStore."""

import pytest
from datetime import datetime, timedelta

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.article_tag import ArticleTag
from app.models.tag import Tag
from app.schemas.tag import SortOrder, TagQuery, TagSortField
from app.services.tag_store import TagStore


@pytest.mark.unit
class TestTagCreate:
    def test_create_tag(self, db_session):
        store = TagStore(db_session)

        tag_id = store.create("Java", "java", "#FF5722")

        assert tag_id > 0
        tag = store.get_by_id(tag_id)
        assert tag.name == "Java"
        assert tag.slug == "java"
        assert tag.color == "#FF5722"
        assert tag.use_count == 0
        assert tag.is_deleted is False

    def test_create_without_color(self, db_session):
        tag_id = TagStore(db_session).create("Go", "go")

        assert TagStore(db_session).get_by_id(tag_id).color is None

    def test_create_invalid_slug(self, db_session):
        with pytest.raises(ValidationError):
            TagStore(db_session).create("Java", "Java Lang")

        assert db_session.query(Tag).count() == 0

    def test_create_duplicate_name(self, db_session, java_tag):
        with pytest.raises(ConflictError, match="name"):
            TagStore(db_session).create("Java", "java-lang")

    def test_create_duplicate_slug(self, db_session, java_tag):
        with pytest.raises(ConflictError, match="slug"):
            TagStore(db_session).create("JavaLang", "java")

    def test_create_reuses_name_of_deleted_tag(self, db_session, deleted_tag):
        tag_id = TagStore(db_session).create("Legacy", "legacy")

        assert tag_id != deleted_tag.id
        assert TagStore(db_session).get_by_slug("legacy").id == tag_id


@pytest.mark.unit
class TestTagUpdate:
    def test_update_name_keeps_slug(self, db_session, python_tag):
        store = TagStore(db_session)

        tag = store.update(python_tag.id, name="Python3", color="#306998")

        assert tag.name == "Python3"
        assert tag.slug == "python"
        assert tag.color == "#306998"

    def test_update_to_own_name_is_allowed(self, db_session, java_tag):
        tag = TagStore(db_session).update(java_tag.id, name="Java", slug="java")

        assert tag.name == "Java"

    def test_update_conflicting_name(self, db_session, java_tag, python_tag):
        with pytest.raises(ConflictError):
            TagStore(db_session).update(python_tag.id, name="Java")

    def test_update_conflicting_slug(self, db_session, java_tag, python_tag):
        with pytest.raises(ConflictError):
            TagStore(db_session).update(python_tag.id, slug="java")

    def test_update_invalid_color(self, db_session, java_tag):
        with pytest.raises(ValidationError):
            TagStore(db_session).update(java_tag.id, color="not a color")

    def test_update_empty_color_clears_it(self, db_session, java_tag):
        tag = TagStore(db_session).update(java_tag.id, color="")

        assert tag.color is None

    @pytest.mark.parametrize("fields", [{"name": ""}, {"slug": "  "}])
    def test_update_blank_name_or_slug(self, db_session, java_tag, fields):
        with pytest.raises(ValidationError, match="cannot be empty"):
            TagStore(db_session).update(java_tag.id, **fields)

        db_session.expire_all()
        tag = db_session.query(Tag).filter(Tag.id == java_tag.id).one()
        assert tag.name == "Java"
        assert tag.slug == "java"

    def test_update_missing_tag(self, db_session):
        with pytest.raises(NotFoundError):
            TagStore(db_session).update(999, name="Nope")

    def test_update_deleted_tag(self, db_session, deleted_tag):
        with pytest.raises(NotFoundError):
            TagStore(db_session).update(deleted_tag.id, name="Revived")


@pytest.mark.unit
class TestTagDeleteAndRead:
    def test_soft_delete(self, db_session, java_tag):
        store = TagStore(db_session)

        store.soft_delete(java_tag.id)

        db_session.refresh(java_tag)
        assert java_tag.is_deleted is True
        assert java_tag.deleted_at is not None
        with pytest.raises(NotFoundError):
            store.get_by_id(java_tag.id)

    def test_soft_delete_keeps_associations(self, db_session, java_tag, tagged_article):
        TagStore(db_session).soft_delete(java_tag.id)

        assert (
            db_session.query(ArticleTag).filter(ArticleTag.tag_id == java_tag.id).count()
            == 1
        )

    def test_soft_delete_missing_tag(self, db_session):
        with pytest.raises(NotFoundError):
            TagStore(db_session).soft_delete(42)

    def test_soft_delete_twice(self, db_session, java_tag):
        store = TagStore(db_session)
        store.soft_delete(java_tag.id)

        with pytest.raises(NotFoundError):
            store.soft_delete(java_tag.id)

    def test_get_by_slug(self, db_session, spring_tag):
        assert TagStore(db_session).get_by_slug("spring").id == spring_tag.id

    def test_get_by_slug_deleted(self, db_session, deleted_tag):
        with pytest.raises(NotFoundError):
            TagStore(db_session).get_by_slug("legacy")

    def test_get_by_invalid_id(self, db_session):
        with pytest.raises(ValidationError):
            TagStore(db_session).get_by_id(0)

    def test_exists_checks(self, db_session, java_tag, deleted_tag):
        store = TagStore(db_session)

        assert store.exists_by_name("Java") is True
        assert store.exists_by_name("Java", exclude_id=java_tag.id) is False
        assert store.exists_by_slug("java") is True
        assert store.exists_by_slug("legacy") is False
        assert store.exists_by_name("") is False
        assert store.exists_by_id(java_tag.id) is True
        assert store.exists_by_id(deleted_tag.id) is False
        assert store.exists_by_id(-1) is False

    def test_list_all_excludes_deleted(self, db_session, java_tag, deleted_tag):
        tags = TagStore(db_session).list_all()

        assert [t.id for t in tags] == [java_tag.id]


@pytest.mark.unit
class TestTagListings:
    @pytest.fixture
    def ranked_tags(self, db_session):
        now = datetime.utcnow()
        tags = [
            Tag(name="Old", slug="old", use_count=5, created_at=now - timedelta(days=3)),
            Tag(name="New", slug="new", use_count=5, created_at=now - timedelta(days=1)),
            Tag(name="Top", slug="top", use_count=9, created_at=now - timedelta(days=2)),
            Tag(name="Zero", slug="zero", use_count=0, created_at=now),
            Tag(name="Gone", slug="gone", use_count=50, is_deleted=True, created_at=now),
        ]
        db_session.add_all(tags)
        db_session.commit()
        return {tag.slug: tag for tag in tags}

    def test_list_by_use_count_desc(self, db_session, ranked_tags):
        tags = TagStore(db_session).list_by_use_count_desc(3)

        assert [t.slug for t in tags] == ["top", "new", "old"]

    def test_list_by_use_count_non_positive_limit(self, db_session, ranked_tags):
        assert TagStore(db_session).list_by_use_count_desc(0) == []

    def test_list_unused(self, db_session, ranked_tags):
        assert [t.slug for t in TagStore(db_session).list_unused()] == ["zero"]

    def test_counts(self, db_session, ranked_tags):
        store = TagStore(db_session)

        assert store.count_tags() == 4
        assert store.count_used_tags() == 3

    def test_list_page_default_order(self, db_session, ranked_tags):
        items, total = TagStore(db_session).list_page(TagQuery(page=1, page_size=2))

        assert total == 4
        assert [t.slug for t in items] == ["top", "new"]

    def test_list_page_second_page(self, db_session, ranked_tags):
        items, total = TagStore(db_session).list_page(TagQuery(page=2, page_size=2))

        assert total == 4
        assert [t.slug for t in items] == ["old", "zero"]

    def test_list_page_sorted_by_name(self, db_session, ranked_tags):
        query = TagQuery(sort_field=TagSortField.NAME, sort_order=SortOrder.ASC)

        items, _ = TagStore(db_session).list_page(query)

        assert [t.name for t in items] == ["New", "Old", "Top", "Zero"]

    def test_list_page_filters(self, db_session, ranked_tags):
        store = TagStore(db_session)

        popular, total = store.list_page(TagQuery(only_popular=True))
        assert total == 3
        assert "zero" not in [t.slug for t in popular]

        at_least_six, _ = store.list_page(TagQuery(min_use_count=6))
        assert [t.slug for t in at_least_six] == ["top"]

        search, _ = store.list_page(TagQuery(search_text="e"))
        assert sorted(t.slug for t in search) == ["new", "zero"]

        exact, _ = store.list_page(TagQuery(slug="old"))
        assert [t.name for t in exact] == ["Old"]

    def test_list_page_rejects_large_page_size(self, db_session):
        with pytest.raises(ValidationError):
            TagStore(db_session).list_page(TagQuery(page_size=500))

    def test_list_by_article_skips_deleted_tags(
        self, db_session, java_tag, python_tag, tagged_article
    ):
        store = TagStore(db_session)
        store.soft_delete(python_tag.id)

        tags = store.list_by_article(tagged_article)

        assert [t.id for t in tags] == [java_tag.id]

    def test_list_by_ids_preserves_order(self, db_session, java_tag, python_tag):
        tags = TagStore(db_session).list_by_ids([python_tag.id, 999, java_tag.id])

        assert [t.id for t in tags] == [python_tag.id, java_tag.id]

    def test_get_by_id_returns_use_count(self, db_session, tag_factory):
        tag = tag_factory("Rust", "rust", use_count=3)

        assert TagStore(db_session).get_by_id(tag.id).use_count == 3
