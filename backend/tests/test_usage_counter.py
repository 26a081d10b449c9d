import pytest

from app.models.tag import Tag
from app.services.usage_counter import UsageCounter


def use_count(db_session, tag_id):
    return db_session.query(Tag.use_count).filter(Tag.id == tag_id).scalar()


@pytest.mark.unit
class TestUsageCounter:
    def test_increment(self, db_session, java_tag, python_tag):
        UsageCounter(db_session).increment([java_tag.id, python_tag.id])

        assert use_count(db_session, java_tag.id) == 1
        assert use_count(db_session, python_tag.id) == 1

    def test_increments_add_up(self, db_session, java_tag):
        counter = UsageCounter(db_session)

        for _ in range(3):
            counter.increment([java_tag.id])

        assert use_count(db_session, java_tag.id) == 3

    def test_duplicate_ids_count_once(self, db_session, java_tag):
        UsageCounter(db_session).increment([java_tag.id, java_tag.id])

        assert use_count(db_session, java_tag.id) == 1

    def test_decrement_stops_at_zero(self, db_session, tag_factory):
        tag = tag_factory("Rust", "rust", use_count=1)
        counter = UsageCounter(db_session)

        counter.decrement([tag.id])
        counter.decrement([tag.id])

        assert use_count(db_session, tag.id) == 0

    def test_increment_then_decrement_adds_up(self, db_session, tag_factory):
        tag = tag_factory("Rust", "rust", use_count=2)
        counter = UsageCounter(db_session)

        for _ in range(3):
            counter.increment([tag.id])
        for _ in range(4):
            counter.decrement([tag.id])

        assert use_count(db_session, tag.id) == 1

    def test_decrement(self, db_session, tag_factory):
        tag = tag_factory("Go", "go", use_count=5)

        UsageCounter(db_session).decrement([tag.id])

        assert use_count(db_session, tag.id) == 4

    @pytest.mark.parametrize("tag_ids", [None, []])
    def test_empty_input_is_noop(self, db_session, tag_factory, tag_ids):
        tag = tag_factory("Go", "go", use_count=2)
        counter = UsageCounter(db_session)

        counter.increment(tag_ids)
        counter.decrement(tag_ids)

        assert use_count(db_session, tag.id) == 2

    def test_unknown_ids_ignored(self, db_session, java_tag):
        UsageCounter(db_session).increment([java_tag.id, 12345, -1])

        assert use_count(db_session, java_tag.id) == 1

    def test_deleted_tags_untouched(self, db_session, tag_factory):
        tag = tag_factory("Old", "old", use_count=4, is_deleted=True)
        counter = UsageCounter(db_session)

        counter.increment([tag.id])
        counter.decrement([tag.id])

        assert use_count(db_session, tag.id) == 4
