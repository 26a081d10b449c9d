import json
import logging
import pytest

from app.core.logging_config import (
    AUDIT_LOGGER_NAME,
    BlogJsonFormatter,
    CorrelationIdFilter,
    correlation_id_var,
    log_tag_event,
)
from app.services.tag_store import TagStore


@pytest.mark.unit
class TestAuditLogging:
    def test_log_tag_event_fields(self, caplog):
        with caplog.at_level(logging.INFO, logger=AUDIT_LOGGER_NAME):
            log_tag_event("tag.created", "Created tag 3", tag_id=3)

        record = caplog.records[-1]
        assert record.name == AUDIT_LOGGER_NAME
        assert record.event_type == "tag.created"
        assert record.event_category == "tags"
        assert record.tag_id == 3

    def test_store_write_emits_event(self, db_session, caplog):
        with caplog.at_level(logging.INFO, logger=AUDIT_LOGGER_NAME):
            tag_id = TagStore(db_session).create("Kotlin", "kotlin")

        events = [r for r in caplog.records if getattr(r, "event_type", None) == "tag.created"]
        assert len(events) == 1
        assert events[0].tag_id == tag_id

    def test_json_formatter_includes_correlation_id(self):
        token = correlation_id_var.set("req-42")
        try:
            record = logging.LogRecord(
                "blog.audit", logging.INFO, __file__, 10, "hello", None, None
            )
            CorrelationIdFilter().filter(record)
            output = json.loads(BlogJsonFormatter("%(message)s").format(record))
        finally:
            correlation_id_var.reset(token)

        assert output["message"] == "hello"
        assert output["correlation_id"] == "req-42"
        assert output["level"] == "INFO"
        assert output["source"]["line"] == 10

    def test_use_count_update_logs_ids(self, db_session, java_tag, caplog):
        with caplog.at_level(logging.DEBUG, logger="app.services.tag_store"):
            TagStore(db_session).increment_use_count([java_tag.id])

        assert any(
            r.name == "app.services.tag_store" and str(java_tag.id) in r.getMessage()
            for r in caplog.records
        )
