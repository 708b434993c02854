"""Tests for the review ledger, including cold-start recovery."""
import logging
import sqlite3
from datetime import datetime, timedelta
from unittest.mock import patch

import pytest

from flashquiz.config import REVIEW_DATA_KEY
from flashquiz.db import read_value, write_value
from flashquiz.ledger import ReviewLedger, deserialize_ledger, serialize_ledger
from flashquiz.models import ReviewRecord

NOW = datetime(2026, 5, 1, 8, 30)


def test_load_missing_store_is_empty(ledger):
    assert ledger.load() == {}


def test_save_and_load(ledger):
    mapping = {"Q1?": ReviewRecord("Q1?", NOW, interval=6, ease_factor=2.6, review_count=2)}
    assert ledger.save(mapping) is True
    loaded = ledger.load()
    assert loaded == mapping


def test_save_writes_one_blob_under_namespace_key(ledger, tmp_db):
    ledger.save({"Q1?": ReviewRecord("Q1?", NOW), "Q2?": ReviewRecord("Q2?", NOW)})
    blob = read_value(tmp_db, REVIEW_DATA_KEY)
    assert set(deserialize_ledger(blob)) == {"Q1?", "Q2?"}


def test_get_returns_record_or_none(ledger):
    ledger.save({"Q1?": ReviewRecord("Q1?", NOW)})
    assert ledger.get("Q1?").question_id == "Q1?"
    assert ledger.get("Q2?") is None


def test_load_corrupt_json_is_cold_start(ledger, tmp_db, caplog):
    write_value(tmp_db, REVIEW_DATA_KEY, "{not json", NOW.isoformat())
    with caplog.at_level(logging.WARNING, logger="flashquiz.ledger"):
        assert ledger.load() == {}
    assert "could not be decoded" in caplog.text


@pytest.mark.parametrize("blob", [
    "[1, 2, 3]",
    '{"Q?": {"questionId": "Q?"}}',
    '{"Q?": {"questionId": "Q?", "lastReviewed": "yesterday", "interval": 1, "easeFactor": 2.5, "reviewCount": 1}}',
    '{"Q?": "oops"}',
    '{"Q?": {"questionId": "Q?", "lastReviewed": "2026-01-01T00:00:00+00:00", "interval": 1, "easeFactor": 2.5, "reviewCount": 1}}',
    '{"Q?": {"questionId": "Q?", "lastReviewed": "2026-01-01T00:00:00", "interval": 0, "easeFactor": 2.5, "reviewCount": 1}}',
    '{"Q?": {"questionId": "Q?", "lastReviewed": "2026-01-01T00:00:00", "interval": 1, "easeFactor": 1.2, "reviewCount": 1}}',
    '{"Q?": {"questionId": "Q?", "lastReviewed": "2026-01-01T00:00:00", "interval": 1, "easeFactor": NaN, "reviewCount": 1}}',
    '{"Q?": {"questionId": "Q?", "lastReviewed": "2026-01-01T00:00:00", "interval": 1, "easeFactor": 2.5, "reviewCount": -1}}',
])
def test_load_wrong_shape_is_cold_start(ledger, tmp_db, blob):
    write_value(tmp_db, REVIEW_DATA_KEY, blob, NOW.isoformat())
    assert ledger.load() == {}


def test_load_unreadable_store_is_cold_start(tmp_db):
    conn = sqlite3.connect(tmp_db)
    conn.execute("CREATE TABLE unrelated (x TEXT)")
    conn.commit()
    conn.close()
    assert ReviewLedger(tmp_db).load() == {}


def test_load_not_a_database_is_cold_start(tmp_path):
    path = tmp_path / "garbage.db"
    path.write_bytes(b"this is definitely not sqlite" * 100)
    assert ReviewLedger(str(path)).load() == {}


def test_save_failure_is_logged_not_raised(ledger, caplog):
    with patch("flashquiz.ledger.write_value", side_effect=sqlite3.OperationalError("disk full")):
        with caplog.at_level(logging.ERROR, logger="flashquiz.ledger"):
            assert ledger.save({"Q1?": ReviewRecord("Q1?", NOW)}) is False
    assert "Failed to save review data" in caplog.text


def test_record_review_creates_record_lazily(ledger):
    assert ledger.get("Q1?") is None
    record = ledger.record_review("Q1?", 5, now=NOW)
    assert record.review_count == 1
    assert record.interval == 1
    assert record.last_reviewed == NOW
    assert ledger.get("Q1?") == record


def test_record_review_updates_existing(ledger):
    ledger.record_review("Q1?", 5, now=NOW)
    later = NOW + timedelta(days=1)
    record = ledger.record_review("Q1?", 3, now=later)
    assert record.review_count == 2
    assert record.interval == 6
    assert ledger.get("Q1?").last_reviewed == later


def test_record_review_keeps_other_entries(ledger):
    ledger.record_review("Q1?", 5, now=NOW)
    ledger.record_review("Q2?", 1, now=NOW)
    assert set(ledger.load()) == {"Q1?", "Q2?"}


def test_record_review_rejects_bad_quality(ledger):
    with pytest.raises(ValueError):
        ledger.record_review("Q1?", 4, now=NOW)
    assert ledger.load() == {}


def test_record_review_survives_save_failure(ledger):
    with patch("flashquiz.ledger.write_value", side_effect=OSError("read-only")):
        record = ledger.record_review("Q1?", 5, now=NOW)
    assert record.review_count == 1
    assert ledger.load() == {}


def test_clear(ledger):
    ledger.record_review("Q1?", 5, now=NOW)
    ledger.clear()
    assert ledger.load() == {}


def test_serialize_round_trip():
    mapping = {"Q?": ReviewRecord("Q?", NOW, interval=15, ease_factor=2.7, review_count=3)}
    assert deserialize_ledger(serialize_ledger(mapping)) == mapping


def test_timezone_aware_record_does_not_break_due_selection(ledger, tmp_db, questions):
    from flashquiz.questions import QuestionRepository
    from flashquiz.scheduler import Scheduler

    blob = ('{"%s": {"questionId": "%s", "lastReviewed": "2026-01-01T00:00:00+00:00", '
            '"interval": 1, "easeFactor": 2.5, "reviewCount": 1}}') % (questions[0].prompt, questions[0].prompt)
    write_value(tmp_db, REVIEW_DATA_KEY, blob, NOW.isoformat())
    scheduler = Scheduler(QuestionRepository(questions), ledger)
    assert len(scheduler.due_questions(now=NOW)) == len(questions)
