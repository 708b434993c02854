"""Review ledger: per-question review history persisted as one blob."""
import json
import logging
import sqlite3
from datetime import datetime
from typing import Optional

from flashquiz.config import DEFAULT_DB_PATH, REVIEW_DATA_KEY
from flashquiz.db import delete_value, read_value, write_value
from flashquiz.models import ReviewRecord
from flashquiz.scheduler import grade

logger = logging.getLogger(__name__)


def serialize_ledger(mapping: dict[str, ReviewRecord]) -> str:
    return json.dumps({qid: rec.to_dict() for qid, rec in mapping.items()})


def deserialize_ledger(blob: str) -> dict[str, ReviewRecord]:
    data = json.loads(blob)
    if not isinstance(data, dict):
        raise ValueError("review ledger must be a JSON object")
    return {str(qid): ReviewRecord.from_dict(rec) for qid, rec in data.items()}


class ReviewLedger:
    """Maps question identity to its ReviewRecord.

    The mapping is always read and written whole. Unreadable or corrupt
    data loads as an empty ledger.
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH, key: str = REVIEW_DATA_KEY):
        self.db_path = db_path
        self.key = key

    def load(self) -> dict[str, ReviewRecord]:
        try:
            blob = read_value(self.db_path, self.key)
        except sqlite3.Error as e:
            logger.warning("Review data unreadable, starting with empty history: %s", e)
            return {}
        if blob is None:
            return {}
        try:
            return deserialize_ledger(blob)
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("Review data could not be decoded, starting with empty history: %s", e)
            return {}

    def save(self, mapping: dict[str, ReviewRecord]) -> bool:
        try:
            blob = serialize_ledger(mapping)
            write_value(self.db_path, self.key, blob, datetime.now().isoformat())
        except (sqlite3.Error, OSError, TypeError, ValueError, AttributeError) as e:
            logger.error("Failed to save review data: %s", e)
            return False
        return True

    def get(self, question_id: str) -> Optional[ReviewRecord]:
        return self.load().get(question_id)

    def record_review(self, question_id: str, quality, now: Optional[datetime] = None) -> ReviewRecord:
        """Grade question_id with quality and persist the updated ledger."""
        mapping = self.load()
        record = grade(mapping.get(question_id), quality, now=now, question_id=question_id)
        mapping[question_id] = record
        if self.save(mapping):
            logger.info(
                "Reviewed %r: count=%d interval=%d ease=%.2f",
                question_id, record.review_count, record.interval, record.ease_factor,
            )
        return record

    def clear(self) -> None:
        delete_value(self.db_path, self.key)
        logger.info("Review history cleared")
