"""Spaced repetition scheduling: due checks, grading and question selection."""
import logging
import random
from datetime import datetime, timedelta
from typing import Mapping, Optional

from flashquiz.models import QuestionRecord, QuizSettings, ReviewQuality, ReviewRecord
from flashquiz.sm2 import DEFAULT_EASE_FACTOR, sm2_update

logger = logging.getLogger(__name__)


def is_due(record: ReviewRecord, now: Optional[datetime] = None) -> bool:
    """A reviewed question is due once its interval has fully elapsed."""
    now = now or datetime.now()
    return now >= record.last_reviewed + timedelta(days=record.interval)


def grade(
    record: Optional[ReviewRecord],
    quality,
    now: Optional[datetime] = None,
    question_id: Optional[str] = None,
) -> ReviewRecord:
    """Apply one graded review to record, creating it on first grading."""
    quality = ReviewQuality.parse(quality)
    now = now or datetime.now()
    if record is None:
        if question_id is None:
            raise ValueError("question_id is required to grade a new question")
        record = ReviewRecord(
            question_id=question_id,
            last_reviewed=now,
            interval=1,
            ease_factor=DEFAULT_EASE_FACTOR,
            review_count=0,
        )
    updated = sm2_update(
        quality=int(quality),
        review_count=record.review_count,
        ease_factor=record.ease_factor,
        interval=record.interval,
    )
    record.review_count = updated["review_count"]
    record.ease_factor = updated["ease_factor"]
    record.interval = updated["interval"]
    record.last_reviewed = now
    return record


def _filter_subject(questions, subject: Optional[str]) -> list[QuestionRecord]:
    if subject is None:
        return list(questions)
    return [q for q in questions if q.subject == subject]


def select_due(
    questions,
    ledger: Mapping[str, ReviewRecord],
    subject: Optional[str] = None,
    max_count: Optional[int] = None,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> list[QuestionRecord]:
    """Return due and never-reviewed questions in random order.

    Overdue and new questions share one shuffled pool rather than being
    ordered by urgency, which favours breadth of exposure.
    """
    now = now or datetime.now()
    rng = rng or random.Random()
    pool = _filter_subject(questions, subject)

    due = [q for q in pool if q.identity in ledger and is_due(ledger[q.identity], now)]
    unseen = [q for q in pool if q.identity not in ledger]
    selected = due + unseen
    rng.shuffle(selected)
    if max_count is not None:
        selected = selected[:max(0, max_count)]
    logger.debug("Selected %d due questions (%d overdue, %d new)", len(selected), len(due), len(unseen))
    return selected


def select_random(
    questions,
    subject: Optional[str] = None,
    count: int = 10,
    rng: Optional[random.Random] = None,
) -> list[QuestionRecord]:
    rng = rng or random.Random()
    pool = _filter_subject(questions, subject)
    if not pool:
        return []
    rng.shuffle(pool)
    return pool[:max(0, min(count, len(pool)))]


class Scheduler:
    """Selection and grading bound to a question repository and review ledger."""

    def __init__(self, repository, ledger, rng: Optional[random.Random] = None):
        self.repository = repository
        self.ledger = ledger
        self.rng = rng or random.Random()

    def due_questions(self, subject: Optional[str] = None, max_count: Optional[int] = None,
                      now: Optional[datetime] = None) -> list[QuestionRecord]:
        return select_due(
            self.repository.list_all(), self.ledger.load(),
            subject=subject, max_count=max_count, now=now, rng=self.rng,
        )

    def random_questions(self, subject: Optional[str] = None, count: int = 10) -> list[QuestionRecord]:
        return select_random(self.repository.list_all(), subject=subject, count=count, rng=self.rng)

    def questions_for(self, settings: QuizSettings) -> list[QuestionRecord]:
        if settings.spaced_repetition:
            return self.due_questions(settings.subject, settings.question_count)
        return self.random_questions(settings.subject, settings.question_count)

    def record_review(self, question: QuestionRecord, quality, now: Optional[datetime] = None) -> ReviewRecord:
        return self.ledger.record_review(question.identity, quality, now=now)
