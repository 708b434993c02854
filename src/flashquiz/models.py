"""Data classes for the quiz and review domain model."""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum, IntEnum
from typing import Optional

from flashquiz.sm2 import MIN_EASE_FACTOR


class ReviewQuality(IntEnum):
    """Self-rated recall quality. The integer codes feed the SM-2 formula."""

    VERY_HARD = 0
    HARD = 1
    GOOD = 3
    EASY = 5

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").title()

    @classmethod
    def parse(cls, value) -> "ReviewQuality":
        """Return the member for a code, rejecting anything outside 0, 1, 3, 5."""
        if isinstance(value, bool):
            raise ValueError(f"Invalid review quality: {value!r}")
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Invalid review quality: {value!r}") from None


@dataclass(frozen=True)
class QuestionRecord:
    subject: str
    is_multiple_choice: bool
    prompt: str
    answer: str
    wrong_answers: tuple = ()

    @property
    def identity(self) -> str:
        # Prompt text is the primary key in the review ledger.
        return self.prompt

    @property
    def all_answers(self) -> list[str]:
        return [self.answer, *self.wrong_answers]


@dataclass
class ReviewRecord:
    question_id: str
    last_reviewed: datetime
    interval: int = 1
    ease_factor: float = 2.5
    review_count: int = 0

    @property
    def next_review(self) -> datetime:
        return self.last_reviewed + timedelta(days=self.interval)

    def to_dict(self) -> dict:
        return {
            "questionId": self.question_id,
            "lastReviewed": self.last_reviewed.isoformat(),
            "interval": self.interval,
            "easeFactor": self.ease_factor,
            "reviewCount": self.review_count,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ReviewRecord":
        """Rebuild a stored record. Raises ValueError for out-of-range fields."""
        last_reviewed = datetime.fromisoformat(data["lastReviewed"])
        if last_reviewed.tzinfo is not None:
            raise ValueError(f"lastReviewed must be a naive local time: {data['lastReviewed']!r}")
        record = cls(
            question_id=str(data["questionId"]),
            last_reviewed=last_reviewed,
            interval=int(data["interval"]),
            ease_factor=float(data["easeFactor"]),
            review_count=int(data["reviewCount"]),
        )
        if record.interval < 1:
            raise ValueError(f"interval must be at least 1, got {record.interval}")
        # Also rejects NaN
        if not record.ease_factor >= MIN_EASE_FACTOR:
            raise ValueError(f"easeFactor must be at least {MIN_EASE_FACTOR}, got {record.ease_factor}")
        if record.review_count < 0:
            raise ValueError(f"reviewCount must not be negative, got {record.review_count}")
        return record


class SessionState(Enum):
    IDLE = "idle"
    PRESENTING = "presenting"
    ANSWERED = "answered"
    GRADED = "graded"
    COMPLETED = "completed"

    @property
    def is_active(self) -> bool:
        return self in (SessionState.PRESENTING, SessionState.ANSWERED, SessionState.GRADED)


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable view of a quiz session, emitted on every transition."""

    state: SessionState
    cursor: int = 0
    total: int = 0
    correct_count: int = 0
    question: Optional[QuestionRecord] = None
    choices: tuple = ()
    submitted_answer: Optional[str] = None
    is_correct: bool = False
    review_quality: Optional[ReviewQuality] = None

    @property
    def progress(self) -> float:
        if not self.total:
            return 0.0
        return self.cursor / self.total

    @property
    def is_last_question(self) -> bool:
        return self.total > 0 and self.cursor == self.total - 1


@dataclass
class QuizSettings:
    subject: Optional[str] = None
    question_count: int = 10
    spaced_repetition: bool = False


@dataclass(frozen=True)
class QuizResult:
    correct: int
    total: int
    percentage: int
    message: str = ""
    missed: tuple = field(default=())
