"""Quiz scoring and review statistics."""
from datetime import datetime
from typing import Mapping, Optional

from flashquiz.models import QuizResult, ReviewRecord
from flashquiz.scheduler import is_due


def score_percentage(correct: int, total: int) -> int:
    if total == 0:
        return 0
    return int(correct / total * 100)


def get_performance_message(score: int) -> str:
    if score >= 90:
        return "Excellent! You've mastered these questions."
    elif score >= 70:
        return "Great job! You're doing well."
    elif score >= 50:
        return "Good effort! Keep practicing to improve."
    return "You'll do better next time. Keep studying!"


def get_score_color(score: int) -> str:
    if score >= 80:
        return "green"
    elif score >= 60:
        return "blue"
    elif score >= 40:
        return "dark_orange"
    return "red"


def build_result(correct: int, total: int, missed=()) -> QuizResult:
    pct = score_percentage(correct, total)
    return QuizResult(
        correct=correct,
        total=total,
        percentage=pct,
        message=get_performance_message(pct),
        missed=tuple(missed),
    )


def get_review_stats(
    ledger: Mapping[str, ReviewRecord],
    questions,
    now: Optional[datetime] = None,
) -> dict:
    """Review coverage for a pool of questions."""
    now = now or datetime.now()
    reviewed = [q for q in questions if q.identity in ledger]
    due = [q for q in reviewed if is_due(ledger[q.identity], now)]
    records = [ledger[q.identity] for q in reviewed]
    avg_ease = sum(r.ease_factor for r in records) / len(records) if records else 0.0
    return {
        "total": len(questions),
        "reviewed": len(reviewed),
        "never_reviewed": len(questions) - len(reviewed),
        "due": len(due),
        "ready": len(due) + len(questions) - len(reviewed),
        "reviews": sum(r.review_count for r in records),
        "avg_ease_factor": round(avg_ease, 2),
    }
