"""Quiz session state machine: sequencing, answer grading and review capture."""
import logging
import random
from typing import Callable, Optional

from flashquiz.models import (
    QuestionRecord, QuizResult, QuizSettings, ReviewQuality, SessionSnapshot, SessionState,
)
from flashquiz.results import build_result

logger = logging.getLogger(__name__)

Listener = Callable[[SessionSnapshot], None]


class InvalidTransition(RuntimeError):
    """Raised when an operation is not valid in the session's current state."""


def normalize_answer(text: str) -> str:
    return text.strip().lower()


def check_answer(question: QuestionRecord, response: str) -> bool:
    """Multiple choice must match exactly; free text ignores case and surrounding space."""
    if question.is_multiple_choice:
        return response == question.answer
    return normalize_answer(response) == normalize_answer(question.answer)


class QuizSession:
    """Drives one quiz run over a fixed question sequence.

    Idle -> Presenting -> Answered -> Graded -> (Presenting | Completed).
    Listeners receive a SessionSnapshot after every transition.
    """

    def __init__(self, scheduler, rng: Optional[random.Random] = None):
        self.scheduler = scheduler
        self.rng = rng or random.Random()
        self.questions: list[QuestionRecord] = []
        self.state = SessionState.IDLE
        self.cursor = 0
        self.correct_count = 0
        self.missed: list[str] = []
        self._listeners: list[Listener] = []
        self._reset_question()

    # --- Notification ---

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            state=self.state,
            cursor=self.cursor,
            total=len(self.questions),
            correct_count=self.correct_count,
            question=self.current_question,
            choices=tuple(self.choices),
            submitted_answer=self.submitted_answer,
            is_correct=self.is_correct,
            review_quality=self.review_quality,
        )

    def _emit(self) -> None:
        snap = self.snapshot()
        for listener in list(self._listeners):
            listener(snap)

    # --- Helpers ---

    @property
    def current_question(self) -> Optional[QuestionRecord]:
        if self.state is SessionState.IDLE or self.cursor >= len(self.questions):
            return None
        return self.questions[self.cursor]

    @property
    def is_last_question(self) -> bool:
        return self.cursor == len(self.questions) - 1

    def _require(self, *states: SessionState) -> None:
        if self.state not in states:
            allowed = ", ".join(s.value for s in states)
            raise InvalidTransition(f"Cannot do that while {self.state.value} (needs {allowed})")

    def _reset_question(self) -> None:
        self.choices: list[str] = []
        self.submitted_answer: Optional[str] = None
        self.is_correct = False
        self.review_quality: Optional[ReviewQuality] = None

    def _reset_counters(self) -> None:
        self.cursor = 0
        self.correct_count = 0
        self.missed = []

    def _present(self) -> None:
        self._reset_question()
        question = self.questions[self.cursor]
        if question.is_multiple_choice:
            choices = question.all_answers
            self.rng.shuffle(choices)
            self.choices = choices
        self.state = SessionState.PRESENTING
        self._emit()

    # --- Transitions ---

    def start(self, questions) -> bool:
        """Begin a run. Returns False and stays idle when there are no questions."""
        questions = list(questions)
        self._reset_counters()
        self._reset_question()
        if not questions:
            logger.info("No questions available, session stays idle")
            self.questions = []
            self.state = SessionState.IDLE
            self._emit()
            return False
        self.questions = questions
        logger.info("Starting quiz with %d questions", len(questions))
        self._present()
        return True

    def start_quiz(self, settings: QuizSettings) -> bool:
        return self.start(self.scheduler.questions_for(settings))

    def submit_answer(self, response: str) -> bool:
        self._require(SessionState.PRESENTING)
        question = self.current_question
        if question.is_multiple_choice and response not in self.choices:
            raise ValueError(f"{response!r} is not one of the offered choices")
        self.submitted_answer = response
        self.is_correct = check_answer(question, response)
        if self.is_correct:
            self.correct_count += 1
        else:
            self.missed.append(question.identity)
        self.state = SessionState.ANSWERED
        self._emit()
        return self.is_correct

    def submit_review_quality(self, quality) -> ReviewQuality:
        self._require(SessionState.ANSWERED)
        quality = ReviewQuality.parse(quality)
        self.scheduler.record_review(self.current_question, quality)
        self.review_quality = quality
        self.state = SessionState.GRADED
        self._emit()
        return quality

    def advance(self) -> SessionState:
        self._require(SessionState.GRADED)
        if self.is_last_question:
            self.state = SessionState.COMPLETED
            logger.info("Quiz completed: %d/%d correct", self.correct_count, len(self.questions))
            self._emit()
        else:
            self.cursor += 1
            self._present()
        return self.state

    def restart(self) -> SessionState:
        """Replay the same question set from the beginning."""
        self._reset_counters()
        self._reset_question()
        if self.questions:
            self._present()
        else:
            self.state = SessionState.IDLE
            self._emit()
        return self.state

    def result(self) -> QuizResult:
        self._require(SessionState.COMPLETED)
        return build_result(self.correct_count, len(self.questions), self.missed)
