"""Question bank loading and subject lookup."""
import json
import logging
from pathlib import Path
from typing import Optional

from flashquiz.config import DEFAULT_QUESTIONS_PATH
from flashquiz.models import QuestionRecord

logger = logging.getLogger(__name__)

# Placeholder used by question banks for an empty distractor slot
NO_DISTRACTOR = "-"

REQUIRED_FIELDS = ("subjects", "question", "answer")

# Choices are offered as letters a-z
MAX_CHOICES = 26

TRUE_WORDS = ("true", "yes", "1")
FALSE_WORDS = ("false", "no", "0", "")


class QuestionBankError(ValueError):
    """Raised when a question bank file or record is malformed."""


def parse_flag(value) -> bool:
    """Read a bank boolean, accepting real bools, 0/1 and true/false words."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        word = value.strip().lower()
        if word in TRUE_WORDS:
            return True
        if word in FALSE_WORDS:
            return False
    raise QuestionBankError(f"multi_choice must be true or false, got {value!r}")


def parse_question(data: dict) -> QuestionRecord:
    """Build a QuestionRecord from one bank entry, dropping "-" distractors."""
    if not isinstance(data, dict):
        raise QuestionBankError(f"Question entry must be a mapping, got {type(data).__name__}")
    missing = [f for f in REQUIRED_FIELDS if f not in data]
    if missing:
        raise QuestionBankError(f"Question entry missing fields: {', '.join(missing)}")
    wrong = data.get("wrong_answers") or []
    if isinstance(wrong, str):
        wrong = [wrong]
    question = QuestionRecord(
        subject=str(data["subjects"]),
        is_multiple_choice=parse_flag(data.get("multi_choice", False)),
        prompt=str(data["question"]),
        answer=str(data["answer"]),
        wrong_answers=tuple(str(w) for w in wrong if str(w) != NO_DISTRACTOR),
    )
    if question.is_multiple_choice and len(question.all_answers) > MAX_CHOICES:
        raise QuestionBankError(
            f"{question.prompt!r} has {len(question.all_answers)} choices, at most {MAX_CHOICES} allowed"
        )
    return question


def read_bank_file(file_path: str) -> list:
    path = Path(file_path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        data = json.loads(path.read_text(encoding="utf-8"))
    elif suffix in (".yaml", ".yml"):
        import yaml
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    else:
        raise QuestionBankError(f"Unsupported question bank format: {path.suffix or path.name}")

    if isinstance(data, dict):
        data = data.get("questions")
    if not isinstance(data, list):
        raise QuestionBankError(f"{path.name}: expected a list of questions")
    return data


def load_question_bank(file_path: str) -> list[QuestionRecord]:
    """Load and parse every question in a JSON or YAML bank."""
    try:
        entries = read_bank_file(file_path)
    except (OSError, json.JSONDecodeError) as e:
        raise QuestionBankError(f"Could not read question bank {file_path}: {e}") from e
    questions = [parse_question(entry) for entry in entries]
    logger.info("Loaded %d questions from %s", len(questions), file_path)
    return questions


class QuestionRepository:
    """Fixed, in-memory set of questions."""

    def __init__(self, questions: list[QuestionRecord]):
        self._questions = list(questions)

    @classmethod
    def from_file(cls, file_path: str) -> "QuestionRepository":
        return cls(load_question_bank(file_path))

    @classmethod
    def default(cls) -> "QuestionRepository":
        return cls.from_file(DEFAULT_QUESTIONS_PATH)

    def list_all(self) -> list[QuestionRecord]:
        return list(self._questions)

    def list_subjects(self) -> list[str]:
        return sorted({q.subject for q in self._questions})

    def get_questions(self, subject: Optional[str] = None) -> list[QuestionRecord]:
        if subject is None:
            return self.list_all()
        return [q for q in self._questions if q.subject == subject]

    def __len__(self) -> int:
        return len(self._questions)
