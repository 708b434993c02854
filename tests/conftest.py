import random
import pytest

from flashquiz.ledger import ReviewLedger
from flashquiz.models import QuestionRecord
from flashquiz.questions import QuestionRepository
from flashquiz.scheduler import Scheduler


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_flashquiz.db")
    return db_path


@pytest.fixture
def questions():
    return [
        QuestionRecord("GEOGRAPHY", True, "Capital of France?", "Paris", ("Lyon", "Nice")),
        QuestionRecord("GEOGRAPHY", False, "Capital of Italy?", "Rome"),
        QuestionRecord("GEOGRAPHY", False, "Capital of Spain?", "Madrid"),
        QuestionRecord("HISTORY", True, "First moon landing year?", "1969", ("1959", "1979", "1989")),
        QuestionRecord("HISTORY", False, "Who painted the Mona Lisa?", "Leonardo da Vinci"),
    ]


@pytest.fixture
def ledger(tmp_db):
    return ReviewLedger(tmp_db)


@pytest.fixture
def scheduler(questions, ledger):
    return Scheduler(QuestionRepository(questions), ledger, rng=random.Random(42))
