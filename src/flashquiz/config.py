"""Paths and defaults, overridable through the environment."""
import os
from pathlib import Path

DATA_DIR = Path(os.environ.get("FLASHQUIZ_HOME", str(Path.home() / ".flashquiz")))
DEFAULT_DB_PATH = os.environ.get("FLASHQUIZ_DB", str(DATA_DIR / "flashquiz.db"))
LOG_FILE = "flashquiz.log"

CONTENT_DIR = Path(__file__).parent / "content"
DEFAULT_QUESTIONS_PATH = os.environ.get(
    "FLASHQUIZ_QUESTIONS", str(CONTENT_DIR / "questions.json")
)

# Key of the single slot that holds the whole review ledger
REVIEW_DATA_KEY = "review-data"

QUESTION_COUNTS = [5, 10, 20, 30, 50]
DEFAULT_QUESTION_COUNT = 10
