"""Interactive CLI application."""
import logging
import os
import string
from logging.handlers import RotatingFileHandler

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt, IntPrompt
from rich.table import Table

from flashquiz.config import (
    DATA_DIR, DEFAULT_DB_PATH, DEFAULT_QUESTION_COUNT, DEFAULT_QUESTIONS_PATH,
    LOG_FILE, QUESTION_COUNTS,
)
from flashquiz.db import init_db
from flashquiz.ledger import ReviewLedger
from flashquiz.models import QuizSettings, ReviewQuality, SessionState
from flashquiz.questions import QuestionRepository
from flashquiz.results import get_review_stats, get_score_color
from flashquiz.scheduler import Scheduler
from flashquiz.session import QuizSession

console = Console()
logger = logging.getLogger(__name__)

EXIT_WORDS = ("q", "menu")
# Answer prompts accept any text, including "q", so leaving needs a prefix
ANSWER_EXIT_WORDS = (":q", ":menu")


class SessionExitRequested(Exception):
    """Raised when the user asks to leave a quiz mid-way."""


def setup_logging(log_dir=DATA_DIR, verbose: bool = False) -> None:
    root = logging.getLogger("flashquiz")
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    os.makedirs(log_dir, exist_ok=True)
    file_handler = RotatingFileHandler(
        os.path.join(log_dir, LOG_FILE), maxBytes=1_000_000, backupCount=3
    )
    file_handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s"))
    root.addHandler(file_handler)
    logging.basicConfig(level=logging.INFO if verbose else logging.WARNING)


def session_prompt(prompt: str, exit_words=EXIT_WORDS, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in exit_words:
        raise SessionExitRequested()
    return answer


def session_int_prompt(prompt: str, choices: list[str]) -> int:
    answer = session_prompt(prompt, choices=choices + list(EXIT_WORDS))
    return int(answer)


def show_welcome():
    console.print(Panel(
        "[bold]Flashcard Quiz[/bold]\n[dim]Spaced repetition trainer[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("quiz", "Random practice quiz"),
        ("review", "Spaced repetition: due and new questions"),
        ("subjects", "List subjects"),
        ("stats", "Review progress"),
        ("reset", "Forget all review history"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def choose_settings(repository: QuestionRepository, spaced_repetition: bool) -> QuizSettings:
    subjects = repository.list_subjects()
    console.print("  [cyan]0[/cyan]) All Subjects")
    for i, subject in enumerate(subjects, 1):
        console.print(f"  [cyan]{i}[/cyan]) {subject}")
    pick = IntPrompt.ask("Subject", choices=[str(i) for i in range(len(subjects) + 1)], default=0)
    count = IntPrompt.ask(
        "Number of questions", choices=[str(c) for c in QUESTION_COUNTS], default=DEFAULT_QUESTION_COUNT,
    )
    return QuizSettings(
        subject=subjects[pick - 1] if pick else None,
        question_count=count,
        spaced_repetition=spaced_repetition,
    )


def present_question(session: QuizSession) -> None:
    snap = session.snapshot()
    question = snap.question
    console.print(Panel(
        question.prompt,
        title=f"Question {snap.cursor + 1} of {snap.total}",
        subtitle=question.subject,
        border_style="cyan",
    ))
    if question.is_multiple_choice:
        letters = string.ascii_lowercase[:len(snap.choices)]
        for letter, choice in zip(letters, snap.choices):
            console.print(f"  [cyan]{letter})[/cyan] {choice}")
        pick = session_prompt(
            "\nYour answer", exit_words=ANSWER_EXIT_WORDS, choices=list(letters) + list(ANSWER_EXIT_WORDS),
        )
        response = snap.choices[letters.index(pick)]
    else:
        response = session_prompt("\nYour answer [dim](:q to stop)[/dim]", exit_words=ANSWER_EXIT_WORDS)
    if session.submit_answer(response):
        console.print("[green]Correct![/green]")
    else:
        console.print(f"[red]Incorrect.[/red] Answer: [green]{question.answer}[/green]")


def ask_review_quality(session: QuizSession) -> None:
    options = "  ".join(f"{q.value}={q.label}" for q in ReviewQuality)
    quality = session_int_prompt(
        f"How well did you know this? ({options})",
        choices=[str(q.value) for q in ReviewQuality],
    )
    session.submit_review_quality(quality)


def show_result(session: QuizSession) -> None:
    result = session.result()
    color = get_score_color(result.percentage)
    console.print(Panel(
        f"[bold]{result.correct}/{result.total}[/bold]  [{color}]{result.percentage}%[/{color}]\n"
        f"{result.message}",
        title="Quiz Completed!", border_style=color,
    ))


def run_quiz_session(session: QuizSession) -> None:
    """Walk the user through every question of a started session."""
    if session.state is SessionState.IDLE:
        console.print("[yellow]No questions available![/yellow]")
        return
    while True:
        while session.state is not SessionState.COMPLETED:
            present_question(session)
            ask_review_quality(session)
            session.advance()
            console.print()
        show_result(session)
        again = Prompt.ask("Review again?", choices=["y", "n"], default="n")
        if again != "y":
            return
        session.restart()


def cmd_quiz(session: QuizSession, repository: QuestionRepository, spaced_repetition: bool):
    title = "Spaced Repetition Review" if spaced_repetition else "Practice Quiz"
    console.print(f"\n[bold]{title}[/bold]")
    settings = choose_settings(repository, spaced_repetition)
    session.start_quiz(settings)
    try:
        run_quiz_session(session)
    except SessionExitRequested:
        console.print("[dim]Quiz abandoned. Reviews rated so far are saved.[/dim]")


def cmd_subjects(repository: QuestionRepository):
    table = Table(title="Subjects")
    table.add_column("Subject", style="cyan")
    table.add_column("Questions", justify="right")
    for subject in repository.list_subjects():
        table.add_row(subject, str(len(repository.get_questions(subject))))
    console.print(table)


def cmd_stats(ledger: ReviewLedger, repository: QuestionRepository):
    mapping = ledger.load()
    table = Table(title="Review Progress")
    table.add_column("Subject", style="cyan")
    table.add_column("Reviewed", justify="right")
    table.add_column("New", justify="right")
    table.add_column("Due", justify="right")
    for subject in repository.list_subjects():
        stats = get_review_stats(mapping, repository.get_questions(subject))
        table.add_row(subject, str(stats["reviewed"]), str(stats["never_reviewed"]), str(stats["due"]))
    console.print(table)
    overall = get_review_stats(mapping, repository.list_all())
    console.print(f"\n  Ready to study: [bold]{overall['ready']}[/bold]  |  "
                  f"Reviews: [bold]{overall['reviews']}[/bold]  |  "
                  f"Avg ease: [bold]{overall['avg_ease_factor']}[/bold]")


def cmd_reset(ledger: ReviewLedger):
    confirm = Prompt.ask("Forget all review history?", choices=["y", "n"], default="n")
    if confirm == "y":
        ledger.clear()
        console.print("[green]Review history cleared.[/green]")


def main():
    db_path = DEFAULT_DB_PATH
    setup_logging(verbose=bool(os.environ.get("FLASHQUIZ_VERBOSE")))
    init_db(db_path)
    repository = QuestionRepository.from_file(DEFAULT_QUESTIONS_PATH)
    ledger = ReviewLedger(db_path)
    session = QuizSession(Scheduler(repository, ledger))

    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="review").strip().lower()
        try:
            if choice == "quiz":
                cmd_quiz(session, repository, spaced_repetition=False)
            elif choice == "review":
                cmd_quiz(session, repository, spaced_repetition=True)
            elif choice == "subjects":
                cmd_subjects(repository)
            elif choice == "stats":
                cmd_stats(ledger, repository)
            elif choice == "reset":
                cmd_reset(ledger)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]Happy studying![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            logger.exception("Command %r failed", choice)
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
