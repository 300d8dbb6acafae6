"""Typer CLI for trying out question generation and answer checking."""

import os
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from quizcore.config.settings import get_settings
from quizcore.graph.orchestrator import generate_questions
from quizcore.llm.generator import ChatModelGenerator, build_chat_model
from quizcore.logging_config import setup_logging
from quizcore.matching.equivalence import MatchingThresholds, check_answer
from quizcore.matching.similarity import is_too_similar, similarity_breakdown
from quizcore.models.question import (
    Difficulty,
    GenerationRequest,
    Question,
    QuestionType,
    Subject,
)

app = typer.Typer(
    name="quizcore",
    help="Quiz question generation and answer checking",
    add_completion=False,
)

console = Console()


@app.command()
def check(
    answer: str = typer.Argument(..., help="The student's answer"),
    correct: str = typer.Option(..., "--correct", "-c", help="The stored correct answer"),
    question_type: QuestionType = typer.Option(
        QuestionType.SHORT_ANSWER,
        "--type",
        "-t",
        help="Question type",
        case_sensitive=False,
    ),
    options: Optional[List[str]] = typer.Option(
        None,
        "--option",
        "-o",
        help="Answer options in order (can specify multiple times)",
    ),
    question_text: str = typer.Option(
        "Answer the question.",
        "--question",
        "-q",
        help="Question text",
    ),
) -> None:
    """
    Check whether an answer would be accepted.

    Example:
        quizcore check "Mitochondrion" --correct mitochondria --type fill_in_blank
    """
    settings = get_settings()
    question = Question(
        question_text=question_text,
        question_type=question_type,
        options=options or [],
        correct_answer=correct,
    )
    accepted = check_answer(answer, question, MatchingThresholds.from_settings(settings))

    if accepted:
        console.print(f"[green]✓ Accepted:[/green] {answer!r} matches {correct!r}")
    else:
        console.print(f"[red]✗ Rejected:[/red] {answer!r} does not match {correct!r}")
        raise typer.Exit(code=1)


@app.command()
def similarity(
    text_a: str = typer.Argument(..., help="First question text"),
    text_b: str = typer.Argument(..., help="Second question text"),
) -> None:
    """Show how similar two question texts are."""
    settings = get_settings()
    scores = similarity_breakdown(text_a, text_b, settings.min_similarity_length)

    table = Table(title="Similarity", border_style="cyan")
    table.add_column("Measure", style="cyan")
    table.add_column("Score", style="white")

    if scores.contained:
        table.add_row("Containment", "yes")
    table.add_row("Word Jaccard", f"{scores.jaccard:.3f}")
    table.add_row("Trigram", f"{scores.trigram:.3f}")
    table.add_row("Combined", f"{scores.combined:.3f}")

    duplicate = is_too_similar(scores.combined, settings.similarity_threshold)
    verdict = "[red]near-duplicate[/red]" if duplicate else "[green]distinct[/green]"
    table.add_row("Verdict", verdict)

    console.print(table)


@app.command()
def generate(
    topic: str = typer.Option(..., "--topic", "-t", help="Topic to ask about"),
    subject: Subject = typer.Option(
        Subject.GENERAL,
        "--subject",
        "-s",
        help="School subject",
        case_sensitive=False,
    ),
    count: int = typer.Option(5, "--count", "-n", help="Number of questions", min=1, max=50),
    question_type: Optional[QuestionType] = typer.Option(
        None,
        "--type",
        help="Question type (mixed when omitted)",
        case_sensitive=False,
    ),
    difficulty: Difficulty = typer.Option(
        Difficulty.MEDIUM,
        "--difficulty",
        "-d",
        help="Difficulty level",
        case_sensitive=False,
    ),
    grade: Optional[int] = typer.Option(
        None,
        "--grade",
        "-g",
        help="Student grade level (0-12)",
        min=0,
        max=12,
    ),
) -> None:
    """
    Generate questions with the configured chat model.

    Example:
        quizcore generate -s science -t "Photosynthesis" -n 5 -d easy
    """
    settings = get_settings()
    setup_logging(settings.log_level)

    if settings.model_provider == "anthropic" and not os.getenv("ANTHROPIC_API_KEY"):
        console.print(
            "[red]Error:[/red] ANTHROPIC_API_KEY environment variable not set.",
            style="bold",
        )
        raise typer.Exit(code=1)

    request = GenerationRequest(
        subject=subject,
        topic=topic,
        difficulty=difficulty,
        question_type=question_type,
        grade_level=grade,
    )
    generator = ChatModelGenerator(build_chat_model(settings))

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task(f"[cyan]Generating {count} question(s)...", total=None)
        questions = generate_questions(request, count, generator, settings=settings)
        progress.update(task, description="[green]Generation complete!")

    display_questions(questions)


@app.command()
def info() -> None:
    """Display information about quizcore."""
    settings = get_settings()
    info_text = f"""
[bold cyan]quizcore[/bold cyan]
Version: 0.1.0

[bold]Pipeline:[/bold]
  • Prompt builder - Varies prompts on every retry
  • Parser - Recovers questions from fenced, truncated or messy output
  • Validator - Repairs options and answers to fit the question type
  • Novelty check - Rejects near-duplicates (combined similarity > {settings.similarity_threshold})
  • Fallback bank - Canned questions when retries run out

[bold]Answer checking:[/bold]
  • Normalization, true/false tokens, option letters
  • Paraphrase tables, keyword and concept overlap

[bold]Model:[/bold] {settings.model_name} ({settings.model_provider})
    """
    console.print(Panel(info_text, title="quizcore Info", border_style="cyan"))


def display_questions(questions: list[Question]) -> None:
    """Display generated questions as a table."""
    table = Table(title="Generated Questions", border_style="green")
    table.add_column("#", style="cyan")
    table.add_column("Type", style="cyan")
    table.add_column("Question", style="white")
    table.add_column("Options", style="white")
    table.add_column("Answer", style="green")

    for i, question in enumerate(questions, start=1):
        text = question.question_text
        if "fallback" in question.concepts_covered:
            text = f"{text} [dim](fallback)[/dim]"
        table.add_row(
            str(i),
            question.question_type.value,
            text,
            "\n".join(question.options),
            question.correct_answer,
        )

    console.print()
    console.print(table)


@app.callback()
def callback() -> None:
    """
    quizcore - Generate quiz questions and check student answers.
    """
    pass


if __name__ == "__main__":
    app()
