"""
StudySnap developer CLI.

Thin terminal front end over ``StudyContentService`` for trying prompts and
checking provider fallback behavior.

Examples:
    studysnap summary notes.txt --style bullets --words 120
    studysnap quiz notes.txt --count 5
    studysnap guide "Linear algebra" --difficulty beginner
    studysnap suggest --studied "Biology" --studied "Chemistry"
    studysnap notice
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from config import Settings, get_settings
from studysnap.core.errors import MissingCredentialError, format_error
from studysnap.generation.repair import options_contain_answer
from studysnap.generation.schemas import (
    ChatTurn,
    Difficulty,
    RelativeDifficulty,
    SummaryStyle,
    TutorContext,
    TutorResponseFormat,
)
from studysnap.generation.service import StudyContentService

app = typer.Typer(
    help="Generate study content from text or topics",
    no_args_is_help=True,
)

console = Console()


def _settings(hosted_only: bool) -> Settings:
    settings = get_settings()
    if hosted_only:
        settings = settings.model_copy(update={"model_preference": "hosted_only"})
    return settings


def _read_source(source: str) -> str:
    path = Path(source)
    if path.is_file():
        return path.read_text(encoding="utf-8", errors="replace")
    return source


def _run(hosted_only: bool, operation):
    """Run one service operation, then print any fallback notice."""

    async def _go():
        async with StudyContentService.from_settings(_settings(hosted_only)) as service:
            result = await operation(service)
            return result, service.pop_fallback_notice()

    try:
        result, notice = asyncio.run(_go())
    except MissingCredentialError as e:
        console.print(f"[red]{escape(format_error(e))}[/red]")
        raise typer.Exit(1)

    if notice:
        console.print(Panel(escape(notice), title="Fallback notice", border_style="yellow"))
    return result


@app.command("summary")
def summary(
    source: str = typer.Argument(..., help="Text or path to a text file"),
    style: SummaryStyle = typer.Option(SummaryStyle.PARAGRAPH, "--style", "-s"),
    words: int = typer.Option(150, "--words", "-w", help="Target word count"),
    difficulty: Difficulty = typer.Option(Difficulty.INTERMEDIATE, "--difficulty", "-d"),
    hosted_only: bool = typer.Option(False, "--hosted-only", help="Skip the local model"),
):
    """Summarise a text."""
    text = _read_source(source)
    result = _run(hosted_only, lambda s: s.generate_summary(text, style, words, difficulty))
    console.print(result, markup=False)


@app.command("quiz")
def quiz(
    source: str = typer.Argument(..., help="Text or path to a text file"),
    count: int = typer.Option(5, "--count", "-n"),
    relative: RelativeDifficulty = typer.Option(None, "--relative", help="easier, same or harder"),
    topic: bool = typer.Option(False, "--topic", help="Treat SOURCE as a topic name"),
    difficulty: Difficulty = typer.Option(Difficulty.INTERMEDIATE, "--difficulty", "-d"),
    hosted_only: bool = typer.Option(False, "--hosted-only", help="Skip the local model"),
):
    """Generate multiple choice questions."""
    if topic:
        questions = _run(hosted_only, lambda s: s.generate_topic_questions(source, count, difficulty))
    else:
        text = _read_source(source)
        questions = _run(hosted_only, lambda s: s.generate_questions(text, count, relative))

    for i, question in enumerate(questions, 1):
        console.print(f"\n[bold cyan]Q{i}.[/bold cyan] {escape(question.question)}")
        for letter, option in zip("ABCD", question.options):
            marker = "[green]*[/green]" if options_contain_answer([option], question.answer) else " "
            console.print(f"  {marker} {letter}) {escape(option)}")
        if question.explanation:
            console.print(f"  [dim]{escape(question.explanation)}[/dim]")


@app.command("flashcards")
def flashcards(
    source: str = typer.Argument(..., help="Text or path to a text file"),
    count: int = typer.Option(5, "--count", "-n"),
    relative: RelativeDifficulty = typer.Option(None, "--relative", help="easier, same or harder"),
    topic: bool = typer.Option(False, "--topic", help="Treat SOURCE as a topic name"),
    difficulty: Difficulty = typer.Option(Difficulty.INTERMEDIATE, "--difficulty", "-d"),
    hosted_only: bool = typer.Option(False, "--hosted-only", help="Skip the local model"),
):
    """Generate flashcards."""
    if topic:
        cards = _run(hosted_only, lambda s: s.generate_topic_flashcards(source, count, difficulty))
    else:
        text = _read_source(source)
        cards = _run(hosted_only, lambda s: s.generate_flashcards(text, count, relative))

    table = Table(title="Flashcards")
    table.add_column("#", style="dim", width=4)
    table.add_column("Front", style="cyan")
    table.add_column("Back")
    for i, card in enumerate(cards, 1):
        table.add_row(str(i), escape(card.front), escape(card.back))
    console.print(table)


@app.command("guide")
def guide(
    topic: str = typer.Argument(..., help="Topic to learn"),
    style: SummaryStyle = typer.Option(SummaryStyle.PARAGRAPH, "--style", "-s"),
    words: int = typer.Option(300, "--words", "-w", help="Target word count"),
    difficulty: Difficulty = typer.Option(Difficulty.INTERMEDIATE, "--difficulty", "-d"),
    hosted_only: bool = typer.Option(False, "--hosted-only", help="Skip the local model"),
):
    """Write a learning guide for a topic."""
    result = _run(hosted_only, lambda s: s.generate_topic_guide(topic, style, words, difficulty))
    console.print(result, markup=False)


@app.command("suggest")
def suggest(
    studied: list[str] = typer.Option(None, "--studied", help="Topic already studied (repeatable)"),
    hosted_only: bool = typer.Option(False, "--hosted-only", help="Skip the local model"),
):
    """Suggest topics to learn next."""
    suggestions = _run(hosted_only, lambda s: s.generate_topic_suggestions(studied or []))

    table = Table(title="Suggested Topics")
    table.add_column("Title", style="cyan")
    table.add_column("Category")
    table.add_column("Difficulty")
    table.add_column("Time", style="dim")
    for item in suggestions:
        table.add_row(
            escape(item.title), escape(item.category), escape(item.difficulty), escape(item.estimated_time)
        )
    console.print(table)


@app.command("ask")
def ask(
    source: str = typer.Argument(..., help="Study material text or path to a text file"),
    question: str = typer.Argument(..., help="Question for the tutor"),
    response_format: TutorResponseFormat = typer.Option(TutorResponseFormat.STANDARD, "--format", "-f"),
    cards: bool = typer.Option(False, "--cards", help="Also convert the answer into flashcards"),
    hosted_only: bool = typer.Option(False, "--hosted-only", help="Skip the local model"),
):
    """Ask the study tutor a question about some material."""
    context = TutorContext(original_text=_read_source(source), study_set_title=Path(source).stem)

    async def _answer(service: StudyContentService):
        reply = await service.chat([ChatTurn(role="user", content=question)], context, response_format)
        converted = await service.convert_to_flashcards(reply) if cards else []
        return reply, converted

    reply, converted = _run(hosted_only, _answer)
    console.print(Panel(escape(reply), title="Tutor", border_style="cyan"))
    for card in converted:
        console.print(f"[cyan]{escape(card.front)}[/cyan] - {escape(card.back)}")


@app.command("notice")
def notice(
    hosted_only: bool = typer.Option(False, "--hosted-only", help="Skip the local model"),
):
    """Show the fallback notice the current settings would produce."""
    settings = _settings(hosted_only)

    async def _preview():
        async with StudyContentService.from_settings(settings) as service:
            return await service.preview_fallback_notice()

    preview = asyncio.run(_preview())

    if preview:
        console.print(f"[yellow]{escape(preview)}[/yellow]")
    else:
        console.print("[green]No fallback expected with current settings.[/green]")
    if not settings.has_hosted_credentials:
        console.print("[red]HOSTED_API_KEY is not set; hosted requests will fail.[/red]")


def main() -> None:
    """CLI entry point."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=get_settings().log_level,
        format="<level>{message}</level>",
    )

    app()


if __name__ == "__main__":
    main()
