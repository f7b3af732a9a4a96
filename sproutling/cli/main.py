"""
Sproutling CLI.

A Rich terminal front end for the review scheduler, used by parents and
developers to inspect and drive a learner's schedule.

Commands:
- sproutling levels   - List curriculum levels for a subject
- sproutling lesson   - Show the composed lesson for a level
- sproutling study    - Walk through a lesson and record answers
- sproutling answer   - Record a single answer by item id
- sproutling stats    - Show mastery statistics
- sproutling garden   - Show the growth stage of every item
"""
from __future__ import annotations

import time
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm
from rich.table import Table

from config import get_settings
from sproutling.core.cards import LessonCard, Subject, derive_item_id
from sproutling.core.mastery import GrowthStage, MasteryRecord
from sproutling.logging_config import configure_logging
from sproutling.study.review_service import ReviewService

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="sproutling",
    help="Sproutling: review scheduling for early learners",
    no_args_is_help=True,
)
console = Console()

STYLES = {
    "correct": "bold green",
    "incorrect": "bold red",
    "review": "bold yellow",
    "new": "cyan",
    "dim": "dim",
}


# =============================================================================
# Display Helpers
# =============================================================================


def extract_label(item_id: str, subject: str) -> str:
    """
    Short garden label for an item id.

    Math ids ("num_3_stars") show the number. Reading ids ("letter_a_apple")
    show the upper-cased second component. Anything else shows the raw id.
    """
    parts = item_id.split("_")
    if len(parts) >= 2:
        if str(subject) == Subject.MATH:
            try:
                return str(int(parts[1]))
            except ValueError:
                return item_id
        return parts[1].upper()
    return item_id


def describe_card(card: LessonCard) -> str:
    """One-line description of a card for terminal display."""
    if card.number is not None:
        objects = f" {card.objects}" if card.objects else ""
        return f"{card.number}{objects}"
    if card.left_count is not None or card.right_count is not None:
        return f"{card.left_count} vs {card.right_count}"
    if card.letter and card.word:
        return f"{card.letter} is for {card.word}"
    return card.letter or card.word or "?"


def style_stage(stage: GrowthStage) -> str:
    return f"[{stage.color}]{stage.emoji} {stage.short_label}[/{stage.color}]"


def _service() -> ReviewService:
    return ReviewService.from_settings(get_settings())


def _profile(profile: Optional[str]) -> str:
    return profile or get_settings().default_profile_id


def _print_record(record: MasteryRecord) -> None:
    stage = record.growth_stage()
    console.print(
        f"[bold]{record.item_id}[/bold] {style_stage(stage)}  "
        f"interval={record.interval}d  ease={record.ease_factor:.2f}  "
        f"reps={record.repetitions}  accuracy={record.accuracy:.0f}%"
    )


# =============================================================================
# Commands
# =============================================================================


@app.command()
def levels(subject: Subject = typer.Argument(..., help="math or reading")) -> None:
    """List curriculum levels."""
    service = _service()
    loader = service.curriculum
    level_list = loader.levels_for(subject) if hasattr(loader, "levels_for") else []

    if not level_list:
        console.print(f"[{STYLES['dim']}]No levels found for {subject}[/{STYLES['dim']}]")
        return

    table = Table(title=subject.display_name)
    table.add_column("Level", justify="right")
    table.add_column("Title")
    table.add_column("Cards", justify="right")
    for level in level_list:
        table.add_row(str(level.id), f"{level.title} - {level.subtitle}", str(len(level.cards)))
    console.print(table)


@app.command()
def lesson(
    subject: Subject = typer.Argument(..., help="math or reading"),
    level: int = typer.Argument(1, help="Curriculum level"),
    profile: Optional[str] = typer.Option(None, "--profile", "-p", help="Learner profile id"),
) -> None:
    """Show the composed lesson for a level."""
    plan = _service().plan_lesson(_profile(profile), subject, level)

    table = Table(title=f"{subject.display_name} - Level {level}")
    table.add_column("#", justify="right")
    table.add_column("Activity")
    table.add_column("Item")
    table.add_column("Content")
    table.add_column("Source")

    for position, card in enumerate(plan.sequence, start=1):
        style = STYLES["review"] if card.is_review else STYLES["new"]
        table.add_row(
            str(position),
            card.activity_type,
            derive_item_id(card) or "?",
            describe_card(card),
            f"[{style}]{card.source}[/{style}]",
        )

    console.print(table)
    console.print(
        f"{len(plan.new_cards)} new + {len(plan.review_cards)} review "
        f"({plan.matched_reviews} due items matched)"
    )


@app.command()
def study(
    subject: Subject = typer.Argument(..., help="math or reading"),
    level: int = typer.Argument(1, help="Curriculum level"),
    profile: Optional[str] = typer.Option(None, "--profile", "-p", help="Learner profile id"),
) -> None:
    """Walk through a lesson, recording whether each card was answered correctly."""
    service = _service()
    profile_id = _profile(profile)
    cards = service.compose_lesson(profile_id, subject, level)

    if not cards:
        console.print("[yellow]Nothing to study.[/yellow]")
        return

    correct = 0
    for position, card in enumerate(cards, start=1):
        tag = " (review)" if card.is_review else ""
        console.print(Panel(describe_card(card), title=f"{position}/{len(cards)} {card.activity_type}{tag}"))
        started = time.monotonic()
        is_correct = Confirm.ask("Answered correctly?", default=True)
        elapsed = time.monotonic() - started

        record = service.record_answer(
            profile_id, card, subject, level, is_correct, response_time=elapsed
        )
        if is_correct:
            correct += 1
            console.print(f"[{STYLES['correct']}]Great job![/{STYLES['correct']}]")
        else:
            console.print(f"[{STYLES['incorrect']}]Let's try again next time.[/{STYLES['incorrect']}]")
        if record is not None:
            _print_record(record)

    console.print(f"\n[bold]{correct}/{len(cards)} correct[/bold]")


@app.command()
def answer(
    subject: Subject = typer.Argument(..., help="math or reading"),
    level: int = typer.Argument(..., help="Curriculum level"),
    item_id: str = typer.Argument(..., help="Item id, e.g. num_3_balloons"),
    correct: bool = typer.Option(True, "--correct/--incorrect", help="Was the answer correct"),
    attempts: int = typer.Option(1, "--attempts", "-a", help="Attempts taken"),
    response_time: float = typer.Option(0.0, "--time", "-t", help="Seconds to answer"),
    profile: Optional[str] = typer.Option(None, "--profile", "-p", help="Learner profile id"),
) -> None:
    """Record one answer for a card in the given level."""
    service = _service()
    card = next(
        (c for c in service.curriculum.cards_for(subject, level) if derive_item_id(c) == item_id),
        None,
    )
    if card is None:
        console.print(f"[red]No card {item_id!r} in {subject} level {level}[/red]")
        raise typer.Exit(code=1)

    record = service.record_answer(
        _profile(profile),
        card,
        subject,
        level,
        correct,
        attempts=attempts,
        response_time=response_time,
    )
    if record is not None:
        _print_record(record)


@app.command()
def stats(
    subject: Subject = typer.Argument(..., help="math or reading"),
    profile: Optional[str] = typer.Option(None, "--profile", "-p", help="Learner profile id"),
) -> None:
    """Show mastery statistics."""
    summary = _service().stats(_profile(profile), subject)

    table = Table(title=f"{subject.display_name} mastery", show_header=False)
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Items practiced", str(summary.total_items))
    table.add_row("Mastered", f"{summary.mastered_items} ({summary.mastery_percentage:.0f}%)")
    table.add_row("Struggling", str(summary.struggling_items))
    table.add_row("Due for review", str(summary.due_for_review))
    table.add_row("Average accuracy", f"{summary.overall_accuracy:.0f}%")
    console.print(table)


@app.command()
def garden(
    subject: Subject = typer.Argument(..., help="math or reading"),
    profile: Optional[str] = typer.Option(None, "--profile", "-p", help="Learner profile id"),
) -> None:
    """Show every practiced item as a plant."""
    items = _service().garden_items(_profile(profile), subject, labeler=extract_label)
    if not items:
        console.print("[dim]The garden is empty. Time to plant some seeds![/dim]")
        return

    table = Table(title=f"{subject.display_name} garden")
    table.add_column("Label", justify="center")
    table.add_column("Stage")
    table.add_column("Item")
    table.add_column("Level", justify="right")
    for item in items:
        table.add_row(
            item.label,
            style_stage(item.stage),
            item.item_id,
            str(item.level_id),
        )
    console.print(table)

    thirsty = sum(1 for item in items if item.stage is GrowthStage.WILTING)
    if thirsty:
        console.print(f"[dark_orange]{thirsty} plants need watering[/dark_orange]")


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    configure_logging(get_settings())
    app()


if __name__ == "__main__":
    main()
