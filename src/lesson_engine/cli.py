from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Optional

import typer
from pydantic import TypeAdapter, ValidationError
from rich.console import Console
from rich.table import Table

from lesson_engine.data_models import (
    CategorizationAnswer,
    ChoiceAnswer,
    FillInTheBlankAnswer,
    FindTheMistakeAnswer,
    MatchingAnswer,
    NodeAnswer,
    OrderingAnswer,
)
from lesson_engine.errors import LessonEngineError
from lesson_engine.learning import format_adventure_result, format_quiz_attempt
from lesson_engine.parsing import load_adventure, load_quiz
from lesson_engine.system import LessonSystem

app = typer.Typer(help="Inspect generated lesson content and grade adventures and quizzes.")
console = Console()

SUBMITTED_ANSWERS = TypeAdapter(Dict[str, str])


def _load_system(config: Optional[Path]) -> LessonSystem:
    """Instantiate `LessonSystem` from an optional config path."""
    return LessonSystem.from_config(config)


@app.command()
def parse(
    source: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    as_json: bool = typer.Option(False, "--json", help="Print segments as JSON."),
    config: Optional[Path] = typer.Option(None, help="Path to configuration YAML."),
):
    """
    Parse a generated lesson file into typed segments.

    Prints a Rich table of segment ids and kinds, or the full camelCase JSON
    payload with `--json`.
    """
    system = _load_system(config)
    segments = system.parse(source.read_text(encoding="utf-8"))
    if as_json:
        typer.echo(json.dumps([segment.to_payload() for segment in segments], indent=2))
        return

    table = Table(title=f"Segments in {source.name}")
    table.add_column("id")
    table.add_column("type")
    table.add_column("preview")
    for segment in segments:
        view = segment.learner_view()
        preview = next(
            (str(view[key]) for key in ("value", "question", "instruction", "statement", "before") if view.get(key)),
            "",
        )
        table.add_row(segment.id, segment.type, preview[:60])
    console.print(table)


@app.command("grade-quiz")
def grade_quiz(
    quiz_path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    answers_path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    student_id: str = typer.Option(..., help="Learner the attempt belongs to."),
    config: Optional[Path] = typer.Option(None, help="Path to configuration YAML."),
):
    """Grade a quiz JSON file against a JSON mapping of question id to chosen option."""
    system = _load_system(config)
    try:
        quiz = load_quiz(quiz_path.read_text(encoding="utf-8"))
        answers = SUBMITTED_ANSWERS.validate_json(answers_path.read_text(encoding="utf-8"))
        attempt = system.grade_quiz(quiz, answers, student_id=student_id)
    except (LessonEngineError, ValidationError) as exc:
        raise typer.BadParameter(str(exc)) from exc
    console.print(format_quiz_attempt(attempt, quiz))


def _prompt_index(label: str, count: int) -> int:
    """Ask for a 1-based position until the learner enters one in range."""
    while True:
        picked = typer.prompt(label, type=int)
        if 1 <= picked <= count:
            return picked
        console.print(f"  Enter a number between 1 and {count}.")


def _prompt_answer(interaction) -> NodeAnswer:
    view = interaction.learner_view()
    if interaction.type == "CHOICE":
        for idx, text in enumerate(view["choices"], start=1):
            console.print(f"  {idx}. {text}")
        picked = _prompt_index("Your choice", len(view["choices"]))
        return ChoiceAnswer(choice=view["choices"][picked - 1])
    if interaction.type == "FILL_IN_THE_BLANK":
        console.print(f"  {view['before']}_____{view['after']}")
        if view["wordBank"]:
            console.print("  Word bank: " + ", ".join(view["wordBank"]))
        return FillInTheBlankAnswer(text=typer.prompt("Fill the blank"))
    if interaction.type == "MATCHING":
        console.print(f"  {view['instruction']}")
        definitions = view["definitions"]
        for idx, definition in enumerate(definitions, start=1):
            console.print(f"  {idx}. {definition}")
        pairs = {}
        for term in view["terms"]:
            picked = _prompt_index(f"Definition for {term!r}", len(definitions))
            pairs[term] = definitions[picked - 1]
        return MatchingAnswer(pairs=pairs)
    if interaction.type == "FIND_THE_MISTAKE":
        console.print(f"  {view['statement']}")
        return FindTheMistakeAnswer(correction=typer.prompt("Corrected statement"))
    if interaction.type == "ORDERING":
        console.print(f"  {view['instruction']}")
        items = view["orderingItems"]
        for idx, item in enumerate(items, start=1):
            console.print(f"  {idx}. {item}")
        raw = typer.prompt("Order (comma-separated numbers)")
        try:
            order = [items[int(part) - 1] for part in raw.split(",") if part.strip()]
        except (ValueError, IndexError):
            order = []
        return OrderingAnswer(items=order)
    if interaction.type == "CATEGORIZATION":
        console.print(f"  {view['instruction']} Categories: {', '.join(view['categories'])}")
        assignments = {item: typer.prompt(f"Category for {item!r}") for item in view["items"]}
        return CategorizationAnswer(assignments=assignments)
    raise typer.BadParameter(f"Unsupported interaction type: {interaction.type}")


@app.command()
def play(
    adventure_path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    module_id: str = typer.Option("local", help="Module id recorded in the history entry."),
    config: Optional[Path] = typer.Option(None, help="Path to configuration YAML."),
):
    """Play an adventure JSON file node by node in the terminal."""
    system = _load_system(config)
    try:
        adventure = load_adventure(adventure_path.read_text(encoding="utf-8"))
        engine = system.new_adventure()
        engine.start(adventure, module_id=module_id)
    except LessonEngineError as exc:
        raise typer.BadParameter(str(exc)) from exc

    console.print(f"[bold]{adventure.title}[/bold]")
    while engine.current_node is not None:
        node = engine.current_node
        console.print(f"\n[bold]Stage {node.stage}[/bold] {node.scene_description}")
        result = engine.submit_answer(_prompt_answer(node.interaction))
        verdict = "[green]Correct![/green]" if result.correct else "[red]Not quite.[/red]"
        console.print(verdict + (f" {result.feedback}" if result.feedback else ""))

    console.print()
    console.print(format_adventure_result(engine.history_entry))


if __name__ == "__main__":
    app()
