"""CLI interface for the family graph engine.

Every command reads a tree from a JSON file with ``members``,
``parent_child`` and ``marriages`` arrays.
"""

import asyncio
import json
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from family_engine.dedupe import CandidateAttributes, confidence_description, format_duplicate_warning
from family_engine.engine import FamilyGraphEngine
from family_engine.exceptions import MemberNotFoundError, RelationshipRejectedError
from family_engine.graph import InMemoryMemberStore, LineageMap

app = typer.Typer(
    name="family-engine",
    help="Family tree relationship and consistency checks",
    add_completion=False,
)
console = Console()


@app.callback()
def main():
    """Load configuration from a .env file if one is present."""
    from dotenv import load_dotenv

    load_dotenv()


def load_engine(tree_file: Path) -> tuple[FamilyGraphEngine, InMemoryMemberStore]:
    if not tree_file.exists():
        console.print(f"[red]Error: File not found: {tree_file}[/red]")
        raise typer.Exit(1)
    try:
        store = InMemoryMemberStore.from_json_file(tree_file)
    except (ValueError, TypeError) as exc:
        console.print(f"[red]Error: Could not load tree from {tree_file}: {exc}[/red]")
        raise typer.Exit(1) from exc
    return FamilyGraphEngine(store), store


def _run(coro):
    try:
        return asyncio.run(coro)
    except MemberNotFoundError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        raise typer.Exit(1) from exc


def _display_lineage(lineage: LineageMap, store: InMemoryMemberStore, title: str):
    names = {m.id: m.full_name for m in store.members}
    table = Table(title=title)
    table.add_column("Gen", justify="right")
    table.add_column("Relationship")
    table.add_column("Name")
    table.add_column("Path", style="dim")
    for entry in lineage.values():
        table.add_row(
            str(entry.generation),
            entry.relationship_label,
            names.get(entry.member_id, entry.member_id),
            " > ".join(entry.path),
        )
    console.print(table)
    console.print(f"[dim]{len(lineage)} members across {lineage.generations_found} generations[/dim]")


@app.command()
def ancestors(
    tree_file: Path = typer.Argument(..., help="Path to tree JSON file"),
    member_id: str = typer.Argument(..., help="Member to start from"),
    generations: int = typer.Option(None, "--generations", "-g", help="Generations to walk (default from config)"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
):
    """List a member's ancestors by generation."""
    engine, store = load_engine(tree_file)
    lineage = _run(engine.compute_ancestors(member_id, generations))
    if as_json:
        typer.echo(json.dumps(lineage.to_dict(), indent=2))
        return
    _display_lineage(lineage, store, f"Ancestors of {member_id}")


@app.command()
def descendants(
    tree_file: Path = typer.Argument(..., help="Path to tree JSON file"),
    member_id: str = typer.Argument(..., help="Member to start from"),
    generations: int = typer.Option(None, "--generations", "-g", help="Generations to walk (default from config)"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
):
    """List a member's descendants by generation."""
    engine, store = load_engine(tree_file)
    lineage = _run(engine.compute_descendants(member_id, generations))
    if as_json:
        typer.echo(json.dumps(lineage.to_dict(), indent=2))
        return
    _display_lineage(lineage, store, f"Descendants of {member_id}")


@app.command()
def relate(
    tree_file: Path = typer.Argument(..., help="Path to tree JSON file"),
    first_id: str = typer.Argument(..., help="Member the relationship is described from"),
    second_id: str = typer.Argument(..., help="Member being described"),
    generations: int = typer.Option(None, "--generations", "-g", help="Generations to search (default from config)"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of text"),
):
    """Describe how two members are related."""
    engine, _ = load_engine(tree_file)

    async def run():
        result = await engine.classify_relationship(first_id, second_id, generations)
        label = await engine.describe_relationship(first_id, second_id, generations)
        return result, label

    result, label = _run(run())
    if as_json:
        payload = result.to_dict()
        payload["label"] = label.to_dict() if label else None
        typer.echo(json.dumps(payload, indent=2))
        return

    if label is None:
        depth = engine.config.max_generations if generations is None else generations
        console.print(f"[yellow]{second_id} is not related to {first_id} within {depth} generations[/yellow]")
        return
    body = f"[bold]{second_id}[/bold] is the [bold]{label.relationship}[/bold] of [bold]{first_id}[/bold]"
    closest = result.closest_common_ancestor
    if closest is not None:
        body += f"\nClosest common ancestor: {closest.ancestor_id} ({closest.generation_from_first}, {closest.generation_from_second})"
    if label.via_member_id:
        body += f"\nThrough marriage of {label.via_member_id}"
    console.print(Panel(body, title="Relationship"))


@app.command("validate-edge")
def validate_edge(
    tree_file: Path = typer.Argument(..., help="Path to tree JSON file"),
    parent_id: str = typer.Argument(..., help="Proposed parent"),
    child_id: str = typer.Argument(..., help="Proposed child"),
):
    """Check whether a parent-child edge may be added."""
    engine, _ = load_engine(tree_file)
    try:
        result = _run(engine.guard_parent_child_edge(parent_id, child_id))
    except RelationshipRejectedError as exc:
        console.print(f"[red]Rejected ({exc.code}):[/red] {exc.reason}")
        raise typer.Exit(1) from exc

    for warning in result.warnings:
        console.print(f"[yellow]Warning ({warning.code.value}):[/yellow] {warning.message}")
    console.print(f"[green]OK: {parent_id} -> {child_id} is plausible[/green]")


@app.command()
def duplicates(
    tree_file: Path = typer.Argument(..., help="Path to tree JSON file"),
    first_name: str = typer.Option(..., "--first", help="First name of the new member"),
    last_name: str = typer.Option("", "--last", help="Last name of the new member"),
    middle_name: str = typer.Option(None, "--middle", help="Middle name of the new member"),
    birth_date: str = typer.Option(None, "--birth-date", help="Birth date (YYYY-MM-DD)"),
):
    """Score a proposed new member against everyone in the tree."""
    engine, store = load_engine(tree_file)
    candidate = CandidateAttributes(
        first_name=first_name,
        last_name=last_name,
        middle_name=middle_name,
        birth_date=birth_date,
    )
    result = engine.detect_duplicates(candidate, store.members)
    if not result.has_potential_duplicates:
        console.print("[green]No likely duplicates found[/green]")
        return

    table = Table(title="Possible duplicates")
    table.add_column("ID", style="dim")
    table.add_column("Match")
    table.add_column("Score", justify="right")
    table.add_column("Confidence")
    for c in result.candidates:
        table.add_row(c.member_id, format_duplicate_warning(c), f"{c.score:.2f}", confidence_description(c.severity))
    console.print(table)


if __name__ == "__main__":
    app()
