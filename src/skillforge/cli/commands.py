"""CLI commands for SkillForge.

Commands:
- serve: Run the Web API with uvicorn
- init-db: Create the SQLite schema
- check-llm: Check that the LLM server answers
- concepts: Generate (or fetch cached) concepts for a topic
- problems: Generate practice problems for a topic
- stats: Show a user's dashboard stats and achievements
"""

import typer
from rich.console import Console
from rich.table import Table

from skillforge.config.app_config import get_config_path, load_app_config
from skillforge.core.concept_generator import ConceptGenerationError, generate_concepts
from skillforge.core.problem_generator import (
    DEFAULT_COUNT,
    DEFAULT_DIFFICULTY,
    PROBLEM_DIFFICULTIES,
    ProblemGenerationError,
    generate_problems,
)
from skillforge.core.progress_tracker import ANONYMOUS_USER, XP_PER_LEVEL, get_overview
from skillforge.llm.client import LLMClient, LLMConfig, LLMConnectionError, LLMError
from skillforge.web.services import AppServices

app = typer.Typer(
    name="skillforge",
    help="AI learning backend: generated concepts, practice problems and progress.",
    no_args_is_help=True,
)

console = Console()


def _load_services() -> AppServices:
    """Build services from configuration and make sure the schema exists."""
    services = AppServices.from_config(load_app_config())
    services.database.init_schema()
    return services


def _truncate(text: str, max_len: int = 120) -> str:
    """Truncate text with ellipsis if too long."""
    if len(text) <= max_len:
        return text
    return text[:max_len - 3] + "..."


def _llm_failure(e: Exception) -> None:
    if isinstance(e, LLMConnectionError):
        console.print("[red]✗ Could not connect to the LLM server[/red]")
        console.print(f"  [dim]{e}[/dim]")
    else:
        console.print(f"[red]✗ LLM error: {e}[/red]")
    raise typer.Exit(code=1)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the Web API."""
    import uvicorn

    console.print(f"[blue]Starting SkillForge API on {host}:{port}[/blue]")
    uvicorn.run("skillforge.web.api:app", host=host, port=port, reload=reload)


@app.command(name="init-db")
def init_db() -> None:
    """Create the database schema (idempotent)."""
    from skillforge.db.database import Database

    config = load_app_config()
    database = Database(config.database.path)
    database.init_schema()
    console.print("[green]✓ Schema ready[/green]")
    console.print(f"  [dim]path:[/dim] {database.path}")


@app.command(name="check-llm")
def check_llm() -> None:
    """Check that the configured LLM server answers."""
    config = load_app_config()
    client = LLMClient(LLMConfig.from_yaml(config.config_path or get_config_path()))
    console.print(f"  [dim]LLM:[/dim] {client.config.provider}/{client.config.model}")
    console.print(f"  [dim]url:[/dim] {client.config.base_url}")

    if not client.is_available():
        console.print("[red]✗ Could not connect to the LLM server[/red]")
        raise typer.Exit(code=1)

    console.print("[green]✓ LLM server reachable[/green]")


@app.command()
def concepts(
    topic: str = typer.Argument(..., help="Topic to learn"),
    user: str | None = typer.Option(
        None, "--user", "-u", help="User ID to start tracking progress for"
    ),
) -> None:
    """Generate the concepts of a topic, or show the stored ones."""
    if not topic.strip():
        console.print("[red]✗ Topic is required[/red]")
        raise typer.Exit(code=1)

    services = _load_services()
    console.print(f"[blue]Loading concepts for '{topic}'...[/blue]")
    console.print(
        f"  [dim]LLM:[/dim] {services.llm.config.provider}/{services.llm.config.model}"
    )

    try:
        result = generate_concepts(
            topic=topic,
            llm=services.llm,
            content=services.content,
            progress=services.progress,
            user_id=user,
        )
    except ConceptGenerationError as e:
        console.print(f"[red]✗ Generation error: {e}[/red]")
        raise typer.Exit(code=1)
    except LLMError as e:
        _llm_failure(e)

    source = "cached" if result.cached else "generated"
    console.print(f"[green]✓ {result.topic.name} ({result.topic.category}, {source})[/green]")
    console.print(f"  [dim]topic_id:[/dim] {result.topic.id}")
    if result.topic.description:
        console.print(f"  [dim]{_truncate(result.topic.description)}[/dim]")

    for concept in result.concepts:
        console.print(
            f"  {concept.order_index + 1}. {concept.title} "
            f"[dim]({concept.difficulty})[/dim]"
        )


@app.command()
def problems(
    topic: str = typer.Argument(..., help="Topic name"),
    topic_id: str | None = typer.Option(
        None, "--topic-id", "-t", help="Stored topic to cache problems under"
    ),
    difficulty: str = typer.Option(
        DEFAULT_DIFFICULTY, "--difficulty", "-d", help="easy, medium, hard or expert"
    ),
    count: int = typer.Option(
        DEFAULT_COUNT, "--count", "-n", min=1, max=20, help="Number of problems"
    ),
) -> None:
    """Generate multiple-choice problems for a topic."""
    if difficulty not in PROBLEM_DIFFICULTIES:
        console.print(f"[red]✗ Invalid difficulty: {difficulty}[/red]")
        console.print(f"  Valid values: {', '.join(PROBLEM_DIFFICULTIES)}")
        raise typer.Exit(code=1)

    services = _load_services()
    console.print(f"[blue]Loading {count} {difficulty} problems for '{topic}'...[/blue]")

    try:
        result = generate_problems(
            topic=topic,
            llm=services.llm,
            content=services.content,
            topic_id=topic_id,
            difficulty=difficulty,
            count=count,
        )
    except ProblemGenerationError as e:
        console.print(f"[red]✗ Generation error: {e}[/red]")
        raise typer.Exit(code=1)
    except LLMError as e:
        _llm_failure(e)

    source = "cached" if result.cached else "generated"
    console.print(f"[green]✓ {len(result.problems)} problems ({source})[/green]")

    for index, problem in enumerate(result.problems, start=1):
        console.print(f"\n[bold]{index}. {problem['question']}[/bold]")
        for option_index, option in enumerate(problem["options"]):
            marker = "[green]*[/green]" if option_index == problem["correct_answer"] else " "
            console.print(f"  {marker} {chr(ord('A') + option_index)}) {option}")


@app.command()
def stats(
    user: str = typer.Option(ANONYMOUS_USER, "--user", "-u", help="User ID"),
) -> None:
    """Show dashboard stats, per-topic progress and achievements."""
    services = _load_services()
    overview = get_overview(services.progress, user)
    s = overview.stats

    console.print(f"[bold]Progress for {user}[/bold]")
    console.print(f"  [dim]level:[/dim]    {s.level} ({s.level_xp}/{XP_PER_LEVEL} XP)")
    console.print(f"  [dim]total xp:[/dim] {s.total_xp}")
    console.print(f"  [dim]accuracy:[/dim] {s.accuracy}% ({s.total_correct}/{s.total_problems})")
    console.print(f"  [dim]concepts:[/dim] {s.concepts_learned}")
    console.print(f"  [dim]streak:[/dim]   {s.streak} days")

    if overview.progress:
        table = Table(title="Topics")
        table.add_column("Topic")
        table.add_column("Concepts", justify="right")
        table.add_column("Solved", justify="right")
        table.add_column("Correct", justify="right")
        table.add_column("XP", justify="right")
        for row in overview.progress:
            name = row.topic["name"] if row.topic else row.topic_id
            table.add_row(
                name,
                str(row.concepts_completed),
                str(row.problems_solved),
                str(row.problems_correct),
                str(row.xp_earned),
            )
        console.print(table)

    unlocked = [a for a in overview.achievements if a.unlocked]
    console.print(f"\n[bold]Achievements[/bold] ({len(unlocked)}/{len(overview.achievements)})")
    for achievement in overview.achievements:
        mark = "[green]✓[/green]" if achievement.unlocked else "[dim]·[/dim]"
        console.print(f"  {mark} {achievement.name} [dim]- {achievement.description}[/dim]")


if __name__ == "__main__":
    app()
