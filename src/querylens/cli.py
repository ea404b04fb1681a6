"""CLI entrypoint for querylens."""

import json
from datetime import datetime
from pathlib import Path

import click

from querylens import __version__
from querylens.config import QueryLensConfig
from querylens.dictionary.fuzzy import FuzzyTermResolver
from querylens.dictionary.loader import dump_dictionary
from querylens.errors import DictionaryError, ExecutorFailure
from querylens.execution.demo import DEMO_USER, seed_demo_database
from querylens.execution.duckdb_store import DuckDBDataStore
from querylens.logging_setup import setup_logging
from querylens.orchestrator.runtime import QueryEngine, QueryRequest
from querylens.planning.ambiguity import ambiguity_to_question, apply_table_choice
from querylens.planning.schema import PlanResponse, QueryResult, ResponseStatus
from querylens.tagging.models import UserContext


def _echo_json(data) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


def _parse_now(value: str | None) -> datetime | None:
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError as e:
        raise click.BadParameter(f"expected ISO date/time, got {value!r}", param_hint="--now") from e


def _build_engine(config: QueryLensConfig, db_path: str | None = None, with_store: bool = True) -> QueryEngine:
    if db_path is not None:
        config.db_path = Path(db_path)
    try:
        return QueryEngine.from_config(config, with_store=with_store)
    except DictionaryError as e:
        click.echo(f"❌ {e.message}", err=True)
        raise click.Abort()


def _print_clarification(response: PlanResponse) -> None:
    click.echo(f"\n🔍 {response.message}")
    if response.status is ResponseStatus.AMBIGUOUS_TABLE:
        for i, candidate in enumerate(response.candidates, 1):
            click.echo(f"  {i}. {candidate.table} (score {candidate.score:.1f})")
    if response.suggestions:
        click.echo(f"\nSuggestions: {', '.join(response.suggestions)}")


def _print_result(result: QueryResult) -> None:
    plan = result.plan
    click.echo(f"\n📋 {plan.primary_table}" + (f" + {', '.join(plan.joins)}" if plan.joins else ""))
    for predicate in plan.predicates:
        click.echo(f"   filter: {predicate.kind} on {predicate.table}.{predicate.field}")
    for term in plan.search_terms:
        click.echo(f"   search: '{term.value}' in {term.table}")
    for diagnostic in plan.diagnostics:
        click.echo(f"   ⚠️  {diagnostic}")

    click.echo(f"\n✅ {result.row_count} row(s) in {result.execution_time_ms:.1f}ms")
    if result.truncated:
        click.echo(f"   (truncated to {plan.row_limit})")
    for row in result.rows:
        click.echo("   " + ", ".join(f"{k}={v}" for k, v in row.items()))


def _choose_table(response: PlanResponse) -> str:
    question = ambiguity_to_question(response.candidates, [e.text for e in response.entities])
    click.echo(f"\n{question['question']}")
    for j, option in enumerate(question["options"], 1):
        click.echo(f"  {j}. {option}")
    while True:
        choice = click.prompt("\nYour choice (number)", type=int)
        if 1 <= choice <= len(question["options"]):
            return apply_table_choice(response.candidates, question["options"][choice - 1])
        click.echo(f"Invalid choice. Please enter a number between 1 and {len(question['options'])}")


@click.group()
@click.version_option(__version__)
@click.option("--log-level", default=None, help="Log level (default: QL_LOG_LEVEL or INFO)")
@click.option("--json-logs", is_flag=True, default=False, help="Emit JSON log lines")
@click.pass_context
def main(ctx: click.Context, log_level: str | None, json_logs: bool):
    """querylens - natural-language lookups over a business database."""
    try:
        config = QueryLensConfig.from_env()
    except ValueError as e:
        raise click.UsageError(str(e))
    if log_level:
        config.log_level = log_level.upper()
    config.log_json = config.log_json or json_logs
    setup_logging(config.log_level, json_output=config.log_json)
    ctx.obj = config


@main.command()
@click.argument("text")
@click.option("--user", default=None, help="Display name of the asking user")
@click.option("--now", default=None, help="Reference time, ISO format (default: now)")
@click.pass_obj
def tag(config: QueryLensConfig, text: str, user: str | None, now: str | None):
    """Show the entities recognised in TEXT."""
    engine = _build_engine(config, with_store=False)
    context = UserContext(display_name=user, now=_parse_now(now) or datetime.now())
    entities = engine.tag(text, context)
    _echo_json([e.model_dump(mode="json") for e in entities])


@main.command()
@click.argument("text")
@click.option("--user", default=None, help="Display name of the asking user")
@click.option("--now", default=None, help="Reference time, ISO format (default: now)")
@click.option("--table", default=None, help="Force the primary table")
@click.option(
    "--db-path",
    default=None,
    type=click.Path(),
    help="DuckDB file used to resolve the current user (optional)",
)
@click.pass_obj
def plan(
    config: QueryLensConfig,
    text: str,
    user: str | None,
    now: str | None,
    table: str | None,
    db_path: str | None,
):
    """Show the compiled plan for TEXT without running it."""
    engine = _build_engine(config, db_path, with_store=db_path is not None)
    request = QueryRequest(text=text, user_display_name=user, now=_parse_now(now), table=table)
    try:
        response = engine.analyze(request)
    except ValueError as e:
        click.echo(f"❌ {e}", err=True)
        raise click.Abort()
    _echo_json(response.model_dump(mode="json", by_alias=True))


@main.command()
@click.argument("text")
@click.option(
    "--db-path",
    default=None,
    type=click.Path(),
    help="Path to DuckDB database file (default: QL_DB_PATH)",
)
@click.option("--user", default=None, help="Display name of the asking user")
@click.option("--now", default=None, help="Reference time, ISO format (default: now)")
@click.option("--table", default=None, help="Force the primary table")
@click.option("--limit", default=None, type=int, help="Maximum rows to return")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the full result as JSON")
@click.option("--interactive", is_flag=True, default=False, help="Ask which table to use when ambiguous")
@click.pass_obj
def ask(
    config: QueryLensConfig,
    text: str,
    db_path: str | None,
    user: str | None,
    now: str | None,
    table: str | None,
    limit: int | None,
    as_json: bool,
    interactive: bool,
):
    """Answer TEXT against the database."""
    engine = _build_engine(config, db_path)
    if not config.db_path.exists():
        click.echo(f"❌ Database not found: {config.db_path}", err=True)
        click.echo("   Run 'querylens demo-db' to create a demo database.", err=True)
        raise click.Abort()

    request = QueryRequest(
        text=text, user_display_name=user, now=_parse_now(now), table=table, row_limit=limit
    )
    try:
        result = engine.run(request)
        if result.status is ResponseStatus.AMBIGUOUS_TABLE and interactive:
            request.table = _choose_table(result)
            result = engine.run(request)
    except ExecutorFailure as e:
        click.echo(f"❌ {e.message}", err=True)
        raise click.Abort()
    except ValueError as e:
        click.echo(f"❌ {e}", err=True)
        raise click.Abort()

    if as_json:
        _echo_json(result.model_dump(mode="json", by_alias=True))
    elif result.ok:
        _print_result(result)
    else:
        _print_clarification(result)


@main.command()
@click.argument("key")
@click.option("--limit", default=None, type=int, help="Maximum suggestions (default: QL_MAX_SUGGESTIONS)")
@click.option("--table", default=None, help="Only match terms owned by this table")
@click.pass_obj
def resolve(config: QueryLensConfig, key: str, limit: int | None, table: str | None):
    """Resolve KEY against the term dictionary."""
    engine = _build_engine(config, with_store=False)
    if table is not None and table not in engine.dictionary.tables:
        click.echo(f"❌ Unknown table: {table}", err=True)
        raise click.Abort()
    resolver: FuzzyTermResolver = engine.resolver
    resolution = resolver.resolve(key, limit=limit or config.max_suggestions, table=table)
    _echo_json(resolution.model_dump(mode="json"))


@main.command()
@click.argument("table_name")
@click.option(
    "--db-path",
    default=None,
    type=click.Path(),
    help="Path to DuckDB database file (default: QL_DB_PATH)",
)
@click.pass_obj
def describe(config: QueryLensConfig, table_name: str, db_path: str | None):
    """Describe TABLE_NAME's columns, searchable fields and foreign keys."""
    path = Path(db_path) if db_path else config.db_path
    if not path.exists():
        click.echo(f"❌ Database not found: {path}", err=True)
        raise click.Abort()
    store = DuckDBDataStore(path)
    try:
        description = store.describe_table(table_name)
    except (ValueError, ExecutorFailure) as e:
        click.echo(f"❌ {e}", err=True)
        raise click.Abort()
    _echo_json(description.model_dump(mode="json"))


@main.command("demo-db")
@click.option(
    "--db-path",
    default=None,
    type=click.Path(),
    help="Path to DuckDB database file (default: QL_DB_PATH)",
)
@click.option("--force", is_flag=True, default=False, help="Overwrite an existing database file")
@click.pass_obj
def demo_db(config: QueryLensConfig, db_path: str | None, force: bool):
    """Create a demo database with the eight business tables."""
    path = Path(db_path) if db_path else config.db_path
    if path.exists() and not force:
        click.echo(f"❌ {path} already exists (use --force to overwrite)", err=True)
        raise click.Abort()
    counts = seed_demo_database(path)
    click.echo(f"✅ Demo database written to {path}")
    for table, count in counts.items():
        click.echo(f"   {table}: {count} rows")
    click.echo(f"\nTry: querylens ask \"my tasks\" --db-path {path} --user \"{DEMO_USER}\"")


@main.command("export-dictionary")
@click.argument("path", type=click.Path(dir_okay=False))
@click.pass_obj
def export_dictionary(config: QueryLensConfig, path: str):
    """Write the active term dictionary to PATH as YAML."""
    engine = _build_engine(config, with_store=False)
    written = dump_dictionary(engine.dictionary, path)
    click.echo(f"✅ Dictionary written to {written}")


if __name__ == "__main__":
    main()
