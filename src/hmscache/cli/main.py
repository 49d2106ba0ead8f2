"""
Command-line interface for hmscache.

Diagnostic commands over a hospital database and its caches.

Main Commands:
    init-db: Create the schema in a new or existing database file
    search: Run a cached search for one record type
    get: Look up one record by id
    related: List appointments, prescriptions or feedback of one patient or doctor
    history: Show a patient's visit history
    stats: Count every record type and show the resulting cache statistics

Example Usage:
    $ hmscache init-db hospital.db
    $ hmscache --db hospital.db search patient --term smith --sort name-asc --format table
    $ hmscache --db hospital.db search appointment --sort next-7 --repeat 3 --stats
    $ hmscache --db hospital.db get doctor 12 --format json
    $ hmscache --db hospital.db related appointment --doctor 3

Cache settings come from ``HMSCACHE_*`` environment variables
(e.g. ``HMSCACHE_SEARCH_TTL_SECONDS=30``).
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

import click
from rich.console import Console

from ..core.config import CacheConfig
from ..core.types import EntityKind, OutputFormat
from ..services.factory import HospitalServices, create_services
from ..storage.database import HospitalDatabase
from ..utils.error_handling import CacheError
from ..utils.formatter import (
    format_result,
    format_stats_text,
    render_stats_table,
    render_table,
    to_json_bytes,
)
from ..utils.logging_config import LogFormat, LogLevel, configure_logging

ENTITY_CHOICE = click.Choice([kind.value for kind in EntityKind])
FORMAT_CHOICE = click.Choice([fmt.value for fmt in OutputFormat])


@dataclass
class CliState:
    db_path: str

    def open(self) -> tuple[HospitalDatabase, HospitalServices]:
        if not Path(self.db_path).exists():
            click.echo(
                f"Error: database not found: {self.db_path} (run 'hmscache init-db {self.db_path}')",
                err=True,
            )
            sys.exit(1)
        try:
            config = CacheConfig.from_env()
        except CacheError as e:
            click.echo(f"Error: {e.message}", err=True)
            sys.exit(1)
        database = HospitalDatabase(self.db_path)
        return database, create_services(database, config)


def _fail(error: CacheError) -> None:
    click.echo(f"Error: {error.message}", err=True)
    for suggestion in error.suggestions:
        click.echo(f"  - {suggestion}", err=True)
    sys.exit(1)


@click.group()
@click.option(
    "--db",
    "db_path",
    envvar="HMSCACHE_DB",
    default="hospital.db",
    show_default=True,
    help="SQLite database file",
)
@click.option("--debug", is_flag=True, default=False, help="Enable debug logging")
@click.option(
    "--log-level",
    type=click.Choice([level.value for level in LogLevel]),
    default=LogLevel.WARNING.value,
    help="Log level",
)
@click.option(
    "--log-format",
    type=click.Choice([fmt.value for fmt in LogFormat]),
    default=LogFormat.SIMPLE.value,
    help="Log format",
)
@click.option("--log-file", help="Log file path")
@click.pass_context
def cli(
    ctx: click.Context,
    db_path: str,
    debug: bool,
    log_level: str,
    log_format: str,
    log_file: str | None,
) -> None:
    """hmscache - cached access to hospital management records"""
    if debug:
        log_level = LogLevel.DEBUG.value
    configure_logging(
        level=LogLevel(log_level),
        format_type=LogFormat(log_format),
        log_file=Path(log_file) if log_file else None,
        enable_file=bool(log_file),
        enable_console=True,
    )
    ctx.obj = CliState(db_path=db_path)


@cli.command("init-db")
@click.argument("path", type=click.Path(dir_okay=False))
def init_db_cmd(path: str) -> None:
    """Create the hospital schema in PATH."""
    try:
        with HospitalDatabase(path) as database:
            database.initialize()
    except CacheError as e:
        _fail(e)
    click.echo(f"Initialized database at {path}")


@cli.command("search")
@click.argument("entity", type=ENTITY_CHOICE)
@click.option("--term", default="", help="Search text (empty matches everything)")
@click.option("--limit", type=int, default=None, help="Page size (default: HMSCACHE_DEFAULT_PAGE_SIZE)")
@click.option("--offset", type=int, default=0, show_default=True, help="Rows to skip")
@click.option("--sort", "sort_name", default=None, help="Sort option, e.g. name-asc or next-7")
@click.option(
    "--format",
    "fmt",
    type=FORMAT_CHOICE,
    default=OutputFormat.TEXT.value,
    show_default=True,
    help="Output format",
)
@click.option(
    "--repeat",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="Run the search this many times (later runs are served from cache)",
)
@click.option("--stats", is_flag=True, default=False, help="Print cache statistics to stderr")
@click.pass_obj
def search_cmd(
    state: CliState,
    entity: str,
    term: str,
    limit: int | None,
    offset: int,
    sort_name: str | None,
    fmt: str,
    repeat: int,
    stats: bool,
) -> None:
    """Search ENTITY records through the cache."""
    database, services = state.open()
    service = services.by_kind(entity)
    output = OutputFormat(fmt)

    try:
        for _ in range(repeat):
            page = service.search(term, limit=limit, offset=offset, sort_by=sort_name)
        total = service.count(term, sort_by=sort_name)
    except CacheError as e:
        _fail(e)
    except (ValueError, TypeError) as e:
        raise click.BadParameter(str(e)) from e
    finally:
        database.close()

    if output == OutputFormat.TABLE:
        render_table(page, Console(), title=f"{entity} search", total=total)
    else:
        click.echo(format_result(page, output, total))

    if stats:
        click.echo(service.cache_stats(), err=True)
        click.echo(service.cache.statistics.get_performance_summary(), err=True)


@cli.command("get")
@click.argument("entity", type=ENTITY_CHOICE)
@click.argument("entity_id", type=int)
@click.option(
    "--format",
    "fmt",
    type=FORMAT_CHOICE,
    default=OutputFormat.TEXT.value,
    show_default=True,
    help="Output format",
)
@click.pass_obj
def get_cmd(state: CliState, entity: str, entity_id: int, fmt: str) -> None:
    """Show the ENTITY record with ENTITY_ID."""
    database, services = state.open()
    try:
        record = services.by_kind(entity).get(entity_id)
    except CacheError as e:
        _fail(e)
    finally:
        database.close()

    if record is None:
        click.echo(f"{entity} {entity_id} not found", err=True)
        sys.exit(1)

    output = OutputFormat(fmt)
    if output == OutputFormat.TABLE:
        render_table([record], Console(), title=entity)
    else:
        click.echo(format_result([record], output))


def _show(records: list, fmt: str, title: str) -> None:
    output = OutputFormat(fmt)
    if output == OutputFormat.TABLE:
        render_table(records, Console(), title=title)
    else:
        click.echo(format_result(records, output, len(records)))


@cli.command("related")
@click.argument("entity", type=click.Choice(["appointment", "prescription", "feedback"]))
@click.option("--patient", "patient_id", type=int, default=None, help="Patient id")
@click.option("--doctor", "doctor_id", type=int, default=None, help="Doctor id")
@click.option(
    "--format",
    "fmt",
    type=FORMAT_CHOICE,
    default=OutputFormat.TEXT.value,
    show_default=True,
    help="Output format",
)
@click.pass_obj
def related_cmd(
    state: CliState, entity: str, patient_id: int | None, doctor_id: int | None, fmt: str
) -> None:
    """List ENTITY records of one patient or one doctor."""
    if (patient_id is None) == (doctor_id is None):
        raise click.UsageError("Give exactly one of --patient or --doctor")

    database, services = state.open()
    service = services.by_kind(entity)
    try:
        if patient_id is not None:
            records = service.find_by_patient(patient_id)
        else:
            records = service.find_by_doctor(doctor_id)
    except CacheError as e:
        _fail(e)
    finally:
        database.close()
    _show(records, fmt, f"{entity} records")


@cli.command("history")
@click.argument("patient_id", type=int)
@click.option(
    "--format",
    "fmt",
    type=FORMAT_CHOICE,
    default=OutputFormat.TEXT.value,
    show_default=True,
    help="Output format",
)
@click.pass_obj
def history_cmd(state: CliState, patient_id: int, fmt: str) -> None:
    """Show the visit history of PATIENT_ID, newest first."""
    database, services = state.open()
    try:
        visits = services.visit_history(patient_id)
    except CacheError as e:
        _fail(e)
    finally:
        database.close()
    _show(visits, fmt, f"patient {patient_id} visits")


@cli.command("stats")
@click.option(
    "--format",
    "fmt",
    type=FORMAT_CHOICE,
    default=OutputFormat.TEXT.value,
    show_default=True,
    help="Output format",
)
@click.pass_obj
def stats_cmd(state: CliState, fmt: str) -> None:
    """Count every record type and show cache statistics."""
    database, services = state.open()
    counts: dict[str, int] = {}
    try:
        for kind, service in services.all().items():
            counts[kind.value] = service.count("")
    except CacheError as e:
        _fail(e)
    finally:
        database.close()

    stats = [service.stats() for service in services.all().values()]
    output = OutputFormat(fmt)
    if output == OutputFormat.JSON:
        click.echo(to_json_bytes([], extra={"counts": counts, "caches": stats}).decode("utf-8"))
    elif output == OutputFormat.TABLE:
        render_stats_table(stats, Console())
    else:
        for name, count in counts.items():
            click.echo(f"{name}: {count} records")
        click.echo(format_stats_text(stats))


def main() -> None:
    cli(prog_name="hmscache")


if __name__ == "__main__":
    main()
