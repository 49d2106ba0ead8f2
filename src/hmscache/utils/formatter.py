"""
Output formatting for hmscache.

Renders record pages and cache statistics for the CLI.

Key Functions:
    format_result: Text or JSON rendering of a page of records
    to_json_bytes: orjson serialization of a page of records
    format_text: One line per record
    render_table: Rich table of a page of records
    render_stats_table: Rich table of per-cache statistics

Supported Output Formats:
    - TEXT: ``#id field=value ...`` lines followed by a totals line
    - JSON: ``{"items": [...], "total": n}`` for programmatic use
    - TABLE: Rich console table
"""

from __future__ import annotations

from dataclasses import asdict, fields, is_dataclass
from decimal import Decimal
from typing import Any

import orjson
from rich.console import Console
from rich.table import Table

from ..core.types import OutputFormat


def _default(obj: Any) -> Any:
    if isinstance(obj, Decimal):
        return str(obj)
    raise TypeError(f"Type is not JSON serializable: {type(obj).__name__}")


def entity_to_dict(entity: Any) -> dict[str, Any]:
    if not is_dataclass(entity):
        raise TypeError(f"Expected a record dataclass, got {type(entity).__name__}")
    return asdict(entity)  # type: ignore[arg-type]


def to_json_bytes(entities: list[Any], total: int | None = None, extra: dict[str, Any] | None = None) -> bytes:
    """
    Serialize a page of records with orjson.

    Dates become ISO strings and Decimal costs become strings.

    Args:
        entities: Records to serialize
        total: Total matching records, if known
        extra: Additional top-level keys (e.g. cache statistics)

    Returns:
        Indented JSON bytes
    """
    payload: dict[str, Any] = {"items": [entity_to_dict(e) for e in entities]}
    if total is not None:
        payload["total"] = total
    if extra:
        payload.update(extra)
    return orjson.dumps(payload, default=_default, option=orjson.OPT_INDENT_2)


def _value_text(value: Any) -> str:
    if hasattr(value, "isoformat"):
        return value.isoformat(sep=" ") if hasattr(value, "hour") else value.isoformat()
    return str(value)


def format_entity(entity: Any) -> str:
    """``#id field=value ...`` with None fields omitted; rows without an id drop the prefix."""
    entity_id = getattr(entity, "id", None)
    parts = [] if entity_id is None else [f"#{entity_id}"]
    for f in fields(entity):
        if f.name == "id":
            continue
        value = getattr(entity, f.name)
        if value is None:
            continue
        text = _value_text(value)
        parts.append(f"{f.name}={text!r}" if " " in text else f"{f.name}={text}")
    return " ".join(parts)


def format_text(entities: list[Any], total: int | None = None) -> str:
    out = [format_entity(e) for e in entities]
    if total is not None:
        out.append(f"# shown={len(entities)} total={total}")
    return "\n".join(out)


def format_result(entities: list[Any], fmt: OutputFormat, total: int | None = None) -> str:
    """Render a page as text or JSON. TABLE output goes through ``render_table``."""
    if fmt == OutputFormat.JSON:
        return to_json_bytes(entities, total).decode("utf-8")
    return format_text(entities, total)


def render_table(
    entities: list[Any],
    console: Console | None = None,
    title: str | None = None,
    total: int | None = None,
) -> None:
    """Render a page of records as a rich table."""
    if console is None:
        console = Console()
    if not entities:
        console.print("[dim]No records found[/dim]")
        return

    names = [f.name for f in fields(entities[0])]
    caption = f"{len(entities)} of {total}" if total is not None else None
    table = Table(title=title, caption=caption)
    for name in names:
        table.add_column(name, justify="right" if name == "id" else "left")
    for entity in entities:
        row = []
        for name in names:
            value = getattr(entity, name)
            row.append("" if value is None else _value_text(value))
        table.add_row(*row)
    console.print(table)


STATS_COLUMNS = (
    "name",
    "id_cache_size",
    "search_cache_size",
    "id_hits",
    "id_misses",
    "search_hits",
    "search_misses",
    "hit_rate",
    "evictions",
    "expirations",
    "invalidations",
)


def format_stats_text(stats: list[dict[str, Any]]) -> str:
    lines = []
    for s in stats:
        lines.append(
            f"{s['name']}: id {s['id_cache_size']}/{s['id_cache_capacity']} "
            f"search {s['search_cache_size']}/{s['search_cache_capacity']} "
            f"hits={s['id_hits'] + s['search_hits']} "
            f"misses={s['id_misses'] + s['search_misses']} "
            f"hit_rate={s['hit_rate']:.2f} evictions={s['evictions']} "
            f"expirations={s['expirations']} invalidations={s['invalidations']}"
        )
    return "\n".join(lines)


def render_stats_table(stats: list[dict[str, Any]], console: Console | None = None) -> None:
    if console is None:
        console = Console()
    table = Table(title="Cache statistics")
    for column in STATS_COLUMNS:
        table.add_column(column, justify="left" if column == "name" else "right")
    for s in stats:
        table.add_row(
            *(f"{s[c]:.2f}" if c == "hit_rate" else str(s[c]) for c in STATS_COLUMNS)
        )
    console.print(table)
