"""SQLite-backed document store client with CRUD operations.

Each collection is a table of JSON documents: ``id`` (ObjectId string),
``created``/``updated`` timestamps and a ``data`` column holding the document body.
"""

import asyncio
import json
import logging
import re
import threading
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import aiosqlite

from src.core.config import settings
from src.core.object_id import new_object_id


logger = logging.getLogger(__name__)

# Columns stored outside the JSON body
_RECORD_COLUMNS = ("id", "created", "updated")


class DatabaseError(RuntimeError):
    """Raised when a document store operation fails."""


class RecordNotFoundError(DatabaseError):
    """Raised when a record does not exist in its collection."""


def _validate_collection_name(collection: str) -> None:
    """Validate that a collection name contains only alphanumeric characters and underscores."""
    if not re.match(r"^[a-zA-Z_][a-zA-Z0-9_]*$", collection):
        msg = f"Invalid collection name: {collection}. Only alphanumeric characters and underscores are allowed."
        raise ValueError(msg)


def _now() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def _json_default(value: object) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    msg = f"Object of type {type(value).__name__} is not JSON serializable"
    raise TypeError(msg)


def _row_to_record(columns: list[str], row: tuple[Any, ...]) -> dict[str, Any]:
    """Flatten a table row into a single document dict."""
    raw = dict(zip(columns, row, strict=True))
    body = json.loads(raw.pop("data") or "{}")
    return {**{key: raw[key] for key in _RECORD_COLUMNS}, **body}


def get_db_path(db_path: str | None = None) -> Path:
    """Get the resolved SQLite database file path."""
    path_str = db_path or settings.sqlite_db_path
    return Path(path_str).resolve()


def _field_expression(field: str) -> str:
    """Map a document field to its SQL expression."""
    if field in _RECORD_COLUMNS:
        return field
    return f"json_extract(data, '$.{field}')"


def _parse_value(value: str, *, is_like: bool = False) -> str | int | float | bool | None:
    """Parse a string value to the appropriate Python type for SQLite."""
    if is_like:
        escaped = value.replace("%", "\\%").replace("_", "\\_")
        return f"%{escaped}%"

    if value.isdigit():
        return int(value)
    if value.replace(".", "", 1).isdigit():
        return float(value)

    if value.lower() == "true":
        return True
    if value.lower() == "false":
        return False

    return value


def _get_sql_operator(op: str) -> str:
    """Map filter operator to SQL operator."""
    op_map = {
        "=": "=",
        "!=": "!=",
        ">": ">",
        "<": "<",
        ">=": ">=",
        "<=": "<=",
        "~": "LIKE",
    }
    sql_op = op_map.get(op)
    if not sql_op:
        msg = f"Unsupported operator: {op}"
        raise ValueError(msg)
    return sql_op


def _parse_single_comparison(comparison: str) -> tuple[str, str | int | float | None]:
    """Parse a single comparison expression into a SQL condition and parameter."""
    match = re.fullmatch(
        r"""\s*(\w+)\s*(!=|>=|<=|=|>|<|~)\s*(['"])([^'"]*)\3\s*""",
        comparison,
    )
    if not match:
        msg = f"Invalid filter syntax: {comparison}"
        raise ValueError(msg)

    field = match.group(1)
    op = match.group(2)
    raw_value = match.group(4)

    sql_op = _get_sql_operator(op)
    is_like = sql_op == "LIKE"
    value = _parse_value(raw_value, is_like=is_like)

    condition = f"{_field_expression(field)} {sql_op} ?"
    if is_like:
        condition += " ESCAPE '\\'"
    return condition, value


def _parse_or_group(or_group: str) -> tuple[str, list[str | int | float | None]]:
    """Parse a parenthesized OR group into a SQL condition and parameters."""
    inner = or_group[1:-1]  # Remove parentheses
    or_parts = [p.strip() for p in inner.split("||")]
    or_conditions = []
    or_params = []

    for part in or_parts:
        cond, value = _parse_single_comparison(part)
        or_conditions.append(cond)
        or_params.append(value)

    return f"({' OR '.join(or_conditions)})", or_params


def _split_and_conditions(filter_query: str) -> list[str]:
    """Split filter query by && while preserving parenthesized groups."""
    parts = []
    current = ""
    paren_depth = 0

    for char in filter_query:
        if char == "(":
            paren_depth += 1
        elif char == ")":
            paren_depth -= 1

        current += char

        if paren_depth == 0 and current.endswith("&&"):
            parts.append(current[:-2].strip())
            current = ""

    if current.strip():
        parts.append(current.strip())

    return parts


def parse_filter(filter_query: str) -> tuple[str, list[str | int | float | None]]:
    """Parse filter syntax into a SQL WHERE clause and parameter list.

    Supported syntax: ``field = "value"`` comparisons (=, !=, >, <, >=, <=, ~)
    joined by ``&&``, with parenthesized ``||`` groups.

    Raises:
        ValueError: If the expression cannot be parsed
    """
    if not filter_query:
        return "", []

    parts = _split_and_conditions(filter_query)
    conditions = []
    params = []

    for raw_part in parts:
        part = raw_part.strip()

        # Handle parenthesized OR groups
        if part.startswith("(") and part.endswith(")"):
            cond, cond_params = _parse_or_group(part)
            conditions.append(cond)
            params.extend(cond_params)
        else:
            # Handle regular condition
            cond, value = _parse_single_comparison(part)
            conditions.append(cond)
            params.append(value)

    return " AND ".join(conditions), params


def _order_clause(sort: str) -> str:
    """Build an ORDER BY clause from ``field`` / ``-field``; insertion order by default."""
    if not sort:
        return "rowid ASC"

    match = re.fullmatch(r"(-?)([A-Za-z_][A-Za-z0-9_]*)", sort.strip())
    if not match:
        logger.warning("Invalid sort parameter, using default", extra={"sort": sort})
        return "rowid ASC"

    direction = "DESC" if match.group(1) else "ASC"
    return f"{_field_expression(match.group(2))} {direction}, rowid ASC"


_db_connections: dict[tuple[int, int, str], aiosqlite.Connection] = {}
_db_lock = asyncio.Lock()


async def get_connection(*, db_path: str | None = None) -> aiosqlite.Connection:
    """Get or create a cached connection for the current thread, loop, and db path."""
    thread_id = threading.get_ident()
    loop = asyncio.get_running_loop()
    loop_id = id(loop)
    path = get_db_path(db_path)
    cache_key = (thread_id, loop_id, str(path))

    if cache_key in _db_connections:
        return _db_connections[cache_key]

    # Create new connection with async lock to prevent races
    async with _db_lock:
        # Double-check after acquiring lock
        if cache_key in _db_connections:
            return _db_connections[cache_key]

        path.parent.mkdir(parents=True, exist_ok=True)

        conn = await aiosqlite.connect(str(path))
        await conn.execute("PRAGMA journal_mode = WAL")

        _db_connections[cache_key] = conn

        logger.info(
            "Created new SQLite connection",
            extra={"db_path": str(path), "thread_id": thread_id, "loop_id": loop_id},
        )
        return conn


async def close_connection(*, db_path: str | None = None) -> None:
    """Close the cached SQLite connection for the current thread, loop, and db path."""
    thread_id = threading.get_ident()
    loop_id = id(asyncio.get_running_loop())
    path = get_db_path(db_path)
    cache_key = (thread_id, loop_id, str(path))

    conn = _db_connections.pop(cache_key, None)
    if conn is None:
        return

    try:
        await conn.close()
        logger.info(
            "Closed SQLite connection",
            extra={"thread_id": thread_id, "loop_id": loop_id, "db_path": str(path)},
        )
    except Exception as e:
        logger.warning(
            "Error closing SQLite connection",
            extra={"error": str(e), "thread_id": thread_id, "loop_id": loop_id},
        )


async def init_db(*, db_path: str | None = None) -> None:
    """Initialize the database schema by delegating to schema.init_db()."""
    from src.core import schema  # noqa: PLC0415 - schema imports this module

    await schema.init_db(db_path=db_path)


async def create_record(*, collection: str, data: dict[str, Any]) -> dict[str, Any]:
    """Insert a new document and return it with its assigned id and timestamps."""
    try:
        _validate_collection_name(collection)
        conn = await get_connection()

        record_id = new_object_id()
        now = _now()
        body = {key: value for key, value in data.items() if key not in _RECORD_COLUMNS}

        query = f"INSERT INTO {collection} (id, created, updated, data) VALUES (?, ?, ?, ?)"  # noqa: S608 - collection is validated
        await conn.execute(query, (record_id, now, now, json.dumps(body, default=_json_default)))
        await conn.commit()

        logger.info("Created record", extra={"collection": collection, "record_id": record_id})
        return {"id": record_id, "created": now, "updated": now, **body}
    except Exception as e:
        if isinstance(e, aiosqlite.OperationalError) and "no such table" in str(e):
            msg = f"Table '{collection}' does not exist. Call init_db() first."
            logger.error("Table not found", extra={"collection": collection})
            raise DatabaseError(msg) from e
        logger.error("create_record_failed", extra={"collection": collection, "error": str(e)})
        msg = f"Failed to create record in {collection}: {e}"
        raise DatabaseError(msg) from e


async def get_record(*, collection: str, record_id: str) -> dict[str, Any]:
    """Fetch a single document by ID, raising RecordNotFoundError if not found."""
    try:
        _validate_collection_name(collection)
        conn = await get_connection()

        query = f"SELECT id, created, updated, data FROM {collection} WHERE id = ?"  # noqa: S608 - collection is validated
        cursor = await conn.execute(query, (record_id,))
        row = await cursor.fetchone()

        if row is None:
            msg = f"Record not found in {collection}: {record_id}"
            raise RecordNotFoundError(msg)

        columns = [description[0] for description in cursor.description]

        logger.info("Retrieved record", extra={"collection": collection, "record_id": record_id})
        return _row_to_record(columns, row)
    except RecordNotFoundError:
        raise
    except Exception as e:
        logger.error("get_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)})
        msg = f"Failed to get record from {collection}: {e}"
        raise DatabaseError(msg) from e


async def update_record(*, collection: str, record_id: str, data: dict[str, Any]) -> dict[str, Any]:
    """Merge fields into a document by ID and return the updated document."""
    if not data:
        msg = "Empty update payload"
        raise ValueError(msg)

    try:
        current = await get_record(collection=collection, record_id=record_id)
        conn = await get_connection()

        body = {key: value for key, value in current.items() if key not in _RECORD_COLUMNS}
        body.update({key: value for key, value in data.items() if key not in _RECORD_COLUMNS})
        now = _now()

        query = f"UPDATE {collection} SET data = ?, updated = ? WHERE id = ?"  # noqa: S608 - collection is validated
        await conn.execute(query, (json.dumps(body, default=_json_default), now, record_id))
        await conn.commit()

        logger.info("Updated record", extra={"collection": collection, "record_id": record_id})
        return {"id": record_id, "created": current["created"], "updated": now, **body}
    except RecordNotFoundError:
        raise
    except Exception as e:
        logger.error("update_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)})
        msg = f"Failed to update record in {collection}: {e}"
        raise DatabaseError(msg) from e


async def add_to_set(*, collection: str, record_id: str, field: str, value: Any) -> dict[str, Any]:
    """Append value to a list field unless it is already present, returning the document."""
    record = await get_record(collection=collection, record_id=record_id)
    items = list(record.get(field) or [])
    if value in items:
        return record
    items.append(value)
    return await update_record(collection=collection, record_id=record_id, data={field: items})


async def delete_record(*, collection: str, record_id: str) -> None:
    """Delete a document by ID, raising RecordNotFoundError if not found."""
    try:
        _validate_collection_name(collection)
        conn = await get_connection()

        query = f"DELETE FROM {collection} WHERE id = ?"  # noqa: S608 - collection is validated
        cursor = await conn.execute(query, (record_id,))
        await conn.commit()

        if cursor.rowcount == 0:
            msg = f"Record not found in {collection}: {record_id}"
            raise RecordNotFoundError(msg)

        logger.info("Deleted record", extra={"collection": collection, "record_id": record_id})
    except RecordNotFoundError:
        raise
    except Exception as e:
        logger.error("delete_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)})
        msg = f"Failed to delete record from {collection}: {e}"
        raise DatabaseError(msg) from e


async def _select(
    *,
    collection: str,
    where_clause: str,
    params: list[Any],
    sort: str = "",
    limit: int | None = None,
) -> list[dict[str, Any]]:
    _validate_collection_name(collection)

    if where_clause:
        where_clause = f"WHERE {where_clause}"

    query = f"SELECT id, created, updated, data FROM {collection} {where_clause} ORDER BY {_order_clause(sort)}"  # noqa: S608 - collection is validated
    if limit is not None:
        query += " LIMIT ?"
        params = [*params, limit]

    conn = await get_connection()
    cursor = await conn.execute(query, params)
    rows = await cursor.fetchall()

    columns = [description[0] for description in cursor.description]
    return [_row_to_record(columns, row) for row in rows]


async def get_full_list(*, collection: str, filter_query: str = "", sort: str = "") -> list[dict[str, Any]]:
    """Return every document matching the filter."""
    try:
        where_clause, params = parse_filter(filter_query)
        records = await _select(collection=collection, where_clause=where_clause, params=params, sort=sort)
        logger.info("Listed full collection", extra={"collection": collection, "count": len(records)})
        return records
    except ValueError:
        raise
    except Exception as e:
        logger.error("get_full_list_failed", extra={"collection": collection, "error": str(e)})
        msg = f"Failed to list records from {collection}: {e}"
        raise DatabaseError(msg) from e


async def get_first_record(*, collection: str, field: str, value: Any) -> dict[str, Any] | None:
    """Return the earliest document whose ``field`` equals ``value``, or None.

    The value is bound as a query parameter and compared as given, so it is not
    subject to the filter grammar (quotes, numeric-looking strings).

    Raises:
        ValueError: If the field name is not a plain identifier
    """
    if not re.fullmatch(r"[A-Za-z_][A-Za-z0-9_]*", field):
        msg = f"Invalid field name: {field}"
        raise ValueError(msg)

    try:
        records = await _select(
            collection=collection, where_clause=f"{_field_expression(field)} = ?", params=[value], limit=1
        )
    except Exception as e:
        logger.error("get_first_record_failed", extra={"collection": collection, "field": field, "error": str(e)})
        msg = f"Failed to get first record from {collection}: {e}"
        raise DatabaseError(msg) from e

    if not records:
        return None

    logger.info("Retrieved first record", extra={"collection": collection, "record_id": records[0]["id"]})
    return records[0]


async def ping() -> bool:
    """Return True if the store answers a trivial query."""
    try:
        conn = await get_connection()
        cursor = await conn.execute("SELECT 1")
        row = await cursor.fetchone()
    except Exception as e:
        logger.warning("db_ping_failed", extra={"error": str(e)})
        return False
    return row is not None
