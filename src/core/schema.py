"""Document collection schema management (code-first approach)."""

import logging

from src.core import db_client


logger = logging.getLogger(__name__)


# Central list of all collections in the schema
COLLECTIONS = [
    "users",
    "tasks",
]

# Secondary indexes on document fields, keyed by collection
_INDEXES: dict[str, list[str]] = {
    "users": [
        "CREATE INDEX IF NOT EXISTS idx_users_name ON users (json_extract(data, '$.name'))",
    ],
    "tasks": [
        "CREATE INDEX IF NOT EXISTS idx_tasks_name ON tasks (json_extract(data, '$.name'))",
        "CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks (json_extract(data, '$.status'))",
        "CREATE INDEX IF NOT EXISTS idx_tasks_user_name ON tasks (json_extract(data, '$.user_name'))",
    ],
}


def _create_table_sql(collection_name: str) -> str:
    """Get the CREATE TABLE statement for a document collection."""
    return (
        f"CREATE TABLE IF NOT EXISTS {collection_name} ("  # noqa: S608 - names come from COLLECTIONS
        "id TEXT PRIMARY KEY, "
        "created TEXT NOT NULL, "
        "updated TEXT NOT NULL, "
        "data TEXT NOT NULL DEFAULT '{}'"
        ")"
    )


async def init_db(*, db_path: str | None = None) -> None:
    """Create every collection table and index (idempotent)."""
    logger.info("Starting document schema sync...")

    conn = await db_client.get_connection(db_path=db_path)
    for collection_name in COLLECTIONS:
        await conn.execute(_create_table_sql(collection_name))
        for index_sql in _INDEXES.get(collection_name, []):
            await conn.execute(index_sql)
        logger.info("Collection %s is ready", collection_name)
    await conn.commit()

    logger.info("Document schema sync complete")
