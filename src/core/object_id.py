"""ObjectId-format identifiers for document records."""

import re
import secrets
import time


_OBJECT_ID_PATTERN = re.compile(r"[0-9a-f]{24}")


def new_object_id() -> str:
    """Return a fresh 24-character hex id: 4-byte timestamp followed by 8 random bytes."""
    return f"{int(time.time()) & 0xFFFFFFFF:08x}{secrets.token_hex(8)}"


def is_valid_object_id(value: object) -> bool:
    """Return True if value is an id in canonical ObjectId form (24 lowercase hex chars)."""
    return isinstance(value, str) and _OBJECT_ID_PATTERN.fullmatch(value) is not None
