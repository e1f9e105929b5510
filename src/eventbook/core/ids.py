"""
Short public identifiers.

Events carry a 10-character lowercase hex id next to their storage primary key.
It is printed on tickets and encoded into booking QR payloads, so it has to be
short; uniqueness is not re-checked against storage.
"""

from __future__ import annotations

import secrets

SHORT_ID_LENGTH = 10


def generate_short_id() -> str:
    """Return 10 lowercase hex characters derived from 5 random bytes."""
    return secrets.token_hex(SHORT_ID_LENGTH // 2)[:SHORT_ID_LENGTH]
