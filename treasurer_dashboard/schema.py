"""Database schema for the Treasurer Dashboard.

Written for SQLite first; the Postgres schema is generated from it with a small set of
transformations (types + autoincrement).

NOTE: transactions.event_name is free text. It is matched against events.name by
convention only; there is no foreign key.
"""

from __future__ import annotations

import re


SCHEMA_SQLITE = r"""
PRAGMA foreign_keys = ON;

-- Users / Auth
-- role is stored as given; only 'admin' is privileged.
CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    username TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    role TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS events (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT,
    budget_allocated NUMERIC,
    amount_spent NUMERIC,
    status TEXT
);
CREATE INDEX IF NOT EXISTS idx_events_name ON events (name);

CREATE TABLE IF NOT EXISTS transactions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    event_name TEXT,
    amount NUMERIC,
    date TEXT
);
CREATE INDEX IF NOT EXISTS idx_transactions_event_name ON transactions (event_name);
"""


def _sqlite_to_postgres(ddl: str) -> str:
    # Remove SQLite pragmas
    lines: list[str] = []
    for line in ddl.splitlines():
        if line.strip().upper().startswith("PRAGMA "):
            continue
        lines.append(line)
    out = "\n".join(lines)

    # Money columns keep two decimals on Postgres.
    out = re.sub(r"\bNUMERIC\b", "NUMERIC(12, 2)", out)

    # AUTOINCREMENT primary keys
    out = re.sub(
        r"INTEGER\s+PRIMARY\s+KEY\s+AUTOINCREMENT",
        "BIGSERIAL PRIMARY KEY",
        out,
        flags=re.IGNORECASE,
    )
    out = re.sub(r"\bAUTOINCREMENT\b", "", out, flags=re.IGNORECASE)

    return out


SCHEMA_POSTGRES = _sqlite_to_postgres(SCHEMA_SQLITE)


def get_schema_sql(dialect: str) -> str:
    d = (dialect or "").lower()
    if d.startswith("post"):
        return SCHEMA_POSTGRES
    return SCHEMA_SQLITE
