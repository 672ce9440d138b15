"""Events and transactions.

Values are written as the caller sent them. There are no range checks (a negative
budget is a valid row), and transactions point at events by free-text name only.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List

from treasurer_dashboard.db import insert_returning_id


def _row(row: Any) -> Dict[str, Any]:
    d = dict(row)
    # Postgres NUMERIC comes back as Decimal; keep JSON numbers on both engines.
    for k, v in d.items():
        if isinstance(v, Decimal):
            d[k] = float(v)
    return d


def list_events(conn: Any) -> List[Dict[str, Any]]:
    rows = conn.execute(
        "SELECT id, name, budget_allocated, amount_spent, status FROM events ORDER BY id"
    ).fetchall()
    return [_row(r) for r in rows]


def create_event(
    conn: Any,
    *,
    name: Any,
    budget_allocated: Any,
    amount_spent: Any,
    status: Any,
) -> int:
    return insert_returning_id(
        conn,
        "INSERT INTO events (name, budget_allocated, amount_spent, status) VALUES (?,?,?,?)",
        (name, budget_allocated, amount_spent, status),
    )


def list_transactions(conn: Any) -> List[Dict[str, Any]]:
    rows = conn.execute(
        "SELECT id, event_name, amount, date FROM transactions ORDER BY id"
    ).fetchall()
    return [_row(r) for r in rows]


def create_transaction(conn: Any, *, event_name: Any, amount: Any, date: Any) -> int:
    return insert_returning_id(
        conn,
        "INSERT INTO transactions (event_name, amount, date) VALUES (?,?,?)",
        (event_name, amount, date),
    )
