from __future__ import annotations

from typing import Any, Dict, Optional

from treasurer_dashboard.config import Config
from treasurer_dashboard.db import connect, insert_returning_id, is_integrity_error
from treasurer_dashboard.models import ADMIN_ROLE

from .security import hash_password, verify_password


def public_user(row: Any | Dict[str, Any]) -> Dict[str, Any]:
    d = dict(row)
    d.pop("password_hash", None)
    return d


def get_user_by_username(conn: Any, username: str) -> Optional[Any]:
    # Exact match: usernames are stored and compared verbatim.
    return conn.execute(
        "SELECT * FROM users WHERE username=?",
        (username,),
    ).fetchone()


def verify_user_credentials(conn: Any, username: str, password: str) -> Optional[Any]:
    """Return the user row, or None when the username or the password is wrong."""
    row = get_user_by_username(conn, username)
    if row is None:
        return None
    if not verify_password(password, str(row["password_hash"])):
        return None
    return row


def create_user(conn: Any, *, username: str, password: str, role: str) -> int:
    """Insert a user and return its id.

    Raises ValueError("username_exists") on a duplicate. The SELECT is only a fast
    path; concurrent registrations are settled by the UNIQUE constraint.
    """
    if get_user_by_username(conn, username) is not None:
        raise ValueError("username_exists")

    try:
        return insert_returning_id(
            conn,
            "INSERT INTO users (username, password_hash, role) VALUES (?,?,?)",
            (username, hash_password(password), role),
        )
    except Exception as e:
        if is_integrity_error(e):
            raise ValueError("username_exists") from e
        raise


def bootstrap_admin_if_needed(cfg: Config) -> Optional[Dict[str, Any]]:
    """Create the first admin user if the users table is empty.

    - AUTH_BOOTSTRAP_ADMIN_USERNAME
    - AUTH_BOOTSTRAP_ADMIN_PASSWORD

    Both must be set, and this only runs when there are 0 rows in `users`.
    """
    username = cfg.AUTH_BOOTSTRAP_ADMIN_USERNAME
    password = cfg.AUTH_BOOTSTRAP_ADMIN_PASSWORD
    if not username or not password:
        return None

    with connect(cfg.DB_DSN) as conn:
        n = conn.execute("SELECT COUNT(*) AS n FROM users").fetchone()["n"]
        if int(n) > 0:
            return None

        user_id = create_user(conn, username=username, password=password, role=ADMIN_ROLE)
        return {"id": user_id, "username": username, "role": ADMIN_ROLE}
