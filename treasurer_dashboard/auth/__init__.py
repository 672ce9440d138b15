"""Authentication / authorization helpers.

Kept deliberately small:

- Users table (username/password hash + role)
- JWT access tokens sent as `Authorization: Bearer <token>`

The token carries the user id and role, so request authentication never touches
the database. Only the "admin" role may write events and transactions.
"""

from .deps import get_current_identity, require_admin
from .crud import bootstrap_admin_if_needed, create_user

__all__ = [
    "get_current_identity",
    "require_admin",
    "bootstrap_admin_if_needed",
    "create_user",
]
