"""Treasurer Dashboard - Backend.

Small HTTP API for a club treasury:
- Users register with a username/password and a role (admin|member).
- Events carry an allocated budget and the amount spent so far.
- Transactions record money movements against an event (by name).

Reads require a bearer token; writes additionally require the admin role.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
