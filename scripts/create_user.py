"""Create a user in the configured DB.

Usage:
  python scripts/create_user.py --username alice --password '...' --role admin

NOTE: Useful for creating the first admin without going through /register.
"""

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from treasurer_dashboard.config import load_config
from treasurer_dashboard.db import init_db, connect
from treasurer_dashboard.auth.crud import create_user, get_user_by_username, public_user


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--username", required=True)
    ap.add_argument("--password", required=True)
    ap.add_argument("--role", default="member", help="admin|member")
    args = ap.parse_args()

    cfg = load_config()
    init_db(cfg.DB_DSN)

    with connect(cfg.DB_DSN) as conn:
        try:
            create_user(conn, username=args.username, password=args.password, role=args.role)
        except ValueError as e:
            sys.exit(f"Could not create user: {e}")
        u = public_user(get_user_by_username(conn, args.username))

    print("Created user:")
    print(u)


if __name__ == "__main__":
    main()
