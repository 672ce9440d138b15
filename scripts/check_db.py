"""Check that the configured database is reachable.

Usage:
  python scripts/check_db.py
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from treasurer_dashboard.config import load_config
from treasurer_dashboard.db import check_connection, redact_dsn


def main() -> int:
    cfg = load_config()
    try:
        solution = check_connection(cfg.DB_DSN)
    except Exception as e:
        print(f"Error connecting to the database at {redact_dsn(cfg.DB_DSN)}: {e}")
        return 1
    print(f"The solution is: {solution}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
