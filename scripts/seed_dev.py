#!/usr/bin/env python
"""Seed development database with fixture data.

Seeds a sample bubble tree, media, and speaker schedule for local kiosk UI
testing.

Constraints:
- Refuses to run in staging or prod (KIOSK_ENV check)
- Idempotent: existing fixture rows are left untouched
- Never runs automatically (manual invocation only)

Usage:
    cd python && DATABASE_URL=... python ../scripts/seed_dev.py
"""

import os
import sys
from pathlib import Path

# kiosk and tests both live under python/
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "python"))


def main():
    # 1. Environment check (hard fail in staging/prod)
    kiosk_env = os.getenv("KIOSK_ENV", "local")
    if kiosk_env not in ("local", "test"):
        print(f"ERROR: seed_dev.py refuses to run in KIOSK_ENV={kiosk_env}")
        sys.exit(1)

    # 2. Check DATABASE_URL
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        print("ERROR: DATABASE_URL environment variable must be set")
        sys.exit(1)

    # 3. Import fixture data (single source of truth)
    from kiosk.db.engine import create_db_engine
    from kiosk.db.session import create_session_factory
    from tests.fixtures import seed_fixtures

    session = create_session_factory(create_db_engine(database_url))()
    try:
        report = seed_fixtures(session)
    finally:
        session.close()

    # 4. Report
    db_display = database_url.split("@")[1] if "@" in database_url else database_url
    print(f"Database: {db_display}")
    print(f"KIOSK_ENV: {kiosk_env}")
    print()
    for table, row_id, created in report:
        print(f"{'✓ Created' if created else '• Exists'}: {table} {row_id}")


if __name__ == "__main__":
    main()
