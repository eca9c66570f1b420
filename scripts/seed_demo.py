#!/usr/bin/env python3
"""Seed a demo users database for the admin dashboard.

Usage:
    python scripts/seed_demo.py [--users N] [--db PATH]

This script:
1. Initializes the demo database
2. Inserts N users spread over the last six months, about two thirds verified

Signups are deterministic (seeded RNG) so the dashboard numbers are
reproducible between runs.
"""

from __future__ import annotations

import argparse
import random
import sys
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add src to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from userdash.db import repo  # noqa: E402
from userdash.db.session import get_db_session, init_db  # noqa: E402
from userdash.models.domain import UserEntity  # noqa: E402

# Constants
DEMO_DB_PATH = PROJECT_ROOT / "data" / "userdash.db"
DEMO_SEED = 42
DEMO_WINDOW_DAYS = 180

FIRST_NAMES = ["Ada", "Grace", "Linus", "Guido", "Barbara", "Ken", "Margaret", "Dennis"]
LAST_NAMES = ["Lovelace", "Hopper", "Torvalds", "Rossum", "Liskov", "Thompson", "Hamilton"]


def build_users(count: int, now: datetime) -> list[UserEntity]:
    """Generate demo users with creation times inside the demo window."""
    rng = random.Random(DEMO_SEED)
    users = []
    for i in range(count):
        first = rng.choice(FIRST_NAMES)
        last = rng.choice(LAST_NAMES)
        created_at = now - timedelta(seconds=rng.randint(0, DEMO_WINDOW_DAYS * 24 * 3600))
        users.append(
            UserEntity(
                id=str(uuid.UUID(int=rng.getrandbits(128))),
                name=f"{first} {last}",
                email=f"{first.lower()}.{last.lower()}.{i}@example.com",
                verified=rng.random() < 0.66,
                created_at=created_at,
            )
        )
    return users


def seed_database(db_path: Path, count: int) -> None:
    """Create tables and insert demo users."""
    init_db(db_path)
    users = build_users(count, datetime.now(timezone.utc))

    with get_db_session(db_path) as session:
        for user in users:
            repo.create_user(session, user)

    print(f"Inserted {len(users)} users")


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Seed demo users")
    parser.add_argument("--users", type=int, default=250, help="Number of users to create")
    parser.add_argument("--db", type=Path, default=DEMO_DB_PATH, help="SQLite database path")
    args = parser.parse_args()

    print("=" * 60)
    print("userdash Demo Seeding Script")
    print("=" * 60)

    if args.db.exists():
        print(f"Database already exists: {args.db} (delete it to reseed)")
        return 1

    seed_database(args.db, args.users)

    print("\n" + "=" * 60)
    print("Demo seeding complete!")
    print(f"Database: {args.db}")
    print("=" * 60)

    return 0


if __name__ == "__main__":
    sys.exit(main())
