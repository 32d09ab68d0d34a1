#!/usr/bin/env python3
"""
Load companies, users and jobs from a JSON fixture file.

Usage:
    python scripts/seed_db.py --input data/seed.json --db sqlite:///data/jobboard.db
"""

import argparse
import json
from pathlib import Path
import sys

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from jobboard.config import get_database_uri, load_env
from jobboard.database import Database, init_database
from jobboard.errors import InvalidArgumentError
from jobboard.repositories import CompanyStore, JobStore, UserStore


def seed(fixture_path: Path, db_url: str, dry_run: bool = False) -> bool:
    """
    Insert fixture rows through the stores.

    Existing companies and users are skipped; jobs have no natural key and
    are always inserted.

    Args:
        fixture_path: JSON file with "companies", "users" and "jobs" lists
        db_url: SQLAlchemy database URL
        dry_run: If True, only report what would be loaded
    """
    print(f"Loading fixtures from {fixture_path}...")
    with open(fixture_path) as f:
        data = json.load(f)

    companies = data.get("companies", [])
    users = data.get("users", [])
    jobs = data.get("jobs", [])
    print(f"Found {len(companies)} companies, {len(users)} users, {len(jobs)} jobs")

    if dry_run:
        print("\n[DRY RUN] Would load:")
        for company in companies[:5]:
            print(f"  company {company['handle']}: {company['name']}")
        for job in jobs[:5]:
            print(f"  job {job['title']} @ {job['company_handle']}")
        return True

    print(f"\nInitializing database at {db_url}...")
    db = Database(init_database(db_url))
    company_store, user_store, job_store = CompanyStore(db), UserStore(db), JobStore(db)

    created = 0
    skipped = 0

    for company in companies:
        try:
            company_store.create(company)
            created += 1
        except InvalidArgumentError as e:
            print(f"⚠️  Skipping: {e.message}")
            skipped += 1

    for user in users:
        try:
            user_store.register(
                username=user["username"],
                password=user["password"],
                first_name=user["firstName"],
                last_name=user["lastName"],
                email=user["email"],
                is_admin=user.get("isAdmin", False),
            )
            created += 1
        except InvalidArgumentError as e:
            print(f"⚠️  Skipping: {e.message}")
            skipped += 1

    for job in jobs:
        job_store.create(job)
        created += 1

    db.dispose()
    print(f"\n✅ Seed complete!")
    print(f"   Created: {created}")
    print(f"   Skipped: {skipped}")
    return True


def main():
    load_env()
    parser = argparse.ArgumentParser(description="Seed the job board database from JSON")
    parser.add_argument("--input", type=Path, default=Path("data/seed.json"),
                       help="Path to JSON fixture file")
    parser.add_argument("--db", default=None,
                       help="SQLAlchemy database URL (default: DATABASE_URL)")
    parser.add_argument("--dry-run", action="store_true",
                       help="Show what would be loaded without writing")

    args = parser.parse_args()

    if not args.input.exists():
        print(f"❌ Fixture file not found: {args.input}")
        sys.exit(1)

    seed(args.input, args.db or get_database_uri(), dry_run=args.dry_run)


if __name__ == "__main__":
    main()
