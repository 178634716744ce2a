#!/usr/bin/env python3
"""
Recompute match suggestions now instead of waiting for the scheduler tick.

Usage:
  cd backend && python scripts/refresh_suggestions.py              # every owner with open slots
  cd backend && python scripts/refresh_suggestions.py --owner u1   # one owner
"""
import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from meetmatch.db.session import SessionLocal
from meetmatch.services.suggestion_service import owners_due_for_refresh, refresh_suggestions_for_owner


def main():
    parser = argparse.ArgumentParser(description="Refresh stored match suggestions")
    parser.add_argument("--owner", action="append", default=[], help="Owner id (repeatable); default: all due owners")
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s [%(name)s] %(message)s")

    owners = args.owner
    if not owners:
        db = SessionLocal()
        try:
            owners = owners_due_for_refresh(db)
        finally:
            db.close()
    if not owners:
        print("No owners with open slots.")
        return

    failed = 0
    for owner_id in owners:
        try:
            stored = refresh_suggestions_for_owner(owner_id)
            print(f"  {owner_id}: {stored} suggestion(s)")
        except Exception as e:
            failed += 1
            print(f"  {owner_id}: FAILED ({e})")
    print(f"Done. {len(owners) - failed}/{len(owners)} owners refreshed.")
    if failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
