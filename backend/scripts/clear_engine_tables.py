#!/usr/bin/env python3
"""
Clear the tables the engine writes (match_suggestions, meetings, availability_slots).
Block and profile tables belong to other subsystems and are left alone.
Run with backend stopped: cd backend && python scripts/clear_engine_tables.py [--yes]
"""
import argparse
import sys
from pathlib import Path

# backend/scripts/ -> backend/
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import text

from meetmatch.db.session import engine
from meetmatch.db.tables import ENGINE_TABLE_NAMES


def main():
    parser = argparse.ArgumentParser(description="Delete all slots, meetings and suggestions")
    parser.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    args = parser.parse_args()

    tables = ", ".join(ENGINE_TABLE_NAMES)
    if not args.yes and input(f"Delete every row from {tables}? [y/N] ").strip().lower() != "y":
        print("Aborted.")
        return
    with engine.connect() as conn:
        # FK order: suggestions and meetings before the slots they point at
        for table in ENGINE_TABLE_NAMES:
            result = conn.execute(text(f"DELETE FROM {table}"))
            print(f"  {table}: {result.rowcount} rows deleted")
        conn.commit()
    print("Done.")


if __name__ == "__main__":
    main()
