#!/usr/bin/env python3
"""
Rewrite the JSON data file with fresh seed data (trips, users, roles, courses).

Usage:
  python scripts/reset_database.py [--data-file data/db.json] [--yes]
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from vacations_api.core.config import get_settings
from vacations_api.domain.seed import build_seed_document
from vacations_api.repositories.json_storage import StorageError, db_defaults, save


def main() -> None:
    settings = get_settings()
    ap = argparse.ArgumentParser(description="Reset the vacations data file to seed data")
    ap.add_argument("--data-file", default=settings.data_file, help="Path of the JSON data file")
    ap.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    args = ap.parse_args()

    path = Path(args.data_file)
    if path.exists() and not args.yes:
        answer = input(f"Overwrite {path}? [y/N] ").strip().lower()
        if answer not in ("y", "yes"):
            raise SystemExit("Aborted")
    document = db_defaults(build_seed_document())
    try:
        save(path, document)
    except StorageError as exc:
        raise SystemExit(str(exc))
    print(f"OK: {path} reset")
    print(f"  Users: {len(document['users'])}")
    print(f"  Trips: {len(document['trips'])}")
    print(f"  Courses: {len(document['trainingCourses'])}")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - CLI use
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
