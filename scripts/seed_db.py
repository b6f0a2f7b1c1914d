"""
Seed script for the Community Help API database (Firestore or the mock DB).

Usage:
  - Dry run (default): python scripts/seed_db.py
  - Apply to configured DB: python scripts/seed_db.py --apply
  - Other seed file: python scripts/seed_db.py --apply --seed path/to/seed.json

Behavior:
  - Loads `db_seed.json` from repo root.
  - Gets DB via `app.config.firebase.get_db()`, which returns the mock DB or real Firestore depending on settings.
  - Converts createdAt/updatedAt/statusHistory timestamps from ISO strings to datetimes.
  - Writes each top-level collection/document to the DB.

NOTE: Seeded users only get a profile document. To sign in as one of them on
real Firebase, create the Auth account with the same uid in the console.
"""

import argparse
import json
import os
import sys
from typing import Any

from app.config.firebase import get_db
from app.utils.firestore_helpers import parse_timestamp

TIMESTAMP_FIELDS = ("createdAt", "updatedAt", "startedAt", "resolvedAt")


def load_seed(path: str = "./db_seed.json") -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def prepare_document(data: dict) -> dict:
    doc = dict(data)
    for field in TIMESTAMP_FIELDS:
        if isinstance(doc.get(field), str):
            doc[field] = parse_timestamp(doc[field])
    history = doc.get("statusHistory")
    if isinstance(history, list):
        doc["statusHistory"] = [
            {**entry, "timestamp": parse_timestamp(entry.get("timestamp"))}
            for entry in history
        ]
    return doc


def write_to_db(db: Any, seed: dict, apply: bool = False) -> int:
    """Returns the number of documents written (0 on a dry run)."""
    written = 0
    for collection, docs in seed.items():
        for doc_id, data in docs.items():
            print(f"Preparing: {collection}/{doc_id}")
            if not apply:
                continue
            try:
                db.collection(collection).document(doc_id).set(prepare_document(data))
                written += 1
                print(f"Wrote: {collection}/{doc_id}")
            except Exception as e:
                print(f"Failed to write {collection}/{doc_id}: {e}")
    return written


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--apply", action="store_true", help="Write seed to the DB instead of dry-run")
    parser.add_argument("--seed", default=os.path.join(os.getcwd(), "db_seed.json"), help="Seed file path")
    args = parser.parse_args()

    if not os.path.exists(args.seed):
        print(f"Seed file not found: {args.seed}")
        sys.exit(1)

    seed = load_seed(args.seed)
    db = get_db()

    written = write_to_db(db, seed, apply=args.apply)

    if args.apply:
        print(f"Seeding completed: {written} documents.")
    else:
        print("Dry run complete. Re-run with --apply to write to DB.")


if __name__ == "__main__":
    main()
