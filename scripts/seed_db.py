"""
Seed script for the Civic Guard mock DB or Firestore.

Usage:
  - Dry run (default): python -m scripts.seed_db
  - Apply to configured DB: python -m scripts.seed_db --apply
  - Force mock DB even if FIREBASE configured: python -m scripts.seed_db --apply --force-mock
  - Print the stored reports and flag any whose status and reward disagree: python -m scripts.seed_db --dump

Behavior:
  - Loads `db_seed.json` from repo root ({"reports": {doc_id: fields}}).
  - Seed reports whose status/reward fields are inconsistent are skipped.
  - ISO `created_at` strings become timezone-aware datetimes.

NOTE: When applying to real Firestore, ensure `FIREBASE_CREDENTIALS_PATH` and `USE_MOCK_DB=false` are set in `.env`.
"""

import argparse
import json
import os
from datetime import datetime, timezone
from typing import Any, Dict

from app.config.firebase import get_db
from app.core.settings import settings
from app.services.report_store import REPORTS_COLLECTION
from app.services.status_workflow import StatusWorkflowEngine
from app.utils.firestore_helpers import snapshot_to_dict


def load_seed(path: str) -> Dict[str, Dict]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f).get(REPORTS_COLLECTION, {})


def prepare_report(data: dict) -> dict:
    doc = {
        "image_url": None,
        "status": "pending",
        "reward_type": None,
        "reward_amount": None,
        "is_blacklisted": False,
        "category": None,
    }
    doc.update(data)
    created_at = doc.get("created_at")
    if isinstance(created_at, str):
        created_at = datetime.fromisoformat(created_at.replace("Z", "+00:00"))
    doc["created_at"] = created_at or datetime.now(timezone.utc)
    return doc


def seed_reports(db: Any, reports: Dict[str, Dict], apply: bool = False) -> int:
    written = 0
    for doc_id, data in reports.items():
        doc = prepare_report(data)
        if not StatusWorkflowEngine.is_consistent(doc):
            print(f"Skipping {doc_id}: status {doc['status']} does not match reward "
                  f"({doc['reward_type']}, {doc['reward_amount']})")
            continue

        print(f"Preparing: {REPORTS_COLLECTION}/{doc_id} [{doc['status']}]")
        if not apply:
            continue
        try:
            db.collection(REPORTS_COLLECTION).document(doc_id).set(doc)
            written += 1
        except Exception as e:
            print(f"Failed to write {REPORTS_COLLECTION}/{doc_id}: {e}")
    return written


def dump_reports(db: Any) -> None:
    for snapshot in db.collection(REPORTS_COLLECTION).stream():
        doc = snapshot_to_dict(snapshot)
        marker = "" if StatusWorkflowEngine.is_consistent(doc) else "  <-- INCONSISTENT"
        print(f"{doc['id']}: {doc.get('status')} {doc.get('reward_type')} {doc.get('reward_amount')} "
              f"blacklisted={doc.get('is_blacklisted')}{marker}")


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--apply", action="store_true", help="Write seed to the DB instead of dry-run")
    parser.add_argument("--force-mock", action="store_true", help="Force use of mock DB even if FIREBASE configured")
    parser.add_argument("--dump", action="store_true", help="Print the reports currently stored and exit")
    args = parser.parse_args()

    if args.force_mock:
        print("Forcing mock DB usage for this run.")
        settings.USE_MOCK_DB = True

    db = get_db()

    if args.dump:
        dump_reports(db)
        return

    seed_path = os.path.join(os.getcwd(), "db_seed.json")
    if not os.path.exists(seed_path):
        print(f"Seed file not found: {seed_path}")
        return

    written = seed_reports(db, load_seed(seed_path), apply=args.apply)

    if args.apply:
        print(f"Seeding completed: {written} reports written.")
    else:
        print("Dry run complete. Re-run with --apply to write to DB.")


if __name__ == "__main__":
    main()
