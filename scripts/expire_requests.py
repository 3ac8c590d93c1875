#!/usr/bin/env python3
"""
Cancel mentorship requests left pending past the expiry window.
Meant for cron; running it twice in a row is harmless.
  poetry run python scripts/expire_requests.py
  PYTHONPATH=. python scripts/expire_requests.py --dry-run
"""
import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from clstr.core.deps import get_mentorship_service, get_store
from clstr.core.exceptions import MentorshipError

logging.basicConfig(
    format="%(asctime)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
log = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Auto-expire stale mentorship requests")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List the requests that would expire without changing them",
    )
    args = parser.parse_args()

    store = get_store()
    service = get_mentorship_service(store)

    try:
        if args.dry_run:
            cutoff = datetime.now(timezone.utc) - service.expiry
            stale = store.list_stale_pending(cutoff)
            for request in stale:
                print(f"{request.id}  created {request.created_at.isoformat()}")
            print(f"{len(stale)} request(s) would expire")
            return 0

        expired = service.auto_expire_sweep()
    except MentorshipError as e:
        log.error("Sweep failed: %s", e)
        return 1

    print(f"Expired {len(expired)} request(s)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
