#!/usr/bin/env python3
"""
Pull recent Strava runs into the training plan of one or more users.

Same work as the in-process scheduler job, for deployments that run it
from cron instead:
    */15 * * * * python3 scripts/sync_strava.py alice bob
"""

import json
import os
import sys
from datetime import datetime
from urllib.error import URLError
from urllib.request import Request, urlopen


PACER_URL = os.getenv("PACER_API_URL", "http://localhost:8000")


def sync_user(user_id: str) -> dict:
    """POST /api/strava/sync on behalf of one user."""
    req = Request(
        f"{PACER_URL}/api/strava/sync",
        data=b"",
        headers={"X-User-Id": user_id},
        method="POST",
    )
    try:
        with urlopen(req, timeout=60) as response:
            return json.loads(response.read().decode())
    except URLError as e:
        print(f"Error syncing {user_id}: {e}", file=sys.stderr)
        return None


def main():
    user_ids = sys.argv[1:]
    if not user_ids:
        print("usage: sync_strava.py USER_ID [USER_ID ...]", file=sys.stderr)
        sys.exit(2)

    print(f"=== Strava sync, {datetime.now().isoformat()} ===")
    failures = 0
    for user_id in user_ids:
        result = sync_user(user_id)
        if result is None:
            failures += 1
            continue
        print(f"{user_id}: {result['message']}")

    sys.exit(1 if failures else 0)


if __name__ == "__main__":
    main()
