#!/usr/bin/env python3
"""Hammer POST /auth/login and report how many attempts were throttled.

RUN:  python scripts/load_test_rate_limit.py [base_url]

The API must be running (uvicorn lms.main:app --port 8000).  The
credentials are deliberately wrong: every allowed attempt answers 401,
throttled ones 429.
"""

from __future__ import annotations

import sys
import time

import httpx

BASE_URL = "http://localhost:8000"
TOTAL_REQUESTS = 30


def main() -> None:
    base_url = sys.argv[1] if len(sys.argv) > 1 else BASE_URL
    print(f"Target: {base_url}/auth/login  requests={TOTAL_REQUESTS}")

    results: dict[int, int] = {}
    retry_after: str | None = None
    start = time.monotonic()

    with httpx.Client(base_url=base_url, timeout=10) as client:
        for _ in range(TOTAL_REQUESTS):
            resp = client.post(
                "/auth/login",
                json={"email": "load-test@example.com", "password": "wrong"},
            )
            results[resp.status_code] = results.get(resp.status_code, 0) + 1
            if resp.status_code == 429:
                retry_after = resp.headers.get("retry-after")

    elapsed = time.monotonic() - start
    print(f"\nResults ({elapsed:.2f}s):")
    for status_code, count in sorted(results.items()):
        print(f"  {status_code}: {count:>4}")

    if results.get(429):
        print(f"\nThrottled after the burst; last Retry-After={retry_after}s")
    else:
        print("\nWARNING: nothing was throttled")
        sys.exit(1)


if __name__ == "__main__":
    main()
