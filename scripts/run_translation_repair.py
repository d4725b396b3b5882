#!/usr/bin/env python3
"""
Fill missing content translations via the admin API.

Usage:
  python scripts/run_translation_repair.py \
    --base-url http://localhost:8000 \
    --token <admin JWT> \
    [--entity-type PresaleArtwork]
"""

from __future__ import annotations

import argparse
import json
import os
import sys
import urllib.error
import urllib.request


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run the content translations repair task.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--base-url",
        default=os.getenv("BACKEND_BASE_URL", "http://localhost:8000"),
        help="Backend API base URL.",
    )
    parser.add_argument(
        "--token",
        default=os.getenv("BACKEND_ADMIN_TOKEN"),
        help="Admin bearer token (JWT carrying an admin role).",
    )
    parser.add_argument(
        "--entity-type",
        default=None,
        help="Repair only this entity type (e.g. Faq). All stored types when omitted.",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=300.0,
        help="Request timeout in seconds.",
    )
    return parser.parse_args(argv)


def post_json(url: str, payload: dict, *, token: str, timeout: float) -> dict:
    body = json.dumps(payload).encode("utf-8")
    request = urllib.request.Request(url, data=body, method="POST")
    request.add_header("Content-Type", "application/json")
    request.add_header("Authorization", f"Bearer {token}")
    with urllib.request.urlopen(request, timeout=timeout) as response:
        text = response.read().decode("utf-8")
    if not text:
        return {}
    return json.loads(text)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    token = (args.token or "").strip()
    if not token:
        print("Missing --token (or BACKEND_ADMIN_TOKEN).", file=sys.stderr)
        return 2

    base_url = args.base_url.rstrip("/")
    try:
        result = post_json(
            f"{base_url}/admin/translations/repair",
            {"entity_type": args.entity_type},
            token=token,
            timeout=args.timeout,
        )
    except urllib.error.HTTPError as exc:
        details = exc.read().decode("utf-8", errors="replace")
        print(f"HTTP {exc.code}: {details}", file=sys.stderr)
        return 1
    except urllib.error.URLError as exc:
        print(f"Network error: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(result, ensure_ascii=False, indent=2))
    return 0 if result.get("success", True) else 1


if __name__ == "__main__":
    raise SystemExit(main())
