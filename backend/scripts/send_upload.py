#!/usr/bin/env python3
"""Post files to a running service. Run from backend/: python scripts/send_upload.py FILE [FILE ...]

Options:
    --url      Base URL (default http://localhost:8000)
    --events   Use the per-event route and print the event log
    --title    Value for the "title" field
"""

import argparse
import json
import mimetypes
import sys
from pathlib import Path

import httpx


def main() -> int:
    ap = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    ap.add_argument("files", nargs="+", type=Path)
    ap.add_argument("--url", default="http://localhost:8000")
    ap.add_argument("--events", action="store_true")
    ap.add_argument("--title", default="sent from send_upload.py")
    args = ap.parse_args()

    route = "/v1/upload/events" if args.events else "/v1/upload"
    files = []
    for path in args.files:
        ctype = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        files.append(("upload", (path.name, path.read_bytes(), ctype)))

    print(f"POST {args.url}{route} with {len(files)} file(s)...")
    try:
        r = httpx.post(f"{args.url}{route}", data={"title": args.title}, files=files, timeout=60)
    except httpx.HTTPError as e:
        print(f"Request failed: {e}")
        return 1

    print(f"Status: {r.status_code} (trace {r.headers.get('X-Trace-Id', '-')})")
    body = r.json()
    if args.events and r.is_success:
        for ev in body["events"]:
            print(f"  {ev['event']:<10} {ev.get('name') or ''}")
    print(json.dumps(body, indent=2, ensure_ascii=False))
    return 0 if r.is_success else 2


if __name__ == "__main__":
    sys.exit(main())
