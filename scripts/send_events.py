"""Send a steady stream of synthetic events to a Corewatch collector.

Usage:
    python -m scripts.send_events --secret <COREWATCH_INGEST_SECRET>
    python -m scripts.send_events --url http://localhost:6767/event --count 500 --interval 0.01
"""

import argparse
import itertools
import os
import sys
import time

import httpx

EVENTS = ["click", "view", "scroll", "hover", "submit"]


def build_params(counter: int) -> dict[str, str]:
    """Query parameters for the ``counter``-th synthetic event."""
    return {
        "event": EVENTS[counter % len(EVENTS)],
        "url": f"https://example.com/page{counter}",
        "referrer": "https://google.com",
    }


def main():
    parser = argparse.ArgumentParser(description="Send synthetic events to a collector")
    parser.add_argument("--url", default="http://127.0.0.1:6767/event", help="Collector URL")
    parser.add_argument(
        "--secret",
        default=os.environ.get("COREWATCH_INGEST_SECRET"),
        help="Shared ingest secret (default: $COREWATCH_INGEST_SECRET)",
    )
    parser.add_argument("--count", type=int, default=0, help="Events to send (0 = forever)")
    parser.add_argument("--interval", type=float, default=1.0, help="Seconds between events")
    args = parser.parse_args()

    if not args.secret:
        print("COREWATCH_INGEST_SECRET is not set (pass --secret)", file=sys.stderr)
        sys.exit(1)

    print(f"Sending events to {args.url} (Ctrl+C to stop)")
    headers = {"Authorization": f"Bearer {args.secret}"}
    counter = itertools.count() if args.count <= 0 else iter(range(args.count))

    with httpx.Client(timeout=10, headers=headers) as client:
        try:
            for i in counter:
                params = build_params(i)
                try:
                    resp = client.get(args.url, params=params)
                    print(f"[{i + 1}] Sent event '{params['event']}' -> Status: {resp.status_code}")
                except httpx.HTTPError as exc:
                    print(f"[{i + 1}] Failed to send event: {exc}", file=sys.stderr)
                time.sleep(args.interval)
        except KeyboardInterrupt:
            print("Stopped.")


if __name__ == "__main__":
    main()
