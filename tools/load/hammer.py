#!/usr/bin/env python3
"""hitcounter load generator.

Fires concurrent GET /hit/{target} requests and checks that no increment
was lost: every target is fresh, so the highest count observed must equal
the number of successful requests.

Usage:
    # 20 concurrent workers, 500 hits each, spread over 3 targets
    python -m tools.load.hammer --server http://localhost:3000 --workers 20 --hits 500 --targets 3

    # Everything on one target
    python -m tools.load.hammer --server http://localhost:3000 --workers 50 --targets 1
"""

from __future__ import annotations

import argparse
import asyncio
import random
import sys
import time
import uuid
from dataclasses import dataclass
from urllib.parse import quote

import httpx


@dataclass
class TargetTally:
    name: str
    sent: int = 0
    errors: int = 0
    max_seen: int = 0


async def hit_once(client: httpx.AsyncClient, server_url: str, tally: TargetTally) -> None:
    try:
        resp = await client.get(f"{server_url}/hit/{quote(tally.name, safe='')}")
    except httpx.RequestError:
        tally.errors += 1
        return
    if resp.status_code == 200:
        count = int(resp.text)
        tally.sent += 1
        tally.max_seen = max(tally.max_seen, count)
    else:
        tally.errors += 1


async def run_worker(
    client: httpx.AsyncClient,
    server_url: str,
    tallies: list[TargetTally],
    hits: int,
) -> None:
    """Send ``hits`` requests, each to a randomly chosen target."""
    for _ in range(hits):
        await hit_once(client, server_url, random.choice(tallies))


async def run_load(args: argparse.Namespace) -> int:
    """Run the full load test. Returns a process exit code."""
    run_id = uuid.uuid4().hex[:8]
    tallies = [TargetTally(name=f"hammer-{run_id}-{i}") for i in range(args.targets)]

    print(f"Starting load: {args.workers} workers x {args.hits} hits over {args.targets} targets")
    print(f"  Server: {args.server}")
    print()

    limits = httpx.Limits(max_connections=args.workers)
    async with httpx.AsyncClient(timeout=args.timeout, limits=limits) as client:
        start = time.monotonic()
        await asyncio.gather(*(
            run_worker(client, args.server, tallies, args.hits)
            for _ in range(args.workers)
        ))
        elapsed = time.monotonic() - start

        stats = None
        try:
            resp = await client.get(f"{args.server}/api/v1/stats")
            if resp.status_code == 200:
                stats = resp.json()
        except httpx.RequestError:
            pass

    total_sent = sum(t.sent for t in tallies)
    total_errors = sum(t.errors for t in tallies)

    print(f"Load complete in {elapsed:.1f}s")
    print(f"  Successful hits: {total_sent}")
    print(f"  Errors: {total_errors}")
    print(f"  Throughput: {total_sent / elapsed:.1f} hits/sec")

    # Targets are fresh, so the highest count seen must equal the number of
    # successful increments. Errored requests may still have incremented.
    lost = False
    for t in tallies:
        if t.max_seen < t.sent:
            lost = True
            print(f"  LOST UPDATES on {t.name}: {t.sent} ok responses, max count {t.max_seen}")
        elif t.max_seen > t.sent + t.errors:
            lost = True
            print(f"  UNEXPECTED COUNT on {t.name}: max {t.max_seen} > {t.sent + t.errors} requests")

    if stats is not None:
        print("\nServer stats:")
        print(f"  Hits served: {stats['hits_served']}")
        print(f"  Connection unavailable: {stats['store_errors']['connection_unavailable']}")
        print(f"  Query failed: {stats['store_errors']['query_failed']}")

    if lost:
        return 1
    print("\nNo lost updates.")
    return 0


def main():
    parser = argparse.ArgumentParser(description="hitcounter load generator")
    parser.add_argument("--server", default="http://localhost:3000", help="Server URL")
    parser.add_argument("--workers", type=int, default=10, help="Concurrent workers")
    parser.add_argument("--hits", type=int, default=100, help="Requests per worker")
    parser.add_argument("--targets", type=int, default=1, help="Number of distinct targets")
    parser.add_argument("--timeout", type=float, default=10.0, help="Per-request timeout in seconds")

    args = parser.parse_args()
    sys.exit(asyncio.run(run_load(args)))


if __name__ == "__main__":
    main()
