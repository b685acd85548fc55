#!/usr/bin/env python3
"""
Basic usage examples for hostqueue.

Demonstrates gating requests per host, either through the httpx client
or directly through a QueueRouter.
"""

import asyncio

from hostqueue import QueueOptions, QueueRouter, RequestOptions, create_client
from hostqueue.utils.logging import setup_logging


async def queued_client():
    """Fetch several pages from one host, one at a time."""
    print("\n=== Queued httpx client ===\n")

    options = QueueOptions(max_concurrent=1, delay_ms=250)
    async with create_client(options, timeout=10.0) as client:
        urls = [f"https://httpbin.org/get?page={n}" for n in range(3)]
        responses = await asyncio.gather(*(client.get(url) for url in urls))

        # Urgent requests jump the backlog
        urgent = await client.get(
            "https://httpbin.org/get?urgent=1",
            extensions={"queue_priority": 0},
        )

    for response in [*responses, urgent]:
        print(f"{response.request.url} -> {response.status_code}")


async def manual_admission():
    """Use the router around any unit of work."""
    print("\n=== Manual admission ===\n")

    router = QueueRouter(QueueOptions(max_concurrent=2, delay_ms=100))

    async def work(n: int) -> None:
        async with router.slot("db.internal", RequestOptions(priority=n % 2)) as request_id:
            print(f"job {n} running as request {request_id}")
            await asyncio.sleep(0.05)

    await asyncio.gather(*(work(n) for n in range(6)))
    print(router.get_stats())
    router.teardown()


async def main():
    setup_logging(level="INFO", json_format=False)
    await manual_admission()
    await queued_client()


if __name__ == "__main__":
    asyncio.run(main())
