"""Dispatch throughput of queueaio under a few queue shapes.

Run from the repository root: ``python benchmarks/bench.py``.
"""

import asyncio
import json
import logging
import time
from pathlib import Path
from typing import Any

from queueaio import Done, Queueaio

logger = logging.getLogger("queueaio.bench")

TASKS = 50_000
CASES: dict[str, dict[str, Any]] = {
    "single": {"concurrency": 1},
    "concurrency_16": {"concurrency": 16},
    "grouped_100": {"grouping": True, "group_size": 100},
    "grouped_100_concurrency_4": {
        "grouping": True,
        "group_size": 100,
        "concurrency": 4,
    },
}
RESULTS_FILE = Path("./benchmarks/benches.json")


def _succeed(
    _data: Any,  # noqa: ANN401
    task_id: int | None,
    done: Done,
) -> None:
    done(None, task_id)


async def _measure(options: dict[str, Any]) -> float:
    queue = Queueaio(_succeed, **options)
    start = time.perf_counter()
    async with queue:
        for num in range(TASKS):
            _ = queue.submit(num)
        queue.flush()
        await queue.wait_all()
    return time.perf_counter() - start


def run_cases() -> dict[str, float]:
    results: dict[str, float] = {}
    for name, options in CASES.items():
        elapsed = asyncio.run(_measure(options))
        results[name] = round(TASKS / elapsed, 2)
        logger.info("%s: %.0f tasks/s", name, results[name])
    return results


def main() -> None:
    logger.info("Dispatching %d tasks per case...", TASKS)
    results = {"dispatch_tasks_per_second": run_cases()}
    with RESULTS_FILE.open(mode="w", encoding="utf-8") as fp:
        json.dump(results, fp, indent=2)
    logger.info("Results saved to: %s", RESULTS_FILE)


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="[%(levelname)s] %(message)s",
    )
    main()
