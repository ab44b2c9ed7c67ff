"""Example of a notification sender built on queueaio.

Alerts are batched into groups of five and handed to a fake SMTP relay
that fails from time to time. Failed batches go back to the front of the
queue and are retried until they are delivered.
"""

import asyncio
import logging
import random

from queueaio import Batch, Done, Queueaio

logger = logging.getLogger(__name__)


class RelayUnavailableError(ConnectionError):
    pass


async def send_batch(batch: Batch, _: int | None, done: Done) -> None:
    """Simulate delivering a batch of emails through a flaky relay."""
    await asyncio.sleep(0.05)  # Simulate network latency
    if random.random() < 0.3:  # noqa: S311
        done(RelayUnavailableError("relay is busy"))
        return
    for task_id, alert in batch.items():
        logger.info("Alert #%s sent to %s", task_id, alert["recipient"])
    done()


async def _main() -> None:
    queue = Queueaio(send_batch, concurrency=2, grouping=True, group_size=5)
    _ = queue.on("status", logger.warning)
    # a failed partial batch needs another flush to go out again
    _ = queue.on("task-failed", lambda *_: queue.flush())

    async with queue:
        for num in range(12):
            _ = queue.submit(
                {"recipient": f"user{num}@example.com", "subject": "Backup"}
            )
        queue.flush()
        await queue.wait_all()

    logger.info("All alerts delivered!")


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    asyncio.run(_main())


if __name__ == "__main__":
    main()
