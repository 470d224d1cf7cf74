"""
Retry a flaky task from its own fail callback.

A strict task stays registered after each attempt, so the fail callback
can simply run it again. The task only starts once the user is logged in.
"""

import asyncio
import logging
import random

from gatequeue import Succeeded, TaskQueue

logging.basicConfig(level=logging.INFO)

MAX_RETRIES = 5


async def main():
    queue = TaskQueue(["login"])
    queue.set_condition("login", False)

    attempts = 0

    async def fetch_profile() -> str:
        nonlocal attempts
        attempts += 1
        await asyncio.sleep(0.05)
        if random.random() < 0.6:
            raise ConnectionError(f"attempt {attempts} dropped")
        return "profile loaded"

    task = queue.create_task(
        fetch_profile,
        ["login"],
        describe="fetch the user profile",
        strict=True,
        timeout_ms=500,
    )

    async def retry(error: BaseException) -> None:
        print(f"Task {task.id} failed: {error}")
        if task.attempts >= MAX_RETRIES:
            print("Giving up")
            queue.clear([task.id])
            return
        outcome = await task.run()
        if isinstance(outcome, Succeeded):
            queue.clear([task.id])

    task.success = lambda value: print(f"Task {task.id} succeeded: {value}")
    task.complete = lambda: print(f"Task {task.id} attempt {task.attempts} finished")
    task.fail = retry

    print(f"Pending: {queue.get_tasks()}")
    queue.set_condition("login", True)
    await queue.join()

    print(f"Attempts made: {attempts}")
    print(f"Pending: {queue.get_tasks()}")


if __name__ == "__main__":
    asyncio.run(main())
