"""Batch jobs — named tasks run from the command line.

Register jobs on the app and run them with the CLI::

    @app.batch("cleanupLogs")
    def cleanup_logs():
        ...

    $ wicket batch myapp:app              # list jobs
    $ wicket batch myapp:app cleanupLogs  # run one

Exit status is 0 for a listing or a successful run, 1 for an unknown
job or one that raised.
"""

import logging
import sys
from collections.abc import Callable, Sequence
from typing import TextIO

import anyio

from wicket._internal.invoke import invoke
from wicket._internal.types import BatchJob

logger = logging.getLogger("wicket.batch")


class BatchRunner:
    """A name-keyed registry of zero-argument jobs.

    Listing order is registration order; registering a name again
    replaces the job but keeps its place. Jobs may be ``def`` or
    ``async def``.
    """

    __slots__ = ("_jobs",)

    def __init__(self) -> None:
        self._jobs: dict[str, BatchJob] = {}

    def register(self, name: str, job: BatchJob) -> None:
        self._jobs[name] = job

    def job(self, name: str) -> Callable[[BatchJob], BatchJob]:
        """Register a batch job via decorator."""

        def decorator(func: BatchJob) -> BatchJob:
            self.register(name, func)
            return func

        return decorator

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._jobs)

    def __contains__(self, name: object) -> bool:
        return name in self._jobs

    def __len__(self) -> int:
        return len(self._jobs)

    def run(self, argv: Sequence[str], *, out: TextIO | None = None) -> int:
        """Run the job named by ``argv[0]``, or list jobs when *argv* is empty.

        Starts its own event loop; from async code use ``run_async``.
        """
        return anyio.run(self._run_async, list(argv), out)

    async def run_async(self, argv: Sequence[str], *, out: TextIO | None = None) -> int:
        """Async form of ``run`` for callers already inside an event loop."""
        return await self._run_async(list(argv), out)

    async def _run_async(self, argv: list[str], out: TextIO | None) -> int:
        out = out or sys.stdout

        if not argv:
            print("Available batch jobs:", file=out)
            for name in self._jobs:
                print(f" - {name}", file=out)
            return 0

        name = argv[0]
        job = self._jobs.get(name)
        if job is None:
            print(f"Batch job '{name}' not found.", file=out)
            return 1

        logger.info("Running batch job '%s'", name)
        try:
            await invoke(job)
        except Exception as exc:
            logger.error("Error in batch job '%s': %s", name, exc, exc_info=exc)
            print(f"Error in batch job '{name}': {exc}", file=out)
            return 1
        logger.info("Batch job '%s' finished", name)
        return 0
