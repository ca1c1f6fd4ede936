from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Callable, Iterator

from .aggregate import ResultAggregator
from .command import CommandRunner
from .gate import AdmissionGate
from .types import AggregateResult, FailurePolicy, RunOutcome, RunSpec

logger = logging.getLogger(__name__)


class Executor:
    def __init__(
        self,
        spec: RunSpec,
        *,
        on_failure: FailurePolicy = FailurePolicy.RETURN,
        runner: CommandRunner | None = None,
    ):
        self.spec = spec
        self.on_failure = on_failure
        self.runner = runner or CommandRunner()
        self.gate = AdmissionGate(spec.parallelism)
        self._cancel = threading.Event()
        self._pending: list[Future[RunOutcome]] = []

    def _work(self, run_index: int) -> RunOutcome:
        with self.gate.slot():
            if self._cancel.is_set():
                return RunOutcome.skipped(run_index)

            start = time.monotonic()
            try:
                outcome = self.runner.run(self.spec, run_index)
            except Exception as exc:
                logger.exception("Run %d crashed", run_index)
                return RunOutcome(
                    run_index,
                    None,
                    b"",
                    b"",
                    f"unexpected error: {exc!r}",
                    time.monotonic() - start,
                )

        if not outcome.succeeded:
            logger.error(
                "Run %d failed: %s\nStderr: %s",
                run_index,
                outcome.error,
                outcome.stderr.decode("utf-8", errors="replace"),
            )
        return outcome

    def outcomes(self) -> Iterator[RunOutcome]:
        total = self.spec.total_runs
        if total == 0:
            return

        self._cancel.clear()
        self.runner.reset()

        pool = ThreadPoolExecutor(
            max_workers=min(self.spec.parallelism, total),
            thread_name_prefix="cmdstress-run",
        )
        futures = {pool.submit(self._work, i): i for i in range(total)}
        self._pending = list(futures)
        logger.debug("Submitted %d runs, parallelism %d", total, self.spec.parallelism)

        try:
            for fut in as_completed(futures):
                if fut.cancelled():
                    yield RunOutcome.skipped(futures[fut])
                else:
                    yield fut.result()
        finally:
            # Runs already started finish on their own, queued ones never start
            pool.shutdown(wait=False, cancel_futures=True)

    def cancel(self) -> None:
        if self._cancel.is_set():
            return

        logger.info("Cancelling outstanding runs")
        self._cancel.set()
        for fut in self._pending:
            fut.cancel()
        self.runner.terminate_all()

    def run(
        self, on_outcome: Callable[[RunOutcome], None] | None = None
    ) -> AggregateResult:
        aggregator = ResultAggregator(self.spec.total_runs)
        stream = self.outcomes()

        try:
            for outcome in stream:
                aggregator.observe(outcome)
                if on_outcome is not None:
                    on_outcome(outcome)

                if aggregator.failed:
                    match self.on_failure:
                        case FailurePolicy.RETURN:
                            break
                        case FailurePolicy.CANCEL:
                            self.cancel()
                        case FailurePolicy.DRAIN:
                            pass
        finally:
            stream.close()

        return aggregator.finish()
