from __future__ import annotations

from .types import AggregateResult, AggregateState, ExecutorError, RunOutcome


class ResultAggregator:
    """Folds outcomes, in completion order, into an overall verdict."""

    def __init__(self, total: int):
        self.total = total
        self.completed = 0
        self.failures = 0
        self.cancelled = 0
        self.first_failure: RunOutcome | None = None
        self.state = AggregateState.SUCCEEDED if total == 0 else AggregateState.COLLECTING

    @property
    def failed(self) -> bool:
        return self.state is AggregateState.FAILED

    def observe(self, outcome: RunOutcome) -> None:
        if self.completed >= self.total:
            raise ExecutorError(
                f"Received more outcomes than runs ({self.total}), run {outcome.run_index}"
            )

        self.completed += 1
        if outcome.cancelled:
            self.cancelled += 1

        if not outcome.succeeded:
            self.failures += 1
            if self.first_failure is None:
                self.first_failure = outcome
                self.state = AggregateState.FAILED

        if self.state is AggregateState.COLLECTING and self.completed == self.total:
            self.state = AggregateState.SUCCEEDED

    def finish(self) -> AggregateResult:
        if self.state is AggregateState.COLLECTING:
            raise ExecutorError(
                f"Outcome stream ended after {self.completed} of {self.total} runs"
            )

        return AggregateResult(
            self.total,
            self.completed,
            self.failures,
            self.cancelled,
            self.first_failure,
            self.state,
        )
