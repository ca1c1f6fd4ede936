from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Mapping


class ExecutorError(Exception):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)


class InvalidRunSpecError(ExecutorError):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)


class RunFailedError(ExecutorError):
    def __init__(self, outcome: RunOutcome):
        stderr = outcome.stderr.decode("utf-8", errors="replace")
        super().__init__(
            f"Run {outcome.run_index} failed: {outcome.error}\nStderr: {stderr}"
        )
        self.outcome = outcome


class FailurePolicy(Enum):
    RETURN = "return"
    DRAIN = "drain"
    CANCEL = "cancel"


class AggregateState(Enum):
    COLLECTING = auto()
    FAILED = auto()
    SUCCEEDED = auto()


@dataclass(frozen=True)
class RunSpec:
    command: tuple[str, ...]
    total_runs: int
    parallelism: int
    env: Mapping[str, str] = field(default_factory=dict)
    working_dir: str | None = None

    def __post_init__(self) -> None:
        if len(self.command) < 1:
            raise InvalidRunSpecError("Command is empty")

        if self.total_runs < 0:
            raise InvalidRunSpecError(
                f"Number of runs can't be negative, got {self.total_runs}"
            )

        if self.parallelism < 1:
            raise InvalidRunSpecError(
                f"Parallelism must be at least 1, got {self.parallelism}"
            )


@dataclass(frozen=True)
class RunOutcome:
    run_index: int
    returncode: int | None
    stdout: bytes
    stderr: bytes
    error: str | None
    duration_s: float
    cancelled: bool = False

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0 and self.error is None and not self.cancelled

    @classmethod
    def skipped(cls, run_index: int) -> RunOutcome:
        return cls(run_index, None, b"", b"", "cancelled before start", 0.0, True)


@dataclass(frozen=True)
class AggregateResult:
    total: int
    completed: int
    failures: int
    cancelled: int
    first_failure: RunOutcome | None
    state: AggregateState

    @property
    def ok(self) -> bool:
        return self.state is AggregateState.SUCCEEDED

    def raise_for_failure(self) -> None:
        if self.first_failure is not None:
            raise RunFailedError(self.first_failure)
