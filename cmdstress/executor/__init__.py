from .aggregate import ResultAggregator
from .command import CommandRunner, tokenize_command
from .executor import Executor
from .gate import AdmissionGate
from .types import (
    AggregateResult,
    AggregateState,
    ExecutorError,
    FailurePolicy,
    InvalidRunSpecError,
    RunFailedError,
    RunOutcome,
    RunSpec,
)

__all__ = [
    "AdmissionGate",
    "AggregateResult",
    "AggregateState",
    "CommandRunner",
    "Executor",
    "ExecutorError",
    "FailurePolicy",
    "InvalidRunSpecError",
    "ResultAggregator",
    "RunFailedError",
    "RunOutcome",
    "RunSpec",
    "tokenize_command",
]
