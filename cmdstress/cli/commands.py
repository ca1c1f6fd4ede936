from __future__ import annotations

import argparse
import logging
import sys
from typing import Any

from tqdm import tqdm
from tqdm.contrib.logging import logging_redirect_tqdm

from cmdstress.config import (
    DEFAULT_RUNS,
    ConfigError,
    StressConfig,
    default_parallelism,
    load_config,
)
from cmdstress.executor import (
    AggregateResult,
    Executor,
    ExecutorError,
    FailurePolicy,
    RunFailedError,
    RunOutcome,
    RunSpec,
    tokenize_command,
)
from cmdstress.log import setup_logging

from .args import build_parser

logger = logging.getLogger(__name__)


def main() -> None:
    sys.exit(run_cli())


def run_cli(argv: list[str] | None = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
        setup_logging(-1 if args.quiet else 1 if args.verbose else 0)
        return cmd_stress(args)

    except (ConfigError, ExecutorError) as exc:
        print(str(exc), file=sys.stderr)
        return 2

    except KeyboardInterrupt:
        return 130


def cmd_stress(args: argparse.Namespace) -> int:
    spec, policy = _resolve(args)

    logger.info("Running stress test with the following parameters:")
    logger.info("Command: %s", " ".join(spec.command))
    logger.info("Runs: %d", spec.total_runs)
    logger.info("Parallel: %d", spec.parallelism)

    executor = Executor(spec, on_failure=policy)
    with logging_redirect_tqdm(), tqdm(
        total=spec.total_runs, unit="run", disable=args.no_progress
    ) as bar:
        result = executor.run(on_outcome=lambda outcome: _report(outcome, bar))

    return _print_result(result)


def _first(*values: Any) -> Any:
    return next(value for value in values if value is not None)


def _resolve(args: argparse.Namespace) -> tuple[RunSpec, FailurePolicy]:
    file_config = load_config(args.config) if args.config else StressConfig()

    cmd = _first(args.cmd, file_config.cmd, "")
    if len(cmd.strip()) < 1:
        raise ConfigError("Missing required option: --cmd")

    shell_lex = _first(args.shell_lex, file_config.shell_lex, False)
    try:
        command = tokenize_command(cmd, shell_lex=shell_lex)
    except ValueError as exc:
        raise ConfigError(f"Can't split command {cmd!r}: {exc}") from exc

    spec = RunSpec(
        command,
        _first(args.runs, file_config.runs, DEFAULT_RUNS),
        _first(args.parallel, file_config.parallel, default_parallelism()),
        env=dict(file_config.env),
        working_dir=file_config.working_dir,
    )
    policy = FailurePolicy(_first(args.on_failure, file_config.on_failure, "return"))
    return spec, policy


def _report(outcome: RunOutcome, bar: tqdm) -> None:
    # Failures are logged by the executor as they happen
    if outcome.succeeded:
        logger.info("Run %d passed in %.3fs", outcome.run_index, outcome.duration_s)
    elif outcome.cancelled:
        logger.info("Run %d cancelled", outcome.run_index)
    bar.update(1)


def _print_result(result: AggregateResult) -> int:
    try:
        result.raise_for_failure()
    except RunFailedError as exc:
        print(f"Test failed. Stopping all runs. Error: {exc}", file=sys.stderr)
        if result.completed == result.total:
            print(
                f"FAIL {result.failures}/{result.total} runs failed, "
                f"{result.cancelled} cancelled",
                file=sys.stderr,
            )
        return 1

    print(f"OK {result.completed}/{result.total} runs passed")
    return 0
