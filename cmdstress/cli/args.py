from __future__ import annotations

import argparse

from cmdstress.config.defaults import DEFAULT_RUNS, ON_FAILURE_CHOICES


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cmdstress",
        description="A tool for stress testing commands",
    )

    parser.add_argument(
        "--config",
        default=None,
        help="Path to a settings file (.yml/.yaml, .toml, .json)",
    )
    parser.add_argument(
        "--cmd",
        default=None,
        help="Command to run for stress testing (split on whitespace)",
    )
    parser.add_argument(
        "-r",
        "--runs",
        type=int,
        default=None,
        help=f"Number of times to run the command (default: {DEFAULT_RUNS})",
    )
    parser.add_argument(
        "-p",
        "--parallel",
        type=int,
        default=None,
        help="Number of parallel executions (default: a quarter of the CPUs, at least 1)",
    )
    parser.add_argument(
        "--on-failure",
        choices=ON_FAILURE_CHOICES,
        default=None,
        help="What to do with other runs once one fails (default: return)",
    )
    parser.add_argument(
        "--shell-lex",
        action="store_true",
        default=None,
        help="Split the command with shell quoting rules instead of whitespace",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Don't show the progress bar",
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only log failures",
    )
    verbosity.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    return parser
