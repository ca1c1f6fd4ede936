import os

DEFAULT_RUNS = 100
ON_FAILURE_CHOICES = ("return", "drain", "cancel")


def default_parallelism() -> int:
    # A quarter of the available CPUs, at least one
    return max(1, (os.cpu_count() or 1) // 4)
