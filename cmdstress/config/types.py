from dataclasses import dataclass, field


@dataclass
class StressConfig:
    cmd: str | None = None
    runs: int | None = None
    parallel: int | None = None
    env: dict[str, str] = field(default_factory=dict)
    working_dir: str | None = None
    on_failure: str | None = None
    shell_lex: bool | None = None


class ConfigError(Exception):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)


class UnsupportedConfigFormatError(ConfigError):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)
