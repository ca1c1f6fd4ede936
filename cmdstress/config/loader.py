import json
import tomllib
from pathlib import Path
from typing import Any, Mapping

import yaml

from .defaults import ON_FAILURE_CHOICES
from .types import ConfigError, StressConfig, UnsupportedConfigFormatError

_KEYS = {"cmd", "runs", "parallel", "env", "working_dir", "on_failure", "shell_lex"}


def load_config(path: str | Path) -> StressConfig:
    pure_path = Path(path).expanduser().resolve()

    if not pure_path.exists():
        raise ConfigError(f"Config file not found: {pure_path}")

    if not pure_path.is_file():
        raise ConfigError(f"Config path is not a file: {pure_path}")

    fmt = _detect_format(pure_path)
    raw_file = _parse_file(pure_path, fmt)
    return _build_stress_config(raw_file)


def _detect_format(path: Path) -> str:
    fmt = path.suffix
    match fmt:
        case ".yaml" | ".yml":
            return "yaml"
        case ".toml":
            return "toml"
        case ".json":
            return "json"
        case _:
            raise UnsupportedConfigFormatError(
                f"Non supported file extension: {fmt}\n Expected format: .yml/.yaml, .toml, .json"
            )


def _parse_file(path: Path, fmt: str) -> Mapping[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ConfigError(f"{path}: not valid UTF-8") from exc

    try:
        match fmt:
            case "yaml":
                raw_file = yaml.safe_load(text)
            case "toml":
                raw_file = tomllib.loads(text)
            case "json":
                raw_file = json.loads(text)
            case _:
                raise AssertionError("Unreachable")
    except (yaml.YAMLError, tomllib.TOMLDecodeError, json.JSONDecodeError) as exc:
        raise ConfigError(f"{path}: invalid {fmt.upper()}") from exc

    if not isinstance(raw_file, Mapping):
        raise ConfigError(
            f"{path}: {fmt.upper()} parsed successfully but top-level value is not an object: {type(raw_file)}"
        )

    return raw_file


def _build_stress_config(raw: Mapping[str, Any]) -> StressConfig:
    config = StressConfig()

    for key in raw.keys():
        if key not in _KEYS:
            raise ConfigError(f"Can't process: {key}")

    if "cmd" in raw:
        if not isinstance(raw["cmd"], str):
            raise ConfigError("'cmd' should be a string")

        if len(raw["cmd"].strip()) < 1:
            raise ConfigError("'cmd' can't be empty")

        config.cmd = raw["cmd"].strip()

    if "runs" in raw:
        config.runs = _int_field(raw, "runs", minimum=0)

    if "parallel" in raw:
        config.parallel = _int_field(raw, "parallel", minimum=1)

    if "env" in raw:
        if not isinstance(raw["env"], Mapping):
            raise ConfigError("'env' should be a mapping")

        for key, item in raw["env"].items():
            if not isinstance(key, str):
                raise ConfigError(f"env: {key} should be a string")

            if len(key.strip()) < 1:
                raise ConfigError("env: A key can't be empty")

            if not isinstance(item, str):
                raise ConfigError(f"env: {item} should be a string")

            config.env[key.strip()] = item

    if "working_dir" in raw:
        if not isinstance(raw["working_dir"], str):
            raise ConfigError("'working_dir' should be a string")

        if len(raw["working_dir"].strip()) < 1:
            raise ConfigError("'working_dir': Please provide a string or remove this field")

        config.working_dir = raw["working_dir"].strip()

    if "on_failure" in raw:
        if raw["on_failure"] not in ON_FAILURE_CHOICES:
            raise ConfigError(
                f"'on_failure' must be one of {', '.join(ON_FAILURE_CHOICES)}, got {raw['on_failure']!r}"
            )

        config.on_failure = raw["on_failure"]

    if "shell_lex" in raw:
        if not isinstance(raw["shell_lex"], bool):
            raise ConfigError("'shell_lex' should be a boolean")

        config.shell_lex = raw["shell_lex"]

    return config


def _int_field(raw: Mapping[str, Any], key: str, *, minimum: int) -> int:
    value = raw[key]

    # bool is a subclass of int
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"'{key}' should be an integer, got {type(value)}")

    if value < minimum:
        raise ConfigError(f"'{key}' must be at least {minimum}, got {value}")

    return value
