# tests/test_config_loader.py
from __future__ import annotations

import json
from pathlib import Path

import pytest

from cmdstress.config.defaults import default_parallelism
from cmdstress.config.loader import load_config
from cmdstress.config.types import ConfigError, UnsupportedConfigFormatError


# -------------------------
# Helpers
# -------------------------


def write_text(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def write_json(path: Path, obj: object) -> Path:
    path.write_text(json.dumps(obj), encoding="utf-8")
    return path


# -------------------------
# Basic file/path errors
# -------------------------


def test_missing_file_raises_config_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.yaml")


def test_path_is_dir_raises_config_error(tmp_path: Path) -> None:
    d = tmp_path / "dir"
    d.mkdir()
    with pytest.raises(ConfigError):
        load_config(d)


def test_unsupported_extension_raises_unsupported_format(tmp_path: Path) -> None:
    p = write_text(tmp_path / "stress.txt", "cmd: echo hi")
    with pytest.raises(UnsupportedConfigFormatError):
        load_config(p)


# -------------------------
# Parse errors are wrapped
# -------------------------


@pytest.mark.parametrize(
    "name, content",
    [
        ("stress.yaml", "cmd: [\n"),
        ("stress.toml", "cmd = {"),
        ("stress.json", '{"cmd": '),
    ],
)
def test_invalid_syntax_is_wrapped_as_config_error(
    tmp_path: Path, name: str, content: str
) -> None:
    p = write_text(tmp_path / name, content)
    with pytest.raises(ConfigError):
        load_config(p)


@pytest.mark.parametrize("name", ["stress.yaml", "stress.toml", "stress.json"])
def test_non_utf8_file_raises_config_error(tmp_path: Path, name: str) -> None:
    p = tmp_path / name
    p.write_bytes(b"cmd: \xff\xfe echo\n")
    with pytest.raises(ConfigError):
        load_config(p)


@pytest.mark.parametrize(
    "ext, content",
    [
        (".yaml", "[]\n"),
        (".yaml", "null\n"),
        (".json", "[]"),
        (".json", "null"),
    ],
)
def test_top_level_not_mapping_raises(tmp_path: Path, ext: str, content: str) -> None:
    p = write_text(tmp_path / f"stress{ext}", content)
    with pytest.raises(ConfigError):
        load_config(p)


def test_unknown_key_raises(tmp_path: Path) -> None:
    p = write_text(tmp_path / "stress.yaml", "cmd: echo hi\nnope: 1\n")
    with pytest.raises(ConfigError):
        load_config(p)


# -------------------------
# Field validation
# -------------------------


@pytest.mark.parametrize(
    "content",
    [
        "cmd: 123\n",
        'cmd: "   "\n',
        "runs: ten\n",
        "runs: -1\n",
        "runs: true\n",
        "runs: 1.5\n",
        "parallel: 0\n",
        "parallel: [2]\n",
        "env: []\n",
        "env:\n  1: x\n",
        'env:\n  "   ": x\n',
        "env:\n  KEY: 1\n",
        "working_dir: 1\n",
        'working_dir: "   "\n',
        "on_failure: explode\n",
        "shell_lex: maybe\n",
    ],
)
def test_invalid_field_raises(tmp_path: Path, content: str) -> None:
    p = write_text(tmp_path / "stress.yaml", content)
    with pytest.raises(ConfigError):
        load_config(p)


def test_env_key_is_stripped_value_preserved(tmp_path: Path) -> None:
    p = write_text(tmp_path / "stress.yaml", 'env:\n  " KEY ": "  v  "\n')
    cfg = load_config(p)
    assert cfg.env == {"KEY": "  v  "}


def test_runs_zero_is_allowed(tmp_path: Path) -> None:
    cfg = load_config(write_json(tmp_path / "stress.json", {"runs": 0}))
    assert cfg.runs == 0


def test_empty_mapping_leaves_everything_unset(tmp_path: Path) -> None:
    cfg = load_config(write_json(tmp_path / "stress.json", {}))
    assert cfg.cmd is None
    assert cfg.runs is None
    assert cfg.parallel is None
    assert cfg.env == {}
    assert cfg.on_failure is None
    assert cfg.shell_lex is None


# -------------------------
# Happy paths (all formats)
# -------------------------


def test_valid_yaml_loads(tmp_path: Path) -> None:
    p = write_text(
        tmp_path / "stress.yml",
        "cmd: echo hello\n"
        "runs: 50\n"
        "parallel: 4\n"
        "on_failure: drain\n"
        "shell_lex: true\n"
        "env:\n"
        "  KEY: value\n",
    )
    cfg = load_config(p)
    assert cfg.cmd == "echo hello"
    assert cfg.runs == 50
    assert cfg.parallel == 4
    assert cfg.on_failure == "drain"
    assert cfg.shell_lex is True
    assert cfg.env == {"KEY": "value"}


def test_valid_json_loads(tmp_path: Path) -> None:
    p = write_json(
        tmp_path / "stress.json",
        {"cmd": " echo a ", "runs": 3, "working_dir": "/tmp"},
    )
    cfg = load_config(p)
    assert cfg.cmd == "echo a"
    assert cfg.runs == 3
    assert cfg.working_dir == "/tmp"


def test_valid_toml_loads(tmp_path: Path) -> None:
    p = write_text(
        tmp_path / "stress.toml",
        'cmd = "echo a"\n'
        "parallel = 2\n"
        'on_failure = "cancel"\n'
        "\n"
        "[env]\n"
        'KEY = "value"\n',
    )
    cfg = load_config(p)
    assert cfg.cmd == "echo a"
    assert cfg.parallel == 2
    assert cfg.on_failure == "cancel"
    assert cfg.env == {"KEY": "value"}


# -------------------------
# Defaults
# -------------------------


@pytest.mark.parametrize("cpus, expected", [(None, 1), (1, 1), (3, 1), (8, 2), (17, 4)])
def test_default_parallelism_is_a_quarter_of_cpus(
    monkeypatch: pytest.MonkeyPatch, cpus: int | None, expected: int
) -> None:
    monkeypatch.setattr("cmdstress.config.defaults.os.cpu_count", lambda: cpus)
    assert default_parallelism() == expected
