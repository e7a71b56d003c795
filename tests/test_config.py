"""Tests for configuration layering."""

import logging

import pytest

from args import parse_args
from cli_config import apply_cli_overrides, apply_env_overrides, configure
from common.logging_utils import Timer, configure_logging, extra_context, redact, safe_url
from constants import Constants, _load_yaml_config, apply_config


@pytest.fixture(autouse=True)
def isolated(restore_constants, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    monkeypatch.delenv(Constants.ENV_REPOSITORY_URL, raising=False)
    yield


CONFIG = """
repositories:
  - https://mirror.example.org/maven/
local_repository: ~/repo
candidate_groups: [org.openmrs.module]
candidate_types: [omod]
request_timeout: 5
max_steps: 50
allow_newer: false
"""


def test_yaml_config_applied(tmp_path):
    path = tmp_path / "cfg.yml"
    path.write_text(CONFIG, encoding="utf-8")

    apply_config(_load_yaml_config(str(path)))

    assert Constants.REPOSITORY_URLS == ["https://mirror.example.org/maven"]
    assert Constants.LOCAL_REPOSITORY == str(tmp_path / "repo")
    assert Constants.CANDIDATE_GROUPS == ["org.openmrs.module"]
    assert Constants.CANDIDATE_TYPES == ["omod"]
    assert Constants.REQUEST_TIMEOUT == 5
    assert Constants.MAX_STEPS == 50
    assert Constants.ALLOW_NEWER is False


def test_default_location_discovered(tmp_path):
    (tmp_path / Constants.CONFIG_FILE_NAME).write_text("max_steps: 7\n", encoding="utf-8")
    assert _load_yaml_config() == {"max_steps": 7}


def test_missing_explicit_config_is_empty(tmp_path):
    assert _load_yaml_config(str(tmp_path / "nope.yml")) == {}


def test_non_mapping_config_ignored(tmp_path):
    path = tmp_path / "list.yml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    assert _load_yaml_config(str(path)) == {}


def test_env_then_cli_precedence(tmp_path, monkeypatch):
    path = tmp_path / "cfg.yml"
    path.write_text(CONFIG, encoding="utf-8")
    monkeypatch.setenv(Constants.ENV_REPOSITORY_URL, "https://env.example.org/")

    configure(parse_args(["-c", str(path), "x:y:1.0"]))
    assert Constants.REPOSITORY_URLS == ["https://env.example.org"]

    configure(parse_args(["-c", str(path), "--repository", "https://cli.example.org/", "x:y:1.0"]))
    assert Constants.REPOSITORY_URLS == ["https://cli.example.org"]


def test_cli_overrides():
    apply_cli_overrides(parse_args(["--offline", "--no-newer", "--max-steps", "12", "--work-dir", "~/w", "x:y:1"]))
    assert Constants.OFFLINE is True
    assert Constants.ALLOW_NEWER is False
    assert Constants.MAX_STEPS == 12
    assert Constants.WORK_DIR.endswith("w")


def test_invalid_max_steps_ignored():
    before = Constants.MAX_STEPS
    apply_cli_overrides(parse_args(["--max-steps", "0", "x:y:1"]))
    assert Constants.MAX_STEPS == before


def test_env_override_blank_ignored(monkeypatch):
    before = list(Constants.REPOSITORY_URLS)
    monkeypatch.setenv(Constants.ENV_REPOSITORY_URL, "   ")
    apply_env_overrides()
    assert Constants.REPOSITORY_URLS == before


class TestLoggingUtils:
    """Logging helpers."""

    def test_safe_url_strips_credentials(self):
        assert safe_url("https://user:pw@repo.example.org/x?token=abc&q=1") == (
            "https://repo.example.org/x?token=***&q=1"
        )

    def test_redact(self):
        assert redact("password=hunter2") == "password=***"

    def test_extra_context_drops_none(self):
        assert extra_context(event="x", outcome=None) == {"event": "x"}

    def test_timer(self):
        with Timer() as t:
            pass
        assert t.duration_ms() >= 0

    def test_configure_logging_level_from_env(self, monkeypatch):
        monkeypatch.setenv(Constants.ENV_LOG_LEVEL, "warning")
        configure_logging()
        try:
            assert logging.getLogger().level == logging.WARNING
            marked = [h for h in logging.getLogger().handlers if getattr(h, "_omodresolve", False)]
            assert len(marked) == 1
        finally:
            logging.getLogger().handlers = [
                h for h in logging.getLogger().handlers if not getattr(h, "_omodresolve", False)
            ]
            logging.getLogger().setLevel(logging.WARNING)
