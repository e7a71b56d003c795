"""Configuration layering for runtime tunables.

Precedence, lowest to highest: built-in Constants, YAML config file,
environment variables, CLI flags.
"""

from __future__ import annotations

import logging
import os

from constants import Constants, _load_yaml_config, apply_config

logger = logging.getLogger(__name__)


def load_config(args) -> None:
    """Load the YAML config named by ``--config`` or found in default locations."""
    cfg = _load_yaml_config(getattr(args, "CONFIG", None))
    apply_config(cfg)


def apply_env_overrides() -> None:
    """Apply environment variable overrides."""
    env_repo = os.environ.get(Constants.ENV_REPOSITORY_URL)
    if env_repo and env_repo.strip():
        Constants.REPOSITORY_URLS = [env_repo.strip().rstrip("/")]


def apply_cli_overrides(args) -> None:
    """Apply CLI overrides with highest precedence."""
    repos = getattr(args, "REPOSITORIES", None)
    if repos:
        Constants.REPOSITORY_URLS = [r.rstrip("/") for r in repos]
    if getattr(args, "LOCAL_REPO", None):
        Constants.LOCAL_REPOSITORY = os.path.expanduser(args.LOCAL_REPO)
    if getattr(args, "OFFLINE", False):
        Constants.OFFLINE = True
    if getattr(args, "NO_NEWER", False):
        Constants.ALLOW_NEWER = False
    if getattr(args, "WORK_DIR", None):
        Constants.WORK_DIR = os.path.expanduser(args.WORK_DIR)
    if getattr(args, "MAX_STEPS", None) is not None:
        if args.MAX_STEPS < 1:
            logger.warning("Ignoring --max-steps %s; it must be at least 1", args.MAX_STEPS)
        else:
            Constants.MAX_STEPS = args.MAX_STEPS


def configure(args) -> None:
    """Apply every configuration layer in precedence order."""
    load_config(args)
    apply_env_overrides()
    apply_cli_overrides(args)
