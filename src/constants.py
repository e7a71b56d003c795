"""Constants used in the project."""

import logging
import os
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    UNRESOLVED = 3


class OutputFormats(Enum):
    """Export formats supported by the program.

    Args:
        Enum (string): Export formats supported by the program.
    """

    JSON = "json"
    CSV = "csv"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    # Module coordinates
    GROUP_MODULE = "org.openmrs.module"
    GROUP_CORE = "org.openmrs"
    CANDIDATE_GROUPS = [GROUP_MODULE, GROUP_CORE]
    CANDIDATE_TYPES = ["jar", "omod"]
    ARTIFACT_SUFFIX = "-omod"
    MODULE_SUFFIXES = ["-omod", "-module"]

    # Manifest descriptor
    DESCRIPTOR_ENTRY = "config.xml"
    REQUIRE_MODULE_TAG = "require_module"
    UID_PREFIXES = {
        "org.openmrs.module.": GROUP_MODULE,
        "org.openmrs.": GROUP_CORE,
    }

    # Version ordering
    QUALIFIERS = ["alpha", "beta", "snapshot"]
    SNAPSHOT_QUALIFIER = "SNAPSHOT"

    # Repositories
    REPOSITORY_URLS = ["https://mavenrepo.openmrs.org/public"]
    LOCAL_REPOSITORY = os.path.join(os.path.expanduser("~"), ".m2", "repository")
    METADATA_FILE = "maven-metadata.xml"
    ALLOW_NEWER = True
    OFFLINE = False

    # Resolution
    MAX_STEPS = 10000
    WORK_DIR = None
    WORK_DIR_PREFIX = "omodresolve-"

    # Output / logging
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    TABLE_COLUMNS = ["Module ID", "Group ID", "Version"]
    ENV_LOG_LEVEL = "OMODRESOLVE_LOG_LEVEL"
    ENV_REPOSITORY_URL = "OMODRESOLVE_REPOSITORY_URL"

    # HTTP
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    HTTP_RETRY_MAX = 3
    HTTP_RETRY_BASE_DELAY_SEC = 0.3
    DOWNLOAD_CHUNK_SIZE = 64 * 1024

    # Config file discovery
    CONFIG_FILE_NAME = "omodresolve.yml"


def _default_config_paths():
    """Return candidate YAML config locations in precedence order."""
    paths = [os.path.join(os.getcwd(), Constants.CONFIG_FILE_NAME)]
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        paths.append(os.path.join(xdg, "omodresolve", Constants.CONFIG_FILE_NAME))
    paths.append(
        os.path.join(os.path.expanduser("~"), ".config", "omodresolve", Constants.CONFIG_FILE_NAME)
    )
    return paths


def _load_yaml_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load the first available YAML configuration file.

    Args:
        path: Explicit config path; when omitted the default locations are searched.

    Returns:
        dict: Parsed configuration, empty when no file is found.
    """
    import yaml  # pylint: disable=import-outside-toplevel

    candidates = [path] if path else _default_config_paths()
    for candidate in candidates:
        if not candidate or not os.path.isfile(candidate):
            continue
        with open(candidate, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
        logger.debug("Loaded configuration from %s", candidate)
        return data if isinstance(data, dict) else {}
    if path:
        logger.warning("Config file not found: %s", path)
    return {}


def apply_config(cfg: Dict[str, Any]) -> None:
    """Apply a parsed configuration mapping onto Constants.

    Unknown keys are ignored so older config files keep working.
    """
    if not isinstance(cfg, dict):
        return
    repos = cfg.get("repositories")
    if isinstance(repos, str):
        repos = [repos]
    if isinstance(repos, list) and repos:
        Constants.REPOSITORY_URLS = [str(r).rstrip("/") for r in repos]
    if cfg.get("local_repository"):
        Constants.LOCAL_REPOSITORY = os.path.expanduser(str(cfg["local_repository"]))
    groups = cfg.get("candidate_groups")
    if isinstance(groups, list) and groups:
        Constants.CANDIDATE_GROUPS = [str(g) for g in groups]
    types = cfg.get("candidate_types")
    if isinstance(types, list) and types:
        Constants.CANDIDATE_TYPES = [str(t) for t in types]
    if cfg.get("request_timeout") is not None:
        Constants.REQUEST_TIMEOUT = int(cfg["request_timeout"])
    if cfg.get("max_steps") is not None:
        Constants.MAX_STEPS = int(cfg["max_steps"])
    if cfg.get("allow_newer") is not None:
        Constants.ALLOW_NEWER = bool(cfg["allow_newer"])
    if cfg.get("offline") is not None:
        Constants.OFFLINE = bool(cfg["offline"])
    if cfg.get("work_dir"):
        Constants.WORK_DIR = os.path.expanduser(str(cfg["work_dir"]))
