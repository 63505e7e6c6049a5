import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from prsentry_core.errors import ConfigurationError
from prsentry_core.models import SEVERITIES, SEVERITY_NONE

DEFAULT_CONFIG: dict = {
    "notify": True,
    "issue_threshold": 100,
    "can_approve": False,
    "add_reviewer": None,  # None = follow can_approve
    "reset_comments": False,
    "coverage_severity": SEVERITY_NONE,
    "issue_severity": "INFO",
    "reviewer_login": None,  # None = the account owning the token
    "analysis_url": None,
    "github_url": "https://api.github.com",
    "timeout": 15,
}


@dataclass(frozen=True)
class Settings:
    """Validated configuration of one run. Built once by build_settings and never changed."""

    github_token: str
    notify: bool = True
    issue_threshold: int = 100
    can_approve: bool = False
    add_reviewer: bool = False
    reset_comments: bool = False
    coverage_severity: str = SEVERITY_NONE
    issue_severity: str = "INFO"
    reviewer_login: Optional[str] = None
    analysis_url: Optional[str] = None
    github_url: str = "https://api.github.com"
    timeout: int = 15

    @property
    def coverage_enabled(self) -> bool:
        return self.coverage_severity != SEVERITY_NONE


def load_config(config_path: str = ".prsentry.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prsentry.yml in the current directory
      3. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            try:
                file_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Cannot parse {config_path}: {e}") from e
        if not isinstance(file_config, dict):
            raise ConfigurationError(f"{config_path} must contain a mapping, got {type(file_config).__name__}")
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # Credentials come from the environment only
    config["github_token"] = os.environ.get("GITHUB_TOKEN")

    return config


def _severity(config: dict, key: str, allow_none: bool) -> str:
    value = str(config.get(key) or "").upper()
    allowed = SEVERITIES + ((SEVERITY_NONE,) if allow_none else ())
    if value not in allowed:
        raise ConfigurationError(f"{key} must be one of {', '.join(allowed)}, got {config.get(key)!r}")
    return value


def _positive_int(config: dict, key: str) -> int:
    value = config.get(key)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigurationError(f"{key} must be a positive integer, got {value!r}")
    return value


def _bool(config: dict, key: str, default: bool) -> bool:
    value = config.get(key, default)
    if not isinstance(value, bool):
        raise ConfigurationError(f"{key} must be true or false, got {value!r}")
    return value


def _url(config: dict, key: str, required: bool) -> Optional[str]:
    value = config.get(key)
    if not value:
        if required:
            raise ConfigurationError(f"{key} is not set")
        return None
    if not str(value).startswith(("http://", "https://")):
        raise ConfigurationError(f"{key} must be an http(s) URL, got {value!r}")
    return str(value).rstrip("/")


def build_settings(config: dict) -> Settings:
    """Validate a merged config dict and freeze it into Settings.

    Raises ConfigurationError on the first missing or malformed value.
    """
    token = config.get("github_token")
    if not token:
        raise ConfigurationError("No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.")

    can_approve = _bool(config, "can_approve", False)
    if config.get("add_reviewer") is None:
        add_reviewer = can_approve
    else:
        add_reviewer = _bool(config, "add_reviewer", can_approve)

    return Settings(
        github_token=token,
        notify=_bool(config, "notify", True),
        issue_threshold=_positive_int(config, "issue_threshold"),
        can_approve=can_approve,
        add_reviewer=add_reviewer,
        reset_comments=_bool(config, "reset_comments", False),
        coverage_severity=_severity(config, "coverage_severity", allow_none=True),
        issue_severity=_severity(config, "issue_severity", allow_none=False),
        reviewer_login=config.get("reviewer_login") or None,
        analysis_url=_url(config, "analysis_url", required=False),
        github_url=_url(config, "github_url", required=True),
        timeout=_positive_int(config, "timeout"),
    )
