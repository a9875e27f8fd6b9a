# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Shared constants, configuration loading and logging setup for gh-app-cache.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

_logger = logging.getLogger(__name__)

#
# Cache policy constants (single source of truth)
#
# Call sites import these instead of repeating literals (9m / 55m / 50s / etc).
#
APP_TOKEN_LIFETIME_S: int = 10 * 60
# ^ Lifetime (seconds) written into the app JWT `exp` claim. GitHub rejects anything longer than 10 minutes.
APP_TOKEN_TTL_S: int = 9 * 60
# ^ How long a minted app JWT stays in the cache. One minute below the lifetime to absorb clock skew
#   between this host and GitHub.
INSTALLATION_TOKEN_TTL_S: int = 55 * 60
# ^ How long an installation access token stays in the cache. GitHub issues them for 60 minutes.
ARTIFACT_URL_TTL_S: int = 50
# ^ TTL (seconds) for signed artifact download URLs (the `Location:` of /artifacts/{id}/zip).
#   GitHub signs these for about a minute.
DEFAULT_LIST_TTL_S: int = 3 * 60
# ^ TTL (seconds) for fully materialized list results (repositories, workflows, runs, artifacts).

#
# Pagination caps per listing kind
#
MAX_USER_INSTALLATIONS: int = 10
MAX_APP_INSTALLATIONS: int = 100000
MAX_REPOSITORIES: int = 300
MAX_WORKFLOWS: int = 100
MAX_ARTIFACTS: int = 100
DEFAULT_MAX_RUNS: int = 100
GITHUB_MAX_PER_PAGE: int = 100
# ^ GitHub silently clamps `per_page` above this value.

DEFAULT_INSTALLATION_PERMISSIONS: Dict[str, str] = {"actions": "read"}
# ^ Permission scope requested when exchanging the app JWT for an installation token.

DEFAULT_GITHUB_API_URL: str = "https://api.github.com"


def default_config_path() -> Path:
    """Return the GitHub App config file location.

    Resolution order:
    - GITHUB_APP_CONFIG (explicit override)
    - ~/.config/github-app.yml
    """
    override = os.environ.get("GITHUB_APP_CONFIG")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "github-app.yml"


@dataclass
class AppConfig:
    """Settings needed to act as a GitHub App."""

    app_id: int
    private_key_path: Path
    permissions: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_INSTALLATION_PERMISSIONS))
    base_url: str = DEFAULT_GITHUB_API_URL


def load_app_config(path: Optional[Path] = None) -> AppConfig:
    """Load the GitHub App configuration.

    The YAML file looks like:

        app_id: 123456
        private_key_path: ~/.config/my-app.private-key.pem
        permissions:
          actions: read
        base_url: https://api.github.com

    GITHUB_APP_ID and GITHUB_APP_PRIVATE_KEY override the file values, so the file
    itself is optional when both are set.
    """
    cfg_path = Path(path).expanduser() if path is not None else default_config_path()
    raw: Dict[str, Any] = {}
    if cfg_path.exists():
        with open(cfg_path, "r") as f:
            loaded = yaml.safe_load(f)
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ValueError(f"GitHub App config {cfg_path} must be a mapping, got {type(loaded).__name__}")
        raw = loaded
        _logger.debug("Loaded GitHub App config from %s", cfg_path)

    app_id = os.environ.get("GITHUB_APP_ID") or raw.get("app_id")
    key_path = os.environ.get("GITHUB_APP_PRIVATE_KEY") or raw.get("private_key_path")
    if not app_id:
        raise ValueError(f"GitHub App id is not configured (set app_id in {cfg_path} or GITHUB_APP_ID)")
    if not key_path:
        raise ValueError(
            f"GitHub App private key is not configured (set private_key_path in {cfg_path} or GITHUB_APP_PRIVATE_KEY)"
        )
    try:
        app_id_i = int(app_id)
    except (ValueError, TypeError):
        raise ValueError(f"GitHub App id must be numeric, got {app_id!r}")

    permissions = raw.get("permissions") or DEFAULT_INSTALLATION_PERMISSIONS
    if not isinstance(permissions, dict):
        raise ValueError(f"permissions in {cfg_path} must be a mapping")

    return AppConfig(
        app_id=app_id_i,
        private_key_path=Path(str(key_path)).expanduser(),
        permissions={str(k): str(v) for (k, v) in permissions.items()},
        base_url=str(raw.get("base_url") or DEFAULT_GITHUB_API_URL).rstrip("/"),
    )


def setup_logging(verbose: bool = False) -> None:
    """Configure root logging for command-line scripts."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )
    # urllib3 is chatty at DEBUG and logs full URLs including signed query strings.
    logging.getLogger("urllib3").setLevel(logging.WARNING)
