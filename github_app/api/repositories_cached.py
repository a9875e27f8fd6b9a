# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Repositories visible to an installation, cached (REST).

Resources:
  GET /user/installations/{installation_id}/repositories   (user-to-server token)
  GET /installation/repositories                           (installation token)

Example API Response:
  {
    "total_count": 2,
    "repositories": [
      {"full_name": "octo-org/app", "private": false, "fork": false},
      {"full_name": "octo-org/secret", "private": true, "fork": false}
    ]
  }

Cached Fields:
  - full_name, private, fork (first 300 repositories)

TTL:
  DEFAULT_LIST_TTL_S (3m)
"""

from __future__ import annotations

from typing import Any, Hashable, Iterator, Tuple

from common import MAX_REPOSITORIES

from ..github_types import Repository
from ..pagination import iter_json_list
from .base_cached import CachedListResource


class UserInstallationRepositoriesCached(CachedListResource[Repository]):
    """Repositories of one installation that a user can access."""

    @property
    def cache_name(self) -> str:
        return "user_installation_repositories"

    def api_call_format(self) -> str:
        return "REST GET /user/installations/{installation_id}/repositories?per_page=100 (paginated, max 300)"

    def cache_key(self, **kwargs: Any) -> Tuple[Hashable, ...]:
        return (int(kwargs["installation_id"]), kwargs["token"])

    def fetch(self, **kwargs: Any) -> Iterator[Repository]:
        # https://docs.github.com/rest/apps/installations#list-repositories-accessible-to-the-user-access-token
        return iter_json_list(
            self.api,
            f"user/installations/{int(kwargs['installation_id'])}/repositories",
            token=kwargs["token"],
            decode=Repository.from_json,
            list_key="repositories",
            max_items=MAX_REPOSITORIES,
            label="user/installations/*/repositories",
        )


class InstallationRepositoriesCached(CachedListResource[Repository]):
    """Repositories the installation token grants access to."""

    @property
    def cache_name(self) -> str:
        return "installation_repositories"

    def api_call_format(self) -> str:
        return "REST GET /installation/repositories?per_page=100 (paginated, max 300)"

    def cache_key(self, **kwargs: Any) -> Tuple[Hashable, ...]:
        return (kwargs["token"],)

    def fetch(self, **kwargs: Any) -> Iterator[Repository]:
        # https://docs.github.com/rest/apps/installations#list-repositories-accessible-to-the-app-installation
        return iter_json_list(
            self.api,
            "installation/repositories",
            token=kwargs["token"],
            decode=Repository.from_json,
            list_key="repositories",
            max_items=MAX_REPOSITORIES,
        )
