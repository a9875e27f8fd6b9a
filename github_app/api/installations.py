# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Installation and account lookups (not cached).

Resources:
  GET /user/installations     (user-to-server token; payload {"installations": [...]})
  GET /app/installations      (app JWT; payload is the list itself)
  GET /user                   (OAuth token)

Example API Response (one installation):
  {
    "id": 12345678,
    "account": {"login": "octo-org"},
    "updated_at": "2026-01-24T10:30:00Z"
  }

These are called on login / webhook paths, where a stale answer is worse than a request.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Dict, Iterator, Optional

from common import MAX_APP_INSTALLATIONS, MAX_USER_INSTALLATIONS

from ..github_types import Account, Installation
from ..pagination import iter_json_list
from ..tokens import AppToken, OAuthToken, UserToken

if TYPE_CHECKING:  # pragma: no cover
    from .. import GitHubAPIClient


def since_param(since: Optional[datetime]) -> Dict[str, str]:
    """`since` query parameter for "installations changed after this instant".

    GitHub's filter is inclusive, so one millisecond is added to skip the installation
    that produced `since` in the first place.
    """
    if since is None:
        return {}
    if since.tzinfo is None:
        since = since.replace(tzinfo=timezone.utc)
    ts = (since + timedelta(milliseconds=1)).astimezone(timezone.utc)
    return {"since": ts.isoformat(timespec="milliseconds").replace("+00:00", "Z")}


def installations_for_user(api: "GitHubAPIClient", token: UserToken) -> Iterator[Installation]:
    """Installations of this app that the user can access."""
    # https://docs.github.com/rest/apps/installations#list-app-installations-accessible-to-the-user-access-token
    return iter_json_list(
        api,
        "user/installations",
        token=token,
        decode=Installation.from_json,
        list_key="installations",
        max_items=MAX_USER_INSTALLATIONS,
    )


def installations_for_app(
    api: "GitHubAPIClient", token: AppToken, since: Optional[datetime] = None
) -> Iterator[Installation]:
    """All installations of the app, optionally only those updated after `since`."""
    # https://docs.github.com/rest/apps/apps#list-installations-for-the-authenticated-app
    return iter_json_list(
        api,
        "app/installations",
        token=token,
        decode=Installation.from_json,
        one_shot_params=since_param(since),
        max_items=MAX_APP_INSTALLATIONS,
    )


def account_for_oauth(api: "GitHubAPIClient", token: OAuthToken) -> Account:
    """The account that owns an OAuth token."""
    # https://docs.github.com/rest/users/users#get-the-authenticated-user
    return Account.from_json(api.get_json("user", headers=token.headers()))
