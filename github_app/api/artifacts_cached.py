# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Workflow run artifacts and their download URLs, cached (REST).

Resources:
  GET /repos/{owner}/{repo}/actions/runs/{run_id}/artifacts
  GET /repos/{owner}/{repo}/actions/artifacts/{artifact_id}/zip   -> 302, Location: <signed URL>

Example API Response (list):
  {
    "total_count": 1,
    "artifacts": [
      {"id": 11, "name": "dist", "size_in_bytes": 556, "expired": false}
    ]
  }

TTL:
  list: DEFAULT_LIST_TTL_S (3m)
  download URL: ARTIFACT_URL_TTL_S (50s). GitHub signs the Location URL for about a minute,
  so handing out a cached one any later risks a dead link.
"""

from __future__ import annotations

from typing import Any, Hashable, Iterator, Optional, Tuple

from common import ARTIFACT_URL_TTL_S, MAX_ARTIFACTS

from ..exceptions import GitHubDecodeError
from ..github_types import Artifact
from ..pagination import iter_json_list
from .base_cached import CachedListResource, CachedValueResource


class RunArtifactsCached(CachedListResource[Artifact]):
    @property
    def cache_name(self) -> str:
        return "run_artifacts"

    def api_call_format(self) -> str:
        return "REST GET /repos/{owner}/{repo}/actions/runs/{run_id}/artifacts?per_page=100 (paginated, max 100)"

    def cache_key(self, **kwargs: Any) -> Tuple[Hashable, ...]:
        return (str(kwargs["owner"]), str(kwargs["repo"]), int(kwargs["run_id"]), kwargs["token"])

    def fetch(self, **kwargs: Any) -> Iterator[Artifact]:
        # https://docs.github.com/rest/actions/artifacts#list-workflow-run-artifacts
        return iter_json_list(
            self.api,
            f"repos/{kwargs['owner']}/{kwargs['repo']}/actions/runs/{int(kwargs['run_id'])}/artifacts",
            token=kwargs["token"],
            decode=Artifact.from_json,
            list_key="artifacts",
            max_items=MAX_ARTIFACTS,
        )


class ArtifactZipURLCached(CachedValueResource[str]):
    """Signed, short-lived download URL of one artifact zip.

    Keyed by (owner, repo, artifact_id) only: the URL does not depend on which token asked.
    """

    def __init__(self, api, *, ttl_s: float = ARTIFACT_URL_TTL_S, cache=None):
        super().__init__(api, ttl_s=ttl_s, cache=cache)

    @property
    def cache_name(self) -> str:
        return "artifact_zip_url"

    def api_call_format(self) -> str:
        return "REST GET /repos/{owner}/{repo}/actions/artifacts/{artifact_id}/zip (no redirect; read Location)"

    def cache_key(self, **kwargs: Any) -> Tuple[Hashable, ...]:
        return (str(kwargs["owner"]), str(kwargs["repo"]), int(kwargs["artifact_id"]))

    def fetch(self, **kwargs: Any) -> str:
        # https://docs.github.com/rest/actions/artifacts#download-an-artifact
        endpoint = f"repos/{kwargs['owner']}/{kwargs['repo']}/actions/artifacts/{int(kwargs['artifact_id'])}/zip"
        resp = self.api.get(
            endpoint,
            headers=kwargs["token"].headers(),
            allow_redirects=False,
            label="repos/*/*/actions/artifacts/*/zip",
        )
        location: Optional[str] = resp.headers.get("Location")
        if not location:
            raise GitHubDecodeError(f"No Location header in response from {endpoint} (status {resp.status_code})")
        return location
