# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Repository workflows cached API (REST).

Resource:
  GET /repos/{owner}/{repo}/actions/workflows

Example API Response:
  {
    "total_count": 1,
    "workflows": [
      {"id": 161335, "name": "CI", "path": ".github/workflows/ci.yml", "state": "active"}
    ]
  }
"""

from __future__ import annotations

from typing import Any, Hashable, Iterator, Tuple

from common import MAX_WORKFLOWS

from ..github_types import Workflow
from ..pagination import iter_json_list
from .base_cached import CachedListResource


class WorkflowsCached(CachedListResource[Workflow]):
    @property
    def cache_name(self) -> str:
        return "workflows"

    def api_call_format(self) -> str:
        return "REST GET /repos/{owner}/{repo}/actions/workflows?per_page=100 (paginated, max 100)"

    def cache_key(self, **kwargs: Any) -> Tuple[Hashable, ...]:
        return (str(kwargs["owner"]), str(kwargs["repo"]), kwargs["token"])

    def fetch(self, **kwargs: Any) -> Iterator[Workflow]:
        # https://docs.github.com/rest/actions/workflows#list-repository-workflows
        return iter_json_list(
            self.api,
            f"repos/{kwargs['owner']}/{kwargs['repo']}/actions/workflows",
            token=kwargs["token"],
            decode=Workflow.from_json,
            list_key="workflows",
            max_items=MAX_WORKFLOWS,
        )
