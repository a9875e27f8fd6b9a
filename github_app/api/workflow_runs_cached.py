# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Successful push-triggered workflow runs, cached (REST).

Resources:
  GET /repos/{owner}/{repo}/actions/runs?event=push&status=success
  GET /repos/{owner}/{repo}/actions/workflows/{workflow}/runs?branch={branch}&event=push&status=success

`workflow` may be a numeric id or a file name ("ci.yml").

Example API Response:
  {
    "total_count": 1,
    "workflow_runs": [
      {
        "id": 30433642,
        "head_branch": "main",
        "workflow_id": 161335,
        "check_suite_url": "https://api.github.com/repos/octo-org/app/check-suites/414944374"
      }
    ]
  }

Runs are returned newest first, so `max_items` picks the most recent ones.
"""

from __future__ import annotations

from typing import Any, Hashable, Iterator, Tuple

from ..github_types import WorkflowRun
from ..pagination import iter_json_list
from .base_cached import CachedListResource

SUCCESSFUL_PUSH_RUNS = {"event": "push", "status": "success"}


class RepoWorkflowRunsCached(CachedListResource[WorkflowRun]):
    """Latest successful push runs across all workflows of a repository."""

    @property
    def cache_name(self) -> str:
        return "repo_workflow_runs"

    def api_call_format(self) -> str:
        return "REST GET /repos/{owner}/{repo}/actions/runs?event=push&status=success (paginated)"

    def cache_key(self, **kwargs: Any) -> Tuple[Hashable, ...]:
        return (str(kwargs["owner"]), str(kwargs["repo"]), kwargs["token"], int(kwargs["max_items"]))

    def fetch(self, **kwargs: Any) -> Iterator[WorkflowRun]:
        # https://docs.github.com/rest/actions/workflow-runs#list-workflow-runs-for-a-repository
        return iter_json_list(
            self.api,
            f"repos/{kwargs['owner']}/{kwargs['repo']}/actions/runs",
            token=kwargs["token"],
            decode=WorkflowRun.from_json,
            list_key="workflow_runs",
            params=dict(SUCCESSFUL_PUSH_RUNS),
            max_items=int(kwargs["max_items"]),
        )


class WorkflowRunsCached(CachedListResource[WorkflowRun]):
    """Latest successful push runs of one workflow on one branch."""

    @property
    def cache_name(self) -> str:
        return "workflow_runs"

    def api_call_format(self) -> str:
        return (
            "REST GET /repos/{owner}/{repo}/actions/workflows/{workflow}/runs"
            "?branch={branch}&event=push&status=success (paginated)"
        )

    def cache_key(self, **kwargs: Any) -> Tuple[Hashable, ...]:
        return (
            str(kwargs["owner"]),
            str(kwargs["repo"]),
            str(kwargs["workflow"]),
            str(kwargs["branch"]),
            kwargs["token"],
            int(kwargs["max_items"]),
        )

    def fetch(self, **kwargs: Any) -> Iterator[WorkflowRun]:
        # https://docs.github.com/rest/actions/workflow-runs#list-workflow-runs-for-a-workflow
        params = {"branch": str(kwargs["branch"])}
        params.update(SUCCESSFUL_PUSH_RUNS)
        return iter_json_list(
            self.api,
            f"repos/{kwargs['owner']}/{kwargs['repo']}/actions/workflows/{kwargs['workflow']}/runs",
            token=kwargs["token"],
            decode=WorkflowRun.from_json,
            list_key="workflow_runs",
            params=params,
            max_items=int(kwargs["max_items"]),
            label="repos/*/*/actions/workflows/*/runs",
        )
