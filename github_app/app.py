# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""One object that wires a GitHub App together.

`GitHubApp` owns the transport, the credential caches and one instance of every cached
resource, so each process (or each test) gets its own independent set of caches.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Union

from common import DEFAULT_MAX_RUNS, AppConfig

from . import GitHubAPIClient
from .api.artifacts_cached import ArtifactZipURLCached, RunArtifactsCached
from .api.installations import account_for_oauth, installations_for_app, installations_for_user
from .api.repositories_cached import InstallationRepositoriesCached, UserInstallationRepositoriesCached
from .api.workflow_runs_cached import RepoWorkflowRunsCached, WorkflowRunsCached
from .api.workflows_cached import WorkflowsCached
from .app_auth import GitHubAppAuth
from .github_types import Account, Artifact, Installation, Repository, Workflow, WorkflowRun
from .tokens import InstallationToken, OAuthToken, UserToken

RepoToken = Union[InstallationToken, UserToken]


class GitHubApp:
    """GitHub App facade: credentials + cached listings.

    Example:
        app = GitHubApp.from_config(load_app_config())
        token = app.auth.token(installation_id)
        for run in app.workflow_runs("octo-org", "app", "ci.yml", "main", token, max_items=5):
            print(run.id, [a.name for a in app.artifacts("octo-org", "app", run.id, token)])
    """

    def __init__(self, api: GitHubAPIClient, auth: GitHubAppAuth):
        self.api = api
        self.auth = auth
        self._user_repos = UserInstallationRepositoriesCached(api)
        self._installation_repos = InstallationRepositoriesCached(api)
        self._workflows = WorkflowsCached(api)
        self._repo_runs = RepoWorkflowRunsCached(api)
        self._workflow_runs = WorkflowRunsCached(api)
        self._artifacts = RunArtifactsCached(api)
        self._artifact_urls = ArtifactZipURLCached(api)

    def close(self) -> None:
        """Stop every cache sweep thread owned by this app (resources and credentials)."""
        for resource in (
            self._user_repos,
            self._installation_repos,
            self._workflows,
            self._repo_runs,
            self._workflow_runs,
            self._artifacts,
            self._artifact_urls,
        ):
            resource.close()
        self.auth.close()

    def __enter__(self) -> "GitHubApp":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    @classmethod
    def from_config(cls, config: AppConfig, *, debug_rest: bool = False) -> "GitHubApp":
        api = GitHubAPIClient(base_url=config.base_url, debug_rest=debug_rest)
        auth = GitHubAppAuth(
            api,
            config.app_id,
            private_key_path=config.private_key_path,
            permissions=config.permissions,
        )
        return cls(api, auth)

    def installations(self, since: Optional[datetime] = None) -> List[Installation]:
        return list(installations_for_app(self.api, self.auth.jwt(), since=since))

    def installation(self, installation_id: int) -> Installation:
        return self.auth.installation_for_id(installation_id)

    def user_installations(self, token: UserToken) -> List[Installation]:
        return list(installations_for_user(self.api, token))

    def oauth_account(self, token: OAuthToken) -> Account:
        return account_for_oauth(self.api, token)

    def user_repositories(self, installation_id: int, token: UserToken) -> List[Repository]:
        return self._user_repos.get(installation_id=installation_id, token=token)

    def installation_repositories(self, token: InstallationToken) -> List[Repository]:
        return self._installation_repos.get(token=token)

    def workflows(self, owner: str, repo: str, token: RepoToken) -> List[Workflow]:
        return self._workflows.get(owner=owner, repo=repo, token=token)

    def repo_runs(self, owner: str, repo: str, token: RepoToken, *, max_items: int = DEFAULT_MAX_RUNS) -> List[WorkflowRun]:
        return self._repo_runs.get(owner=owner, repo=repo, token=token, max_items=max_items)

    def workflow_runs(
        self,
        owner: str,
        repo: str,
        workflow: str,
        branch: str,
        token: RepoToken,
        *,
        max_items: int = DEFAULT_MAX_RUNS,
    ) -> List[WorkflowRun]:
        return self._workflow_runs.get(
            owner=owner, repo=repo, workflow=workflow, branch=branch, token=token, max_items=max_items
        )

    def artifacts(self, owner: str, repo: str, run_id: int, token: RepoToken) -> List[Artifact]:
        return self._artifacts.get(owner=owner, repo=repo, run_id=run_id, token=token)

    def artifact_zip_url(self, owner: str, repo: str, artifact_id: int, token: RepoToken) -> str:
        return self._artifact_urls.get(owner=owner, repo=repo, artifact_id=artifact_id, token=token)
