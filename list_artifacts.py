#!/usr/bin/env python3
# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""List the latest successful workflow runs of a repository and their artifacts, as a GitHub App."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar

from common import DEFAULT_MAX_RUNS, load_app_config, setup_logging
from github_app import GitHubApp, GitHubAPIError, GitHubAuthError, InstallationToken, SigningError

_logger = logging.getLogger(__name__)

T = TypeVar("T")


def with_token_refresh(app: GitHubApp, installation_id: int, call: Callable[[InstallationToken], T]) -> T:
    """Run `call` with the cached installation token; on 401 force a new token and retry once."""
    try:
        return call(app.auth.token(installation_id))
    except GitHubAuthError:
        _logger.info("Installation token for %d was rejected; refreshing", installation_id)
        return call(app.auth.token(installation_id, forced=True))


def collect_runs(
    app: GitHubApp,
    *,
    owner: str,
    repo: str,
    token: InstallationToken,
    workflow: Optional[str],
    branch: str,
    max_runs: int,
    with_urls: bool,
) -> List[Dict[str, Any]]:
    if workflow:
        runs = app.workflow_runs(owner, repo, workflow, branch, token, max_items=max_runs)
    else:
        runs = app.repo_runs(owner, repo, token, max_items=max_runs)

    out: List[Dict[str, Any]] = []
    for run in runs:
        artifacts = []
        for art in app.artifacts(owner, repo, run.id, token):
            entry: Dict[str, Any] = {"id": art.id, "name": art.name}
            if with_urls:
                entry["url"] = app.artifact_zip_url(owner, repo, art.id, token)
            artifacts.append(entry)
        out.append({"run_id": run.id, "branch": run.head_branch, "workflow_id": run.workflow_id, "artifacts": artifacts})
    return out


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="List successful workflow runs and their artifacts using GitHub App credentials",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Latest successful push runs of any workflow
  %(prog)s octo-org/app --installation-id 12345678

  # Latest 3 runs of ci.yml on main, with signed download URLs
  %(prog)s octo-org/app --installation-id 12345678 --workflow ci.yml --branch main --max-runs 3 --urls
"""
    )
    parser.add_argument('repo', help='Repository in format owner/repo')
    parser.add_argument('--installation-id', type=int, required=True, help='GitHub App installation id')
    parser.add_argument('--workflow', help='Workflow id or file name (default: all workflows)')
    parser.add_argument('--branch', default='main', help='Branch, used with --workflow (default: main)')
    parser.add_argument(
        '--max-runs',
        type=int,
        default=DEFAULT_MAX_RUNS,
        help=f'Maximum number of runs to list (default: {DEFAULT_MAX_RUNS})'
    )
    parser.add_argument('--urls', action='store_true', help='Also resolve artifact download URLs')
    parser.add_argument('--config', type=Path, help='GitHub App config file (default: ~/.config/github-app.yml)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging and REST call stats')
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if args.repo.count('/') != 1:
        parser.error(f"repo must be owner/repo, got {args.repo!r}")
    owner, repo = args.repo.split('/', 1)

    try:
        app = GitHubApp.from_config(load_app_config(args.config), debug_rest=args.verbose)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    with app:
        try:
            runs = with_token_refresh(
                app,
                args.installation_id,
                lambda token: collect_runs(
                    app,
                    owner=owner,
                    repo=repo,
                    token=token,
                    workflow=args.workflow,
                    branch=args.branch,
                    max_runs=args.max_runs,
                    with_urls=args.urls,
                ),
            )
        except (GitHubAPIError, SigningError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        print(json.dumps(runs, indent=2))
        if args.verbose:
            print(json.dumps({"rest": app.api.get_rest_call_stats(), "cache": app.api.get_cache_stats()}, indent=2), file=sys.stderr)
    return 0


if __name__ == '__main__':
    sys.exit(main())
