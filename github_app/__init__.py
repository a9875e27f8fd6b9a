# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""GitHub App REST client and cached API resources.

Layout:
- `github_app/` (this module) defines the REST transport + per-client stats helpers
- `github_app/app_auth.py` mints and caches app JWTs and installation tokens
- `github_app/pagination.py` walks `Link: rel="next"` pages
- `github_app/api/*` contains per-resource fetch logic, with list caching where it pays off
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

import requests

from common import DEFAULT_GITHUB_API_URL

from .exceptions import (
    GitHubAPIError,
    GitHubAuthError,
    GitHubDecodeError,
    GitHubForbiddenError,
    GitHubNotFoundError,
    GitHubRequestError,
    SigningError,
)
from .tokens import AppToken, InstallationToken, OAuthToken, Token, UserToken

_logger = logging.getLogger(__name__)


class _GitHubAPIStats:
    """Per-client REST + cache statistics (reported by scripts with --verbose)."""

    def __init__(self):
        self.reset()

    def reset(self) -> None:
        # REST call stats (by logical label).
        self.rest_calls_total = 0
        self.rest_calls_by_label: Dict[str, int] = {}
        self.rest_success_total = 0
        self.rest_time_total_s = 0.0
        self.rest_time_by_label_s: Dict[str, float] = {}

        # Error stats
        self.rest_errors_total = 0
        self.rest_errors_by_status: Dict[int, int] = {}
        self.rest_last_error: Dict[str, Any] = {}

        # Generic cache stats (by cache name)
        self.cache_hits: Dict[str, int] = {}
        self.cache_misses: Dict[str, int] = {}
        self.cache_writes: Dict[str, int] = {}


class GitHubAPIClient:
    """GitHub REST API transport (lightweight; credentials and caching live elsewhere).

    Every call takes the Authorization header from the caller, because one process talks
    to GitHub as the app (JWT), as many installations, and on behalf of users.

    Example:
        api = GitHubAPIClient()
        resp = api.get("app/installations/123", headers=app_token.headers())
        installation = resp.json()
    """

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_GITHUB_API_URL,
        timeout_s: float = 10,
        debug_rest: bool = False,
    ):
        self.base_url = str(base_url or DEFAULT_GITHUB_API_URL).rstrip("/")
        self.timeout_s = float(timeout_s)
        self.headers: Dict[str, str] = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        self.logger = logging.getLogger(self.__class__.__name__)
        self._debug_rest = bool(debug_rest)
        self.stats = _GitHubAPIStats()

    def url_for(self, endpoint: str) -> str:
        """Join a relative endpoint to base_url; absolute URLs (pagination links) pass through."""
        ep = str(endpoint or "")
        if ep.startswith("http://") or ep.startswith("https://"):
            return ep
        return f"{self.base_url}/{ep.lstrip('/')}"

    @staticmethod
    def _rest_label_for_url(url: str) -> str:
        """Short, low-cardinality label for stats (ids and names replaced by '*')."""
        path = str(url or "").split("://", 1)[-1]
        path = path.split("/", 1)[1] if "/" in path else ""
        parts = [p for p in path.split("?", 1)[0].split("/") if p]
        if parts and parts[0] == "repos":
            # repos/{owner}/{repo}/...
            parts = ["repos", "*", "*"] + parts[3:]
        return "/".join("*" if p.isdigit() else p for p in parts) or "root"

    def _rest_record(self, *, label: str, endpoint: str, status_code: Optional[int], dt_s: float) -> None:
        st = self.stats
        st.rest_calls_total += 1
        st.rest_calls_by_label[label] = int(st.rest_calls_by_label.get(label, 0)) + 1
        st.rest_time_total_s += float(dt_s)
        st.rest_time_by_label_s[label] = float(st.rest_time_by_label_s.get(label, 0.0)) + float(dt_s)
        if status_code is not None and status_code < 400:
            st.rest_success_total += 1
            return
        code = int(status_code or 0)
        st.rest_errors_total += 1
        st.rest_errors_by_status[code] = int(st.rest_errors_by_status.get(code, 0)) + 1
        st.rest_last_error = {"status": code, "endpoint": str(endpoint or ""), "label": label}

    def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
        allow_redirects: bool = True,
        label: Optional[str] = None,
    ) -> requests.Response:
        """Issue one HTTP request and return the response, or raise GitHubAPIError.

        3xx responses are returned as-is when allow_redirects=False (artifact downloads).
        Request/response bodies are never logged: they carry tokens.
        """
        url = self.url_for(endpoint)
        lbl = str(label or "").strip() or self._rest_label_for_url(url)
        method_u = str(method or "GET").upper()
        hdrs = dict(self.headers)
        hdrs.update(headers or {})

        if self._debug_rest:
            self.logger.debug("GH REST %s [%s] %s", method_u, lbl, url)

        t0 = time.monotonic()
        status_code: Optional[int] = None
        try:
            resp = requests.request(
                method_u,
                url,
                params=params,
                json=json_body,
                headers=hdrs,
                timeout=self.timeout_s,
                allow_redirects=allow_redirects,
            )
            status_code = int(resp.status_code)
        except requests.exceptions.RequestException as e:
            raise GitHubRequestError(status_code=0, endpoint=str(endpoint), message=f"GitHub API request failed for {endpoint}: {e}") from e
        finally:
            self._rest_record(label=lbl, endpoint=str(endpoint), status_code=status_code, dt_s=max(0.0, time.monotonic() - t0))

        if self._debug_rest:
            self.logger.debug(
                "GH REST RESP [%s] status=%s remaining=%s", lbl, status_code, resp.headers.get("X-RateLimit-Remaining")
            )
        self._raise_for_status(resp, endpoint=str(endpoint))
        return resp

    @staticmethod
    def _raise_for_status(resp: requests.Response, *, endpoint: str) -> None:
        code = int(resp.status_code)
        if code < 400:
            return
        detail = ""
        try:
            body = resp.json()
            if isinstance(body, dict):
                detail = str(body.get("message") or "")
        except ValueError:
            detail = ""
        msg = f"GitHub API returned {code} for {endpoint}" + (f": {detail}" if detail else "")
        if code == 401:
            raise GitHubAuthError(status_code=code, endpoint=endpoint, message=msg)
        if code == 403:
            raise GitHubForbiddenError(status_code=code, endpoint=endpoint, message=msg)
        if code == 404:
            raise GitHubNotFoundError(status_code=code, endpoint=endpoint, message=msg)
        raise GitHubRequestError(status_code=code, endpoint=endpoint, message=msg)

    def get(self, endpoint: str, **kwargs: Any) -> requests.Response:
        return self.request("GET", endpoint, **kwargs)

    def post(self, endpoint: str, **kwargs: Any) -> requests.Response:
        return self.request("POST", endpoint, **kwargs)

    def get_json(self, endpoint: str, **kwargs: Any) -> Any:
        """GET and decode the JSON body (GitHubDecodeError if it is not JSON)."""
        resp = self.get(endpoint, **kwargs)
        try:
            return resp.json()
        except ValueError as e:
            raise GitHubDecodeError(f"Invalid JSON from {endpoint}: {e}") from e

    def _cache_hit(self, name: str) -> None:
        k = str(name or "").strip() or "unknown"
        self.stats.cache_hits[k] = int(self.stats.cache_hits.get(k, 0)) + 1

    def _cache_miss(self, name: str) -> None:
        k = str(name or "").strip() or "unknown"
        self.stats.cache_misses[k] = int(self.stats.cache_misses.get(k, 0)) + 1

    def _cache_write(self, name: str) -> None:
        k = str(name or "").strip() or "unknown"
        self.stats.cache_writes[k] = int(self.stats.cache_writes.get(k, 0)) + 1

    def get_rest_call_stats(self) -> Dict[str, Any]:
        """Return REST call stats for this client."""
        st = self.stats
        return {
            "total": int(st.rest_calls_total),
            "success_total": int(st.rest_success_total),
            "error_total": int(st.rest_errors_total),
            "time_total_s": float(st.rest_time_total_s),
            "by_label": dict(sorted(st.rest_calls_by_label.items(), key=lambda kv: (-kv[1], kv[0]))),
            "time_by_label_s": dict(sorted(st.rest_time_by_label_s.items(), key=lambda kv: (-kv[1], kv[0]))),
            "errors_by_status": dict(sorted(st.rest_errors_by_status.items())),
            "last_error": dict(st.rest_last_error),
        }

    def get_cache_stats(self) -> Dict[str, Any]:
        """Return hit/miss/write counts per cache name."""
        names = set(self.stats.cache_hits) | set(self.stats.cache_misses) | set(self.stats.cache_writes)
        return {
            n: {
                "hits": int(self.stats.cache_hits.get(n, 0)),
                "misses": int(self.stats.cache_misses.get(n, 0)),
                "writes": int(self.stats.cache_writes.get(n, 0)),
            }
            for n in sorted(names)
        }


# Re-exported after GitHubAPIClient is defined: these modules import it back.
from .app_auth import GitHubAppAuth  # noqa: E402
from .app import GitHubApp  # noqa: E402

__all__ = [
    "AppToken",
    "GitHubAPIClient",
    "GitHubAPIError",
    "GitHubApp",
    "GitHubAppAuth",
    "GitHubAuthError",
    "GitHubDecodeError",
    "GitHubForbiddenError",
    "GitHubNotFoundError",
    "GitHubRequestError",
    "InstallationToken",
    "OAuthToken",
    "SigningError",
    "Token",
    "UserToken",
]
