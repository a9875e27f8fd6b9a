# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Shared pytest fixtures: a steppable clock and an in-process GitHub transport.

Run from the repo root:
    pytest -v
"""

import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pytest

# Set up path for imports
parent_dir = Path(__file__).parent
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))

from github_app import GitHubAPIClient  # noqa: E402

API = "https://api.github.com"


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.t = float(start)

    def __call__(self) -> float:
        return self.t

    def advance(self, seconds: float) -> None:
        self.t += float(seconds)


class FakeResponse:
    """The subset of requests.Response the library reads."""

    def __init__(
        self,
        body: Any = None,
        *,
        status_code: int = 200,
        next_url: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        raw_text: Optional[str] = None,
    ):
        self.status_code = status_code
        self._text = raw_text if raw_text is not None else json.dumps(body)
        self.links = {"next": {"url": next_url, "rel": "next"}} if next_url else {}
        self.headers = dict(headers or {})

    def json(self) -> Any:
        return json.loads(self._text)


@dataclass
class Call:
    method: str
    url: str
    params: Dict[str, Any]
    json_body: Any
    headers: Dict[str, str] = field(default_factory=dict)


class FakeGitHubAPI(GitHubAPIClient):
    """GitHubAPIClient whose network is a table of queued responses.

    Each (method, url) route holds a queue; the last response of a queue repeats.
    Status mapping and stats are the real ones.
    """

    def __init__(self):
        super().__init__()
        self.calls: List[Call] = []
        self._routes: Dict[Tuple[str, str], List[FakeResponse]] = {}

    def add(self, method: str, url: str, *responses: FakeResponse) -> None:
        self._routes.setdefault((method.upper(), self.url_for(url)), []).extend(responses)

    def request(self, method, endpoint, *, params=None, json_body=None, headers=None, allow_redirects=True, label=None):
        url = self.url_for(endpoint)
        self.calls.append(Call(method.upper(), url, dict(params or {}), json_body, dict(headers or {})))
        queue = self._routes.get((method.upper(), url))
        if not queue:
            raise AssertionError(f"unexpected request {method} {url}")
        resp = queue.pop(0) if len(queue) > 1 else queue[0]
        self._rest_record(label=label or url, endpoint=endpoint, status_code=resp.status_code, dt_s=0.0)
        self._raise_for_status(resp, endpoint=endpoint)
        return resp

    def urls(self) -> List[str]:
        return [c.url for c in self.calls]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def api() -> FakeGitHubAPI:
    return FakeGitHubAPI()
