# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Cursor-based pagination for GitHub list endpoints.

GitHub list endpoints return one page per request plus a `Link: <...>; rel="next"` header.
The next link already carries every query parameter of the original request, so after
page one we only resend `per_page`.

Two payload shapes exist:
  GET /app/installations              -> [ {...}, {...} ]
  GET /installation/repositories      -> {"total_count": 2, "repositories": [ {...}, {...} ]}
The second shape is reached with `list_key="repositories"`.

Pages are not transactional: if page 3 fails, the items of pages 1-2 have already been
yielded and stay delivered. The error propagates to the caller unchanged.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterator, List, Optional, TypeVar

from common import GITHUB_MAX_PER_PAGE

from .exceptions import GitHubDecodeError
from .tokens import Token

if TYPE_CHECKING:  # pragma: no cover
    from . import GitHubAPIClient

_logger = logging.getLogger(__name__)

T = TypeVar("T")


def next_page_url(resp: Any) -> Optional[str]:
    """Return the `rel="next"` URL from a response's Link header, or None on the last page."""
    links = getattr(resp, "links", None) or {}
    nxt = links.get("next") or {}
    url = nxt.get("url")
    return str(url) if url else None


def _page_items(payload: Any, list_key: Optional[str], url: str) -> List[Any]:
    if list_key is not None:
        if not isinstance(payload, dict):
            raise GitHubDecodeError(f"Expected a JSON object with {list_key!r} from {url}, got {type(payload).__name__}")
        payload = payload.get(list_key)
    if not isinstance(payload, list):
        raise GitHubDecodeError(f"Expected a JSON list from {url} (list_key={list_key!r}), got {type(payload).__name__}")
    return payload


def iter_json_list(
    api: "GitHubAPIClient",
    url: str,
    *,
    token: Token,
    decode: Callable[[Dict[str, Any]], T],
    list_key: Optional[str] = None,
    params: Optional[Dict[str, Any]] = None,
    one_shot_params: Optional[Dict[str, Any]] = None,
    per_page: Optional[int] = None,
    max_items: int = 1000,
    label: Optional[str] = None,
) -> Iterator[T]:
    """Yield decoded items across pages, stopping after `max_items` or on the last page.

    Args:
        api: Transport used for each page request.
        url: First page endpoint (relative to api.base_url, or absolute).
        token: Credential for the Authorization header.
        decode: Builds one item from its JSON object.
        list_key: Field holding the item list, or None when the payload is the list itself.
        params: Query parameters for the first page.
        one_shot_params: Query parameters sent on the first request only (e.g. `since`).
        per_page: Page size hint; defaults to min(max_items, 100).
        max_items: Hard cap on yielded items. Items past the cap on a fetched page are dropped.

    Raises:
        GitHubAPIError: Any page request failed.
        GitHubDecodeError: A page payload did not have the expected shape.
    """
    max_items = int(max_items)
    page_size = int(per_page) if per_page is not None else max(1, min(max_items, GITHUB_MAX_PER_PAGE))
    headers = token.headers()

    next_url: Optional[str] = url
    page_params: Dict[str, Any] = dict(params or {})
    page_params.update({k: v for (k, v) in (one_shot_params or {}).items() if v is not None})
    page_params["per_page"] = page_size
    n = 0
    pages = 0

    while next_url and n < max_items:
        resp = api.get(next_url, params=page_params, headers=headers, label=label)
        pages += 1
        try:
            payload = resp.json()
        except ValueError as e:
            raise GitHubDecodeError(f"Invalid JSON on page {pages} of {url}: {e}") from e

        for raw in _page_items(payload, list_key, url):
            yield decode(raw)
            n += 1
            if n >= max_items:
                break

        next_url = next_page_url(resp)
        # The next link repeats the original query string; only per_page is re-sent.
        page_params = {"per_page": page_size}

    _logger.debug("Fetched %d items from %s in %d page(s)", n, url, pages)


def get_json_list(api: "GitHubAPIClient", url: str, **kwargs: Any) -> List[Any]:
    """Materialize `iter_json_list` into a list."""
    return list(iter_json_list(api, url, **kwargs))
