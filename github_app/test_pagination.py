"""
Pytest tests for github_app/pagination.py (iter_json_list).

Run from the repo root:
    pytest github_app/test_pagination.py -v
"""

import pytest

from conftest import API, FakeResponse
from github_app import GitHubDecodeError, GitHubRequestError, InstallationToken
from github_app.pagination import get_json_list, iter_json_list

TOKEN = InstallationToken("ghs_test_token_1234")


def _ident(x):
    return x


def _pages(api, sizes, url="items"):
    """Register pages of consecutive ints: sizes=[2, 1] -> [[0, 1], [2]]."""
    n = 0
    for i, size in enumerate(sizes):
        page_url = url if i == 0 else f"{API}/{url}?page={i + 1}"
        nxt = f"{API}/{url}?page={i + 2}" if i + 1 < len(sizes) else None
        api.add("GET", page_url, FakeResponse(list(range(n, n + size)), next_url=nxt))
        n += size


def test_cap_stops_mid_second_page(api):
    _pages(api, [100, 100, 100])
    items = get_json_list(api, "items", token=TOKEN, decode=_ident, max_items=150)
    assert items == list(range(150))
    assert len(api.calls) == 2


def test_no_next_link_stops_after_one_request(api):
    _pages(api, [3])
    items = get_json_list(api, "items", token=TOKEN, decode=_ident, max_items=1000)
    assert items == [0, 1, 2]
    assert len(api.calls) == 1


def test_follows_cursor_until_absent(api):
    api.add("GET", "items", FakeResponse(["a", "b"], next_url=f"{API}/items?page=2"))
    api.add("GET", f"{API}/items?page=2", FakeResponse(["c"]))

    items = get_json_list(api, "items", token=TOKEN, decode=_ident, per_page=2, max_items=10)

    assert items == ["a", "b", "c"]
    assert api.urls() == [f"{API}/items", f"{API}/items?page=2"]
    assert all(c.params["per_page"] == 2 for c in api.calls)


def test_cap_one_stops_mid_page(api):
    api.add("GET", "items", FakeResponse(["a", "b"], next_url=f"{API}/items?page=2"))
    api.add("GET", f"{API}/items?page=2", FakeResponse(["c"]))

    items = get_json_list(api, "items", token=TOKEN, decode=_ident, per_page=2, max_items=1)

    assert items == ["a"]
    assert len(api.calls) == 1


def test_cap_on_page_boundary_issues_no_extra_request(api):
    _pages(api, [2, 2, 2])
    items = get_json_list(api, "items", token=TOKEN, decode=_ident, per_page=2, max_items=4)
    assert items == [0, 1, 2, 3]
    assert len(api.calls) == 2


def test_zero_cap_issues_no_request(api):
    assert get_json_list(api, "items", token=TOKEN, decode=_ident, max_items=0) == []
    assert api.calls == []


def test_empty_first_page(api):
    api.add("GET", "items", FakeResponse({"total_count": 0, "artifacts": []}))
    assert get_json_list(api, "items", token=TOKEN, decode=_ident, list_key="artifacts") == []
    assert len(api.calls) == 1


def test_list_key_and_decode(api):
    api.add("GET", "installation/repositories", FakeResponse({"repositories": [{"n": 1}, {"n": 2}]}))
    items = get_json_list(
        api, "installation/repositories", token=TOKEN, decode=lambda d: d["n"] * 10, list_key="repositories"
    )
    assert items == [10, 20]


def test_request_carries_token_and_page_size(api):
    _pages(api, [1])
    get_json_list(api, "items", token=TOKEN, decode=_ident, max_items=300)
    call = api.calls[0]
    assert call.headers["Authorization"] == "Bearer ghs_test_token_1234"
    # GitHub caps pages at 100.
    assert call.params == {"per_page": 100}


def test_one_shot_params_only_on_first_page(api):
    api.add("GET", "app/installations", FakeResponse([1], next_url=f"{API}/app/installations?page=2"))
    api.add("GET", f"{API}/app/installations?page=2", FakeResponse([2]))

    get_json_list(
        api,
        "app/installations",
        token=TOKEN,
        decode=_ident,
        params={"event": "push"},
        one_shot_params={"since": "2026-01-01T00:00:00.001Z"},
        max_items=10,
    )

    assert api.calls[0].params == {"event": "push", "since": "2026-01-01T00:00:00.001Z", "per_page": 10}
    assert api.calls[1].params == {"per_page": 10}


def test_iteration_is_lazy(api):
    _pages(api, [2, 2])
    it = iter_json_list(api, "items", token=TOKEN, decode=_ident, per_page=2, max_items=10)
    assert api.calls == []
    assert next(it) == 0
    assert len(api.calls) == 1


def test_error_on_later_page_keeps_delivered_items(api):
    api.add("GET", "items", FakeResponse(["a", "b"], next_url=f"{API}/items?page=2"))
    api.add("GET", f"{API}/items?page=2", FakeResponse({"message": "boom"}, status_code=502))

    seen = []
    with pytest.raises(GitHubRequestError) as exc:
        for item in iter_json_list(api, "items", token=TOKEN, decode=_ident, max_items=10):
            seen.append(item)
    assert seen == ["a", "b"]
    assert exc.value.status_code == 502


def test_malformed_payload_raises_decode_error(api):
    api.add("GET", "items", FakeResponse(raw_text="<html>not json</html>"))
    with pytest.raises(GitHubDecodeError):
        get_json_list(api, "items", token=TOKEN, decode=_ident)


def test_wrong_shape_raises_decode_error(api):
    api.add("GET", "items", FakeResponse({"workflows": "nope"}))
    with pytest.raises(GitHubDecodeError):
        get_json_list(api, "items", token=TOKEN, decode=_ident, list_key="workflows")


def test_malformed_later_page_keeps_delivered_items(api):
    api.add("GET", "items", FakeResponse(["a", "b"], next_url=f"{API}/items?page=2"))
    api.add("GET", f"{API}/items?page=2", FakeResponse(raw_text="<html>"))

    seen = []
    with pytest.raises(GitHubDecodeError):
        for item in iter_json_list(api, "items", token=TOKEN, decode=_ident, max_items=10):
            seen.append(item)
    assert seen == ["a", "b"]
    assert len(api.calls) == 2
