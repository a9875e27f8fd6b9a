# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Plain records decoded from GitHub REST responses.

Only the fields this package reads are kept; everything else in the payload is ignored.
`from_json` raises GitHubDecodeError on a missing or mistyped field.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict

from .exceptions import GitHubDecodeError


def _require(d: Any, key: str, typ: type) -> Any:
    if not isinstance(d, dict):
        raise GitHubDecodeError(f"Expected a JSON object, got {type(d).__name__}")
    if key not in d:
        raise GitHubDecodeError(f"Missing field {key!r}")
    v = d[key]
    # bool is an int subclass; never accept it for numeric ids.
    if not isinstance(v, typ) or (typ is int and isinstance(v, bool)):
        raise GitHubDecodeError(f"Field {key!r} has type {type(v).__name__}, expected {typ.__name__}")
    return v


def parse_rfc3339(value: str) -> datetime:
    """Parse GitHub's RFC 3339 timestamps (e.g. 2026-01-24T10:30:00Z)."""
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError as e:
        raise GitHubDecodeError(f"Invalid RFC 3339 timestamp {value!r}") from e


@dataclass(frozen=True)
class Account:
    login: str

    @classmethod
    def from_json(cls, d: Dict[str, Any]) -> "Account":
        return cls(login=_require(d, "login", str))


@dataclass(frozen=True)
class Installation:
    id: int
    account: Account
    updated_at: datetime

    @classmethod
    def from_json(cls, d: Dict[str, Any]) -> "Installation":
        return cls(
            id=_require(d, "id", int),
            account=Account.from_json(_require(d, "account", dict)),
            updated_at=parse_rfc3339(_require(d, "updated_at", str)),
        )


@dataclass(frozen=True)
class Repository:
    full_name: str
    private: bool
    fork: bool

    @classmethod
    def from_json(cls, d: Dict[str, Any]) -> "Repository":
        return cls(
            full_name=_require(d, "full_name", str),
            private=_require(d, "private", bool),
            fork=_require(d, "fork", bool),
        )


@dataclass(frozen=True)
class Workflow:
    id: int
    name: str
    path: str

    @classmethod
    def from_json(cls, d: Dict[str, Any]) -> "Workflow":
        return cls(id=_require(d, "id", int), name=_require(d, "name", str), path=_require(d, "path", str))


@dataclass(frozen=True)
class WorkflowRun:
    id: int
    head_branch: str
    workflow_id: int
    check_suite_url: str

    @classmethod
    def from_json(cls, d: Dict[str, Any]) -> "WorkflowRun":
        return cls(
            id=_require(d, "id", int),
            head_branch=_require(d, "head_branch", str),
            workflow_id=_require(d, "workflow_id", int),
            check_suite_url=_require(d, "check_suite_url", str),
        )


@dataclass(frozen=True)
class Artifact:
    id: int
    name: str

    @classmethod
    def from_json(cls, d: Dict[str, Any]) -> "Artifact":
        return cls(id=_require(d, "id", int), name=_require(d, "name", str))
