# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Credential variants accepted by the GitHub REST API.

Each variant knows how to render itself as an `Authorization` header value. They are
frozen (hashable), so a token can be part of a list-cache key: two different tokens
never share cached results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Token:
    token: str

    def authorization(self) -> str:
        return f"token {self.token}"

    def headers(self) -> dict:
        return {"Authorization": self.authorization()}

    def __repr__(self) -> str:
        # Never print the secret (tokens end up in log lines and cache-key reprs).
        tail = self.token[-4:] if len(self.token) > 8 else ""
        return f"{self.__class__.__name__}(***{tail})"

    __str__ = __repr__


@dataclass(frozen=True, repr=False)
class AppToken(Token):
    """JWT signed with the app's private key; authenticates as the app itself."""

    def authorization(self) -> str:
        return f"Bearer {self.token}"


@dataclass(frozen=True, repr=False)
class InstallationToken(Token):
    """Access token exchanged for an AppToken, scoped to one installation."""

    # Server-reported expiry (RFC 3339); informational, the cache TTL is what matters.
    expires_at: Optional[str] = field(default=None, compare=False)

    def authorization(self) -> str:
        return f"Bearer {self.token}"


@dataclass(frozen=True, repr=False)
class UserToken(Token):
    """User-to-server token obtained through the app's OAuth flow."""

    def authorization(self) -> str:
        return f"Bearer {self.token}"


@dataclass(frozen=True, repr=False)
class OAuthToken(Token):
    """Classic OAuth / personal access token."""
