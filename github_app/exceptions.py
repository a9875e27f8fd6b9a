# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""GitHub API error types.

These are intentionally lightweight so cached API modules and callers can catch
specific error classes (e.g. 401 to force a token refresh) without import cycles.
"""

from __future__ import annotations


class GitHubAPIError(Exception):
    """Non-2xx response or transport failure. `status_code` is 0 when no response arrived."""

    def __init__(self, *, status_code: int, endpoint: str, message: str):
        super().__init__(message)
        self.status_code = int(status_code)
        self.endpoint = str(endpoint or "")


class GitHubAuthError(GitHubAPIError):
    pass


class GitHubForbiddenError(GitHubAPIError):
    pass


class GitHubNotFoundError(GitHubAPIError):
    pass


class GitHubRequestError(GitHubAPIError):
    pass


class GitHubDecodeError(ValueError):
    """A response body did not have the expected JSON shape."""


class SigningError(Exception):
    """The app private key could not be read or the JWT could not be signed."""
