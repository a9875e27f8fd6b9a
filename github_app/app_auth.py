# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""GitHub App credentials: app JWTs and installation access tokens.

Two tiers, each cached below its server-side lifetime to absorb clock skew:

  app JWT (RS256, signed locally)       valid 10m at GitHub, cached 9m   keyed by app_id
  installation token (POST exchange)    valid 60m at GitHub, cached 55m  keyed by installation_id

A forced refresh (`forced=True`) always mints and overwrites the cache entry. The caller
decides when to force, typically after a 401 from a call made with a cached token. The
replaced token stays valid at GitHub until it expires; it is just no longer handed out.

Nothing here retries. A failed mint is not cached and the error reaches the caller.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Dict, Optional, Union

from jose import jwt
from jose.exceptions import JOSEError

from common import (
    APP_TOKEN_LIFETIME_S,
    APP_TOKEN_TTL_S,
    DEFAULT_INSTALLATION_PERMISSIONS,
    INSTALLATION_TOKEN_TTL_S,
)
from memory_cache import CleanedMemoryCache, MemoryCache

from .exceptions import GitHubDecodeError, SigningError
from .github_types import Installation
from .tokens import AppToken, InstallationToken

if TYPE_CHECKING:  # pragma: no cover
    from . import GitHubAPIClient

JWT_ALGORITHM = "RS256"


class GitHubAppAuth:
    """Mints and caches the credentials of one GitHub App.

    Args:
        api: Transport used for the token exchange.
        app_id: Numeric GitHub App id (the JWT `iss` claim).
        private_key: PEM text of the app private key.
        private_key_path: PEM file, read at mint time when private_key is not given.
        permissions: Scope requested for installation tokens (default: actions=read).
        jwt_cache: Cache for app JWTs. One key per app, so no sweep is needed.
        token_cache: Cache for installation tokens. One key per installation, so it is swept.
        now: Wall-clock seconds source for the JWT claims.
    """

    def __init__(
        self,
        api: "GitHubAPIClient",
        app_id: int,
        *,
        private_key: Optional[str] = None,
        private_key_path: Optional[Union[str, Path]] = None,
        permissions: Optional[Dict[str, str]] = None,
        jwt_cache: Optional[MemoryCache[int, AppToken]] = None,
        token_cache: Optional[MemoryCache[int, InstallationToken]] = None,
        now: Callable[[], float] = time.time,
    ):
        if private_key is None and private_key_path is None:
            raise ValueError("GitHubAppAuth needs private_key or private_key_path")
        self.api = api
        self.app_id = int(app_id)
        self._private_key = private_key
        self._private_key_path = Path(private_key_path).expanduser() if private_key_path is not None else None
        self.permissions: Dict[str, str] = dict(permissions if permissions is not None else DEFAULT_INSTALLATION_PERMISSIONS)
        self.jwt_cache: MemoryCache[int, AppToken] = jwt_cache if jwt_cache is not None else MemoryCache()
        self.token_cache: MemoryCache[int, InstallationToken] = (
            token_cache if token_cache is not None else CleanedMemoryCache(name="installation_tokens")
        )
        self._now = now
        self.logger = logging.getLogger(self.__class__.__name__)

    def close(self) -> None:
        """Stop the sweep threads of the credential caches."""
        for cache in (self.jwt_cache, self.token_cache):
            if isinstance(cache, CleanedMemoryCache):
                cache.close()

    def __enter__(self) -> "GitHubAppAuth":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    # ------------------------------------------------------------------
    # App JWT
    # ------------------------------------------------------------------

    def _read_private_key(self) -> str:
        if self._private_key is not None:
            return self._private_key
        if self._private_key_path is None:
            raise SigningError(f"No private key configured for GitHub App {self.app_id}")
        try:
            return self._private_key_path.read_text()
        except OSError as e:
            raise SigningError(f"Cannot read GitHub App private key {self._private_key_path}: {e}") from e

    def _new_jwt(self) -> AppToken:
        now = int(self._now())
        claims = {
            "iat": now,                         # issued at time
            "exp": now + APP_TOKEN_LIFETIME_S,  # JWT expiration time (10 minute maximum)
            "iss": self.app_id,                 # GitHub App's identifier
        }
        key = self._read_private_key()
        try:
            encoded = jwt.encode(claims, key, algorithm=JWT_ALGORITHM)
        except (JOSEError, ValueError, TypeError) as e:
            raise SigningError(f"Cannot sign GitHub App JWT for app {self.app_id}: {e}") from e
        self.logger.debug("Minted app JWT for app %d", self.app_id)
        return AppToken(encoded)

    def jwt(self, *, forced: bool = False) -> AppToken:
        """Return a JWT authenticating as the app (cached 9 minutes)."""
        if forced:
            return self.jwt_cache.write(self.app_id, self._new_jwt(), APP_TOKEN_TTL_S)
        return self.jwt_cache.fetch(self.app_id, APP_TOKEN_TTL_S, self._new_jwt)

    # ------------------------------------------------------------------
    # Installation tokens
    # ------------------------------------------------------------------

    def _new_token(self, installation_id: int) -> InstallationToken:
        # https://docs.github.com/rest/apps/apps#create-an-installation-access-token-for-an-app
        endpoint = f"app/installations/{int(installation_id)}/access_tokens"
        resp = self.api.post(
            endpoint,
            json_body={"permissions": dict(self.permissions)},
            headers=self.jwt().headers(),
            label="app/installations/*/access_tokens",
        )
        try:
            body = resp.json()
        except ValueError as e:
            raise GitHubDecodeError(f"Invalid JSON from {endpoint}: {e}") from e
        tok = body.get("token") if isinstance(body, dict) else None
        if not isinstance(tok, str) or not tok:
            raise GitHubDecodeError(f"No token in response from {endpoint}")
        expires_at = body.get("expires_at")
        self.logger.debug("Minted installation token for installation %d (expires_at=%s)", int(installation_id), expires_at)
        return InstallationToken(tok, expires_at=str(expires_at) if expires_at else None)

    def token(self, installation_id: int, *, forced: bool = False) -> InstallationToken:
        """Return an access token for one installation (cached 55 minutes).

        Args:
            forced: Mint a new token even if a cached one is live, replacing it.
        """
        iid = int(installation_id)
        if forced:
            self.logger.info("Forcing a new installation token for installation %d", iid)
            return self.token_cache.write(iid, self._new_token(iid), INSTALLATION_TOKEN_TTL_S)
        return self.token_cache.fetch(iid, INSTALLATION_TOKEN_TTL_S, lambda: self._new_token(iid))

    def installation_for_id(self, installation_id: int) -> Installation:
        """GET one installation of this app."""
        # https://docs.github.com/rest/apps/apps#get-an-installation-for-the-authenticated-app
        body = self.api.get_json(
            f"app/installations/{int(installation_id)}",
            headers=self.jwt().headers(),
            label="app/installations/*",
        )
        return Installation.from_json(body)
