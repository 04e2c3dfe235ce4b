# This file provides the authentication capability check that runs ahead of every resource route.
# Identity is opaque to handlers: routers only declare `Depends(require_auth)` at router level.
# The default authenticator accepts bearer tokens listed in API_AUTH_TOKENS.

from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass
from typing import Annotated, Protocol

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from cost_control.api.api_config import ApiConfig
from cost_control.api.dependencies import get_config
from cost_control.api.error_handlers import AuthenticationRequired

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    subject: str


class Authenticator(Protocol):
    def authenticate(self, token: str) -> Principal | None: ...


class StaticTokenAuthenticator:
    """Accept a fixed set of bearer tokens."""

    def __init__(self, tokens: list[str]) -> None:
        self._tokens = [token for token in tokens if token]

    def authenticate(self, token: str) -> Principal | None:
        for index, candidate in enumerate(self._tokens):
            if hmac.compare_digest(candidate.encode("utf-8"), token.encode("utf-8")):
                return Principal(subject=f"token-{index}")
        return None


def get_authenticator(config: Annotated[ApiConfig, Depends(get_config)]) -> Authenticator:
    return StaticTokenAuthenticator(config.auth_tokens)


def require_auth(
    request: Request,
    authenticator: Annotated[Authenticator, Depends(get_authenticator)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> Principal:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationRequired()

    principal = authenticator.authenticate(credentials.credentials)
    if principal is None:
        logger.info("Rejected bearer token on %s %s", request.method, request.url.path)
        raise AuthenticationRequired("Invalid or expired token.")

    request.state.principal = principal
    return principal
