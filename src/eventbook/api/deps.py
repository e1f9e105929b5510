"""
FastAPI dependencies.

`create_app` stores the settings and document store on `app.state`; routes pull
them (and the authenticated caller) through these dependencies instead of
module-level globals.
"""

from __future__ import annotations

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from eventbook.config.settings import Settings
from eventbook.core.errors import AuthenticationError, PermissionDeniedError
from eventbook.core.security import Principal, decode_token
from eventbook.storage.documents import DocumentStore

_bearer = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    settings: Settings = Depends(get_app_settings),
) -> Principal:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authentication failed")
    return decode_token(credentials.credentials, settings.auth)


def require_admin(principal: Principal = Depends(get_principal)) -> Principal:
    if not principal.is_admin:
        raise PermissionDeniedError("Not authorized")
    return principal
