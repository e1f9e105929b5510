"""
User API routes.

Endpoints:
- POST  `/api/users/register`: create an account.
- POST  `/api/users/login`: exchange credentials for a bearer token.
- GET   `/api/users/me`, PATCH `/api/users/me`: own profile.
- GET   `/api/users` (admin), GET `/api/users/{user_id}` (admin).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from eventbook.api.deps import get_app_settings, get_principal, get_store, require_admin
from eventbook.config.settings import Settings
from eventbook.core.security import Principal
from eventbook.domain.models import LoginRequest, RegisterRequest, UserPatch
from eventbook.services import users as user_service
from eventbook.storage.documents import DocumentStore

router = APIRouter()


@router.post("/api/users/register", status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    store: DocumentStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
) -> dict:
    user = user_service.register_user(store, payload, settings.auth)
    return {"message": "User registered successfully", "user": user.model_dump(mode="json")}


@router.post("/api/users/login")
def login(
    payload: LoginRequest,
    store: DocumentStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
) -> dict:
    token = user_service.authenticate(store, payload.email, payload.password, settings.auth)
    return {"token": token, "token_type": "bearer"}


@router.get("/api/users/me")
def view_profile(
    store: DocumentStore = Depends(get_store),
    principal: Principal = Depends(get_principal),
) -> dict:
    return {"user": user_service.get_profile(store, principal.user_id).model_dump(mode="json")}


@router.patch("/api/users/me")
def edit_profile(
    patch: UserPatch,
    store: DocumentStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
    principal: Principal = Depends(get_principal),
) -> dict:
    user = user_service.update_profile(store, principal.user_id, patch, settings.auth)
    return {"message": "Profile updated successfully", "user": user.model_dump(mode="json")}


@router.get("/api/users")
def get_all_users(
    store: DocumentStore = Depends(get_store),
    _: Principal = Depends(require_admin),
) -> dict:
    users = user_service.list_users(store)
    return {"count": len(users), "users": [u.model_dump(mode="json") for u in users]}


@router.get("/api/users/{user_id}")
def view_profile_by_id(
    user_id: str,
    store: DocumentStore = Depends(get_store),
    _: Principal = Depends(require_admin),
) -> dict:
    return {"user": user_service.get_profile(store, user_id).model_dump(mode="json")}
