"""
User accounts: registration, login, profile view/update and admin listing.

Email and phone number are unique across users. Password hashes never leave
this module in API-facing shapes (`UserPublic`).
"""

from __future__ import annotations

import logging

from eventbook.config.settings import AuthSettings
from eventbook.core.errors import AuthenticationError, ConflictError, NotFoundError
from eventbook.core.security import Principal, hash_password, issue_token, verify_password
from eventbook.domain.models import RegisterRequest, User, UserPatch, UserPublic
from eventbook.storage.documents import DocumentStore

logger = logging.getLogger(__name__)

USERS = "users"


def _clashes_with(*, email: str | None, phone_number: str | None):
    """Predicate matching users that already hold `email` (any case) or `phone_number`."""
    email_key = email.lower() if email else None

    def clashes(doc: dict) -> bool:
        if email_key and str(doc.get("email", "")).lower() == email_key:
            return True
        return bool(phone_number) and doc.get("phone_number") == phone_number

    return clashes


def get_user(store: DocumentStore, user_id: str) -> User:
    doc = store.get(USERS, user_id)
    if doc is None:
        raise NotFoundError("User not found")
    return User.model_validate(doc)


def register_user(
    store: DocumentStore, payload: RegisterRequest, auth: AuthSettings, *, is_admin: bool = False
) -> UserPublic:
    """Create a user account.

    Raises:
        ConflictError: If the email or phone number is already registered.
    """
    doc = payload.model_dump(mode="json", exclude={"password"})
    doc["password_hash"] = hash_password(payload.password, rounds=auth.bcrypt_rounds)
    doc["is_admin"] = bool(is_admin)
    stored = store.insert_unless(USERS, doc, _clashes_with(email=payload.email, phone_number=payload.phone_number))
    if stored is None:
        raise ConflictError("User already exists with this email or phone number")
    logger.info("Registered user %s (admin=%s)", stored["id"], is_admin)
    return User.model_validate(stored).public()


def authenticate(store: DocumentStore, email: str, password: str, auth: AuthSettings) -> str:
    """Check credentials and return a signed access token.

    Raises:
        AuthenticationError: On unknown email or wrong password (same message for both).
    """
    email_key = email.strip().lower()
    doc = store.find_one(USERS, lambda d: str(d.get("email", "")).lower() == email_key)
    if doc is None or not verify_password(password, doc.get("password_hash", "")):
        logger.info("Invalid email or password")
        raise AuthenticationError("Invalid email or password")

    user = User.model_validate(doc)
    token = issue_token(Principal(user_id=user.id, is_admin=user.is_admin), auth)
    logger.info("User %s authenticated successfully", user.id)
    return token


def get_profile(store: DocumentStore, user_id: str) -> UserPublic:
    try:
        return get_user(store, user_id).public()
    except NotFoundError:
        raise NotFoundError("Profile not found") from None


def update_profile(store: DocumentStore, user_id: str, patch: UserPatch, auth: AuthSettings) -> UserPublic:
    """Apply a partial profile update.

    Raises:
        NotFoundError: If the user no longer exists.
        ConflictError: If the new email/phone belongs to another user.
    """
    user = get_user(store, user_id)
    changes = patch.changes()
    password = changes.pop("password", None)
    doc = {**user.model_dump(mode="json"), **changes}
    if password:
        doc["password_hash"] = hash_password(password, rounds=auth.bcrypt_rounds)

    conflict = _clashes_with(email=changes.get("email"), phone_number=changes.get("phone_number"))
    stored = store.replace_unless(USERS, user_id, doc, conflict)
    if stored is None:
        raise ConflictError("User already exists with this email or phone number")

    updated = User.model_validate(stored)
    logger.info("Updated profile %s (%s)", user_id, ", ".join(sorted(patch.changes())) or "no changes")
    return updated.public()


def list_users(store: DocumentStore) -> list[UserPublic]:
    return [User.model_validate(d).public() for d in store.find(USERS)]
