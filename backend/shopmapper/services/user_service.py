# Overview: Service-layer operations for user accounts; admin-only create and delete.

from __future__ import annotations

from typing import Any, Mapping

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Lorry, User
from ..permissions import ALL_ROLES, Role
from ..validation import ConflictError, NotFoundError, ValidationError, optional_int, require_choice, require_text
from . import authorization_service
from .auth_service import PasswordValidationError, hash_password
from .concurrency import run_with_retry
from .token_service import SessionPayload


def list_users() -> list[User]:
    return db.session.query(User).order_by(User.username.asc()).all()


def get_user(user_id: int) -> User | None:
    return db.session.get(User, user_id)


def create_user(acting: SessionPayload | None, form: Mapping[str, Any]) -> User:
    """
    Create a user account. ADMIN only.

    Fields: username, password, role (ADMIN|REP|VIEWER), lorryId (optional,
    REP only).

    Raises:
        PermissionDeniedError: caller is not ADMIN
        ValidationError: missing/malformed field, weak password, unknown lorry
        ConflictError: username already taken
    """
    authorization_service.require_operation(acting, "CREATE_USER")

    username = require_text(form, "username", max_length=64)
    password = form.get("password") or ""
    if not password:
        raise ValidationError("password is required")
    role = require_choice(require_text(form, "role"), ALL_ROLES, "role")
    lorry_id = optional_int(form, "lorryId")

    if lorry_id is not None and role != Role.REP:
        raise ValidationError("Only REP users can be assigned a lorry")

    try:
        password_hash = hash_password(password)
    except PasswordValidationError as exc:
        raise ValidationError(str(exc))

    def _op():
        if lorry_id is not None and db.session.get(Lorry, lorry_id) is None:
            raise ValidationError("Lorry not found")

        user = User(
            username=username,
            password_hash=password_hash,
            role=role,
            lorry_id=lorry_id,
        )
        db.session.add(user)
        db.session.commit()
        return user

    try:
        user = run_with_retry(_op)
    except IntegrityError:
        current_app.logger.warning("Failed to create user %r", username, exc_info=True)
        raise ConflictError("Failed to create user (Username might be taken)")

    current_app.logger.info("User %s created (id=%s, role=%s)", user.username, user.id, user.role)
    return user


def delete_user(acting: SessionPayload | None, user_id: int) -> None:
    """
    Delete a user account. ADMIN only, never the caller's own account.

    Raises:
        PermissionDeniedError: not ADMIN, or user_id is the caller
        NotFoundError: no such user
        ConflictError: the store refused the delete
    """
    authorization_service.require_user_delete(acting, user_id)

    def _op():
        user = db.session.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        db.session.delete(user)
        db.session.commit()

    try:
        run_with_retry(_op)
    except IntegrityError:
        current_app.logger.warning("Failed to delete user %s", user_id, exc_info=True)
        raise ConflictError("Failed to delete user")

    current_app.logger.info("User %s deleted", user_id)
