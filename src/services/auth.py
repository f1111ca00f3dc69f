"""
Credential checks against stored users.

Failures come back as an AuthenticationFailed value carrying one generic
message, so callers cannot tell an unknown username from a wrong password.
"""

from __future__ import annotations

import base64
from datetime import datetime
from typing import List, Optional, Union

import db.crud as crud
from db import models
from db.repository import Repository
from utils import config
from utils.errors import AuthenticationFailed, ValidationFailed
from utils.logger import get_logger
from utils.security import (
    HASH_LENGTH,
    generate_salt_string,
    hash_password_string,
    verify_password_string,
)
from utils.validation import check_password, check_user

_logger = get_logger(__name__)

AuthResult = Union[models.User, AuthenticationFailed]
PasswordChangeResult = Union[models.User, AuthenticationFailed, List[ValidationFailed]]

# checked against when the user is unknown, so both paths cost one hash
_DUMMY_SALT = generate_salt_string()
_DUMMY_HASH = base64.b64encode(bytes(HASH_LENGTH)).decode("ascii")


async def authenticate(
    username: str,
    password: str,
    repo: Repository = crud,
    when: Optional[datetime] = None,
) -> AuthResult:
    """Return the user with last_login stamped, or AuthenticationFailed."""
    user = await repo.find_user_by_username(username)
    if user is None or not user.active:
        verify_password_string(password, _DUMMY_HASH, _DUMMY_SALT)
        _logger.info(f"Login refused for '{username}'.")
        return AuthenticationFailed()

    if not verify_password_string(password, user.password_hash, user.salt):
        _logger.info(f"Login refused for '{username}'.")
        return AuthenticationFailed()

    when = when or datetime.now()
    await repo.update_last_login(user.id, when)
    user.update_last_login(when)
    _logger.info(f"User '{username}' logged in.")
    return user


async def change_password(
    user: models.User,
    current_password: str,
    new_password: str,
    repo: Repository = crud,
) -> PasswordChangeResult:
    """
    Swap the user's password after re-checking the current one.

    A new password breaking the password rules comes back as its field
    errors, and nothing is looked up or written. A fresh salt is generated
    for the new password. Hash and salt are written in one statement and
    only copied onto `user` once the store accepted them.
    """
    errors = check_password(new_password)
    if errors:
        return errors

    checked = await authenticate(user.username, current_password, repo)
    if isinstance(checked, AuthenticationFailed):
        return checked

    salt = generate_salt_string()
    password_hash = hash_password_string(new_password, salt)
    await repo.update_password(user.id, password_hash, salt)

    user.salt, user.password_hash = salt, password_hash
    _logger.info(f"Password changed for '{user.username}'.")
    return user


async def register_user(
    username: str,
    password: str,
    full_name: str,
    email: str,
    role: models.Role = models.Role.STAFF,
    repo: Repository = crud,
) -> Union[models.User, List[ValidationFailed]]:
    """Create an account; returns the field errors instead when input is bad."""
    user = models.User(username=username, full_name=full_name, email=email, role=role)
    errors = check_user(user) + check_password(password)
    if not errors and await repo.find_user_by_username(username) is not None:
        errors.append(ValidationFailed("username", "Username is already taken."))
    if errors:
        return errors

    user.salt = generate_salt_string()
    user.password_hash = hash_password_string(password, user.salt)
    await repo.save(user)
    _logger.info(f"Registered user '{username}' as {user.role}.")
    return user


async def ensure_default_admin(repo: Repository = crud) -> Optional[models.User]:
    """
    Create the built-in admin account when there are no users at all.
    Returns the new admin, or None if users already exist.
    """
    if await repo.count_users() > 0:
        return None

    salt = generate_salt_string()
    admin = models.User(
        username=config.DEFAULT_ADMIN_USERNAME,
        password_hash=hash_password_string(config.DEFAULT_ADMIN_PASSWORD, salt),
        salt=salt,
        full_name="System Administrator",
        email="admin@example.com",
        role=models.Role.ADMIN,
    )
    await repo.save(admin)
    _logger.info("Default admin user created.")
    return admin
