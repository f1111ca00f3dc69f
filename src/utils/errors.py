"""
Error kinds shared across the app.

Validation and authentication problems are expected outcomes: they are
returned to the caller as plain values. Everything that goes wrong in the
store, or a missing hash primitive, is raised.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ValidationFailed:
    field: str
    message: str


@dataclass(frozen=True)
class AuthenticationFailed:
    # one message for unknown user, inactive user and wrong password
    message: str = "Invalid username or password."


class BizMgrError(Exception):
    pass


class HashingUnavailable(BizMgrError):
    """The password hash primitive is missing from this interpreter."""


class PersistenceError(BizMgrError):
    pass


class NotFound(PersistenceError):
    def __init__(self, kind: str, key) -> None:
        super().__init__(f"{kind} {key!r} not found")
        self.kind = kind
        self.key = key


class ReferentialConflict(PersistenceError):
    """Delete blocked because other records still point at the row."""

    def __init__(self, kind: str, key) -> None:
        super().__init__(f"{kind} {key!r} is still referenced by other records")
        self.kind = kind
        self.key = key


class DuplicateRecord(PersistenceError):
    pass


class ConcurrentModification(PersistenceError):
    """Saved aggregate was changed by someone else since it was loaded."""

    def __init__(self, kind: str, key, version: int) -> None:
        super().__init__(f"{kind} {key!r} changed since version {version}")
        self.kind = kind
        self.key = key
        self.version = version
