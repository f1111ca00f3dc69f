from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from db import models
from utils.security import generate_token


@dataclass
class Session:
    """
    Login state of one running app, owned by the app and read by screens.

    Fields:
      - user: the authenticated user, None when logged out
      - token: random id of this login, regenerated on every login
      - started_at: when the user logged in
    """

    user: Optional[models.User] = None
    token: Optional[str] = None
    started_at: Optional[datetime] = None

    def login(self, user: models.User, when: Optional[datetime] = None) -> str:
        self.user = user
        self.token = generate_token()
        self.started_at = when or datetime.now()
        return self.token

    def logout(self) -> None:
        self.user = None
        self.token = None
        self.started_at = None

    @property
    def is_logged_in(self) -> bool:
        return self.user is not None

    def is_admin(self) -> bool:
        return self.is_logged_in and self.user.is_admin()

    def is_manager(self) -> bool:
        return self.is_logged_in and self.user.is_manager()
