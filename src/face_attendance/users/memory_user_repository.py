from __future__ import annotations

import threading
from dataclasses import replace
from typing import Iterable, Optional, Sequence

from .model import User
from .repository import UserRepository


class InMemoryUserRepository(UserRepository):
    def __init__(self, users: Iterable[User] = ()):
        self._lock = threading.Lock()
        self._users: dict[int, User] = {u.user_id: u for u in users}

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._users.get(int(user_id))

    def list_by_org(self, org_id: int) -> Sequence[User]:
        return [u for u in self._users.values() if u.org_id == org_id]

    def save(self, user: User) -> None:
        with self._lock:
            self._users[user.user_id] = user

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        with self._lock:
            user = self._users.get(int(user_id))
            if not user:
                return False
            self._users[user.user_id] = replace(user, is_active=is_active)
            return True
