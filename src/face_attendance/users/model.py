from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: an employee who can be enrolled and clocked.

    Plain data object; no database access lives here.
    """

    user_id: int
    full_name: str
    org_id: int
    role: Role
    is_active: bool = True
    hourly_rate: Optional[Decimal] = None

    @property
    def can_decide_exceptions(self) -> bool:
        return self.role in {Role.ADMIN, Role.HR}
