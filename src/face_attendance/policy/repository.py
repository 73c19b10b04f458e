from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from .model import AttendancePolicy


class PolicySource(Protocol):
    """Versioned policies; the latest ``effective_from <= on_date`` applies."""

    def get_effective_policy(self, org_id: int, on_date: date) -> Optional[AttendancePolicy]:
        raise NotImplementedError

    def save(self, policy: AttendancePolicy) -> int:
        raise NotImplementedError
