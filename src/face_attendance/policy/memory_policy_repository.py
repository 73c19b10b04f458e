from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date
from typing import Iterable, Optional

from .model import AttendancePolicy
from .repository import PolicySource


class InMemoryPolicySource(PolicySource):
    def __init__(self, policies: Iterable[AttendancePolicy] = ()):
        self._lock = threading.Lock()
        self._policies: list[AttendancePolicy] = []
        self._next_id = 1
        for p in policies:
            self.save(p)

    def get_effective_policy(self, org_id: int, on_date: date) -> Optional[AttendancePolicy]:
        with self._lock:
            candidates = [p for p in self._policies if p.org_id == org_id and p.effective_from <= on_date]
        if not candidates:
            return None
        return max(candidates, key=lambda p: (p.effective_from, p.policy_id or 0))

    def save(self, policy: AttendancePolicy) -> int:
        with self._lock:
            stored = replace(policy, policy_id=self._next_id, is_default=False)
            self._policies.append(stored)
            self._next_id += 1
            return stored.policy_id
