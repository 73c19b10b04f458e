from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..common.datetime_utils import now_local
from ..core.enums import ErrorCode
from ..notifications.model import PolicyFallbackUsed
from ..notifications.sink import NotificationSink
from .model import AttendancePolicy, default_policy
from .repository import PolicySource

logger = logging.getLogger(__name__)


class PolicyService:
    """Resolves the effective policy; never fails for a missing configuration."""

    def __init__(self, source: PolicySource, *, sink: Optional[NotificationSink] = None):
        self._source = source
        self._sink = sink

    def resolve(self, org_id: int, on_date: date) -> AttendancePolicy:
        policy = self._source.get_effective_policy(int(org_id), on_date)
        if policy is not None:
            return policy

        logger.warning(
            "%s: no attendance policy for org %s on %s, using built-in default",
            ErrorCode.POLICY_NOT_CONFIGURED.value,
            org_id,
            on_date,
        )
        if self._sink is not None:
            self._sink.publish(PolicyFallbackUsed(occurred_at=now_local(), org_id=int(org_id), on_date=on_date))
        return default_policy(org_id)
