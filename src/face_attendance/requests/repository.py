from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ApprovalStatus
from .model import AuditEntry, ExceptionDecision, ExceptionRequest, NewExceptionRequest


class RequestRepository(Protocol):
    # Exception requests
    def create_exception(
        self,
        *,
        request: NewExceptionRequest,
        decision: ExceptionDecision,
        created_at: datetime,
    ) -> ExceptionRequest:
        raise NotImplementedError

    def get_exception(self, *, request_id: int) -> Optional[ExceptionRequest]:
        raise NotImplementedError

    def list_exceptions(
        self,
        *,
        status: Optional[ApprovalStatus] = None,
        user_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[ExceptionRequest]:
        raise NotImplementedError

    def decide_exception(self, *, decided: ExceptionRequest) -> bool:
        """Store a decision only if the stored request is still pending."""

        raise NotImplementedError

    # Audit trail
    def add_audit(self, entry: AuditEntry) -> int:
        raise NotImplementedError

    def list_audit(self, *, target: Optional[str] = None, limit: int = 200) -> Sequence[AuditEntry]:
        raise NotImplementedError
