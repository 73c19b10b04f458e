from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from .attendance.engine import AttendanceStateEngine
from .attendance.memory_attendance_repository import InMemoryAttendanceRepository
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core import constants
from .core.enums import MatchMetric
from .database.connection import DBConfig, DatabaseConnection
from .faces.matcher import IdentityMatcher
from .faces.memory_embedding_repository import InMemoryEmbeddingRepository
from .faces.mysql_embedding_repository import MySQLEmbeddingRepository
from .faces.quality import EnrollmentQualityScorer
from .faces.repository import EmbeddingRepository
from .faces.service import EnrollmentService
from .faces.store import EmbeddingStore
from .notifications.sink import LoggingSink, NotificationSink
from .policy.memory_policy_repository import InMemoryPolicySource
from .policy.mysql_policy_repository import MySQLPolicySource
from .policy.repository import PolicySource
from .policy.service import PolicyService
from .requests.memory_request_repository import InMemoryRequestRepository
from .requests.mysql_request_repository import MySQLRequestRepository
from .requests.repository import RequestRepository
from .requests.rules import ExceptionRuleEngine
from .requests.service import ExceptionRequestService
from .users.memory_user_repository import InMemoryUserRepository
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    embeddings_repo: EmbeddingRepository
    policies_repo: PolicySource
    attendance_repo: AttendanceRepository
    requests_repo: RequestRepository

    sink: NotificationSink
    store: EmbeddingStore
    matcher: IdentityMatcher
    scorer: EnrollmentQualityScorer

    policy_service: PolicyService
    engine: AttendanceStateEngine
    enrollment_service: EnrollmentService
    attendance_service: AttendanceService
    rule_engine: ExceptionRuleEngine
    exception_service: ExceptionRequestService

    def close(self) -> None:
        self.matcher.close()


def _setting(settings: Any, name: str, default: Any) -> Any:
    value = getattr(settings, name, None)
    return default if value is None else value


def build_container(settings: Any, *, sink: Optional[NotificationSink] = None) -> Container:
    """Wire repositories and services from a settings module (or any object with the same attributes)."""
    backend = str(_setting(settings, "STORAGE_BACKEND", "mysql")).lower()
    dimension = int(_setting(settings, "EMBEDDING_DIMENSION", constants.EMBEDDING_DIMENSION))

    conn: Optional[DatabaseConnection] = None
    if backend == "memory":
        users_repo = InMemoryUserRepository()
        embeddings_repo = InMemoryEmbeddingRepository()
        policies_repo = InMemoryPolicySource()
        attendance_repo = InMemoryAttendanceRepository(users_repo)
        requests_repo = InMemoryRequestRepository()
    elif backend == "mysql":
        conn = DatabaseConnection(DBConfig.from_dict(_setting(settings, "DB_CONFIG", {})))
        users_repo = MySQLUserRepository(conn)
        embeddings_repo = MySQLEmbeddingRepository(conn)
        policies_repo = MySQLPolicySource(conn)
        attendance_repo = MySQLAttendanceRepository(conn)
        requests_repo = MySQLRequestRepository(conn)
    else:
        raise ValueError(f"Unknown STORAGE_BACKEND: {backend!r}")

    sink = sink or LoggingSink()
    store = EmbeddingStore(embeddings_repo, dimension=dimension)
    matcher = IdentityMatcher(
        dimension=dimension,
        threshold=float(_setting(settings, "MATCH_THRESHOLD", constants.MATCH_THRESHOLD)),
        metric=MatchMetric(_setting(settings, "MATCH_METRIC", MatchMetric.COSINE.value)),
        timeout_seconds=float(_setting(settings, "MATCH_TIMEOUT_SECONDS", constants.MATCH_TIMEOUT_SECONDS)),
    )
    scorer = EnrollmentQualityScorer()

    policy_service = PolicyService(policies_repo, sink=sink)
    engine = AttendanceStateEngine(attendance_repo, users_repo, policy_service, sink=sink)
    enrollment_service = EnrollmentService(store, users_repo, scorer)
    attendance_service = AttendanceService(
        engine,
        matcher,
        store,
        users_repo,
        require_fair_confidence=bool(_setting(settings, "REQUIRE_FAIR_CONFIDENCE", False)),
    )
    rule_engine = ExceptionRuleEngine(
        mass_late_ratio=float(_setting(settings, "MASS_LATE_RATIO", constants.MASS_LATE_RATIO))
    )
    exception_service = ExceptionRequestService(
        requests_repo,
        engine,
        attendance_repo,
        users_repo,
        rule_engine,
        sink=sink,
        default_hourly_rate=Decimal(str(_setting(settings, "DEFAULT_HOURLY_RATE", constants.DEFAULT_HOURLY_RATE))),
    )

    return Container(
        conn=conn,
        users_repo=users_repo,
        embeddings_repo=embeddings_repo,
        policies_repo=policies_repo,
        attendance_repo=attendance_repo,
        requests_repo=requests_repo,
        sink=sink,
        store=store,
        matcher=matcher,
        scorer=scorer,
        policy_service=policy_service,
        engine=engine,
        enrollment_service=enrollment_service,
        attendance_service=attendance_service,
        rule_engine=rule_engine,
        exception_service=exception_service,
    )
