from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Iterable, Optional

from ..common.validators import require_vector
from ..core.constants import EMBEDDING_DIMENSION
from .model import Embedding
from .repository import EmbeddingRepository

logger = logging.getLogger(__name__)


class EmbeddingStore:
    """Process-wide cache of active embeddings.

    Readers take the current snapshot (an immutable tuple) and keep it for the
    whole match. Writers persist first, then build a new tuple and swap it in,
    so an in-flight match never observes a partial enrolment.
    """

    def __init__(self, repository: EmbeddingRepository, *, dimension: int = EMBEDDING_DIMENSION):
        self._repository = repository
        self._dimension = int(dimension)
        self._write_lock = threading.Lock()
        self._snapshot: tuple[Embedding, ...] = ()
        self._loaded = False

    @property
    def dimension(self) -> int:
        return self._dimension

    def reload(self) -> int:
        with self._write_lock:
            self._load_locked()
            return len(self._snapshot)

    def _load_locked(self) -> None:
        rows = self._repository.get_all_embeddings()
        kept = []
        for emb in rows:
            if emb.dimension != self._dimension:
                logger.warning(
                    "Ignoring stored embedding %s of user %s: dimension %d, expected %d",
                    emb.embedding_id,
                    emb.user_id,
                    emb.dimension,
                    self._dimension,
                )
                continue
            kept.append(emb)
        self._snapshot = tuple(kept)
        self._loaded = True
        logger.info("Loaded %d face embeddings", len(self._snapshot))

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        with self._write_lock:
            if not self._loaded:
                self._load_locked()

    def snapshot(self) -> tuple[Embedding, ...]:
        self._ensure_loaded()
        return self._snapshot

    def for_user(self, user_id: int) -> tuple[Embedding, ...]:
        return tuple(e for e in self.snapshot() if e.user_id == user_id)

    def add(
        self,
        *,
        user_id: int,
        vector: Iterable[float],
        captured_at: datetime,
        label: Optional[str] = None,
    ) -> Embedding:
        values = require_vector(vector, self._dimension)
        self._ensure_loaded()
        with self._write_lock:
            emb = self._repository.add(user_id=user_id, vector=values, captured_at=captured_at, label=label)
            self._snapshot = self._snapshot + (emb,)
        logger.info("Enrolled embedding %s for user %s", emb.embedding_id, user_id)
        return emb

    def revoke(self, embedding_id: int) -> bool:
        self._ensure_loaded()
        with self._write_lock:
            if not self._repository.revoke(int(embedding_id)):
                return False
            self._snapshot = tuple(e for e in self._snapshot if e.embedding_id != int(embedding_id))
        logger.info("Revoked embedding %s", embedding_id)
        return True
