from __future__ import annotations

import threading
from datetime import datetime
from typing import Optional, Sequence

from .model import Embedding
from .repository import EmbeddingRepository


class InMemoryEmbeddingRepository(EmbeddingRepository):
    def __init__(self):
        self._lock = threading.Lock()
        self._rows: dict[int, Embedding] = {}
        self._revoked: set[int] = set()
        self._next_id = 1

    def get_embeddings(self, user_id: int) -> Sequence[Embedding]:
        with self._lock:
            return [e for e in self._rows.values() if e.user_id == user_id and e.embedding_id not in self._revoked]

    def get_all_embeddings(self) -> Sequence[Embedding]:
        with self._lock:
            return [e for e in self._rows.values() if e.embedding_id not in self._revoked]

    def add(
        self,
        *,
        user_id: int,
        vector: tuple[float, ...],
        captured_at: datetime,
        label: Optional[str] = None,
    ) -> Embedding:
        with self._lock:
            emb = Embedding(
                embedding_id=self._next_id,
                user_id=int(user_id),
                vector=tuple(vector),
                captured_at=captured_at,
                label=label,
            )
            self._rows[emb.embedding_id] = emb
            self._next_id += 1
            return emb

    def revoke(self, embedding_id: int) -> bool:
        with self._lock:
            if embedding_id not in self._rows or embedding_id in self._revoked:
                return False
            self._revoked.add(embedding_id)
            return True
