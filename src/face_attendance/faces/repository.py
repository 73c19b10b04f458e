from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Embedding


class EmbeddingRepository(Protocol):
    """Append-only storage of enrolled embeddings with explicit revocation."""

    def get_embeddings(self, user_id: int) -> Sequence[Embedding]:
        raise NotImplementedError

    def get_all_embeddings(self) -> Sequence[Embedding]:
        """Active (non-revoked) embeddings of every identity."""

        raise NotImplementedError

    def add(
        self,
        *,
        user_id: int,
        vector: tuple[float, ...],
        captured_at: datetime,
        label: Optional[str] = None,
    ) -> Embedding:
        raise NotImplementedError

    def revoke(self, embedding_id: int) -> bool:
        raise NotImplementedError
