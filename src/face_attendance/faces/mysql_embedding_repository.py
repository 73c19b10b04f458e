from __future__ import annotations

import json
from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Embedding
from .repository import EmbeddingRepository

_COLUMNS = "embedding_id, user_id, vector_json, captured_at, label"


def _row_to_embedding(r: dict) -> Embedding:
    return Embedding(
        embedding_id=int(r["embedding_id"]),
        user_id=int(r["user_id"]),
        vector=tuple(float(v) for v in json.loads(r["vector_json"])),
        captured_at=r["captured_at"],
        label=r.get("label"),
    )


class MySQLEmbeddingRepository(EmbeddingRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_embeddings(self, user_id: int) -> Sequence[Embedding]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM face_embeddings
                WHERE user_id=%s AND revoked_at IS NULL
                ORDER BY embedding_id
                """,
                (int(user_id),),
            )
            return [_row_to_embedding(r) for r in fetchall(cur)]

    def get_all_embeddings(self) -> Sequence[Embedding]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM face_embeddings
                WHERE revoked_at IS NULL
                ORDER BY embedding_id
                """
            )
            return [_row_to_embedding(r) for r in fetchall(cur)]

    def add(
        self,
        *,
        user_id: int,
        vector: tuple[float, ...],
        captured_at: datetime,
        label: Optional[str] = None,
    ) -> Embedding:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO face_embeddings(user_id, vector_json, dimension, captured_at, label)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(user_id), json.dumps(list(vector)), len(vector), captured_at, label),
            )
            return Embedding(
                embedding_id=int(cur.lastrowid),
                user_id=int(user_id),
                vector=tuple(vector),
                captured_at=captured_at,
                label=label,
            )

    def revoke(self, embedding_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE face_embeddings SET revoked_at=NOW() WHERE embedding_id=%s AND revoked_at IS NULL",
                (int(embedding_id),),
            )
            return cur.rowcount > 0
