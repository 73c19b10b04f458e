from datetime import datetime

import pytest

from face_attendance.core.exceptions import DimensionMismatchError, ValidationError
from face_attendance.faces.memory_embedding_repository import InMemoryEmbeddingRepository
from face_attendance.faces.store import EmbeddingStore

AT = datetime(2024, 1, 1, 9, 0)


def test_add_and_snapshot():
    store = EmbeddingStore(InMemoryEmbeddingRepository(), dimension=4)

    emb = store.add(user_id=1, vector=[1, 2, 3, 4], captured_at=AT, label="front")

    assert emb.vector == (1.0, 2.0, 3.0, 4.0)
    assert store.snapshot() == (emb,)
    assert store.for_user(1) == (emb,)
    assert store.for_user(2) == ()


def test_snapshot_taken_before_write_is_unchanged():
    store = EmbeddingStore(InMemoryEmbeddingRepository(), dimension=4)
    store.add(user_id=1, vector=[1, 0, 0, 0], captured_at=AT)

    before = store.snapshot()
    store.add(user_id=2, vector=[0, 1, 0, 0], captured_at=AT)

    assert len(before) == 1
    assert len(store.snapshot()) == 2


def test_rejects_wrong_dimension():
    store = EmbeddingStore(InMemoryEmbeddingRepository(), dimension=4)

    with pytest.raises(DimensionMismatchError):
        store.add(user_id=1, vector=[1, 0, 0], captured_at=AT)
    assert store.snapshot() == ()


def test_rejects_non_numeric_vector():
    store = EmbeddingStore(InMemoryEmbeddingRepository(), dimension=2)

    with pytest.raises(ValidationError):
        store.add(user_id=1, vector=["a", "b"], captured_at=AT)


def test_revoke_removes_from_snapshot():
    store = EmbeddingStore(InMemoryEmbeddingRepository(), dimension=4)
    emb = store.add(user_id=1, vector=[1, 0, 0, 0], captured_at=AT)

    assert store.revoke(emb.embedding_id)
    assert store.snapshot() == ()
    assert not store.revoke(emb.embedding_id)


def test_reload_ignores_stored_rows_of_another_dimension():
    repo = InMemoryEmbeddingRepository()
    repo.add(user_id=1, vector=(1.0, 0.0), captured_at=AT)
    repo.add(user_id=2, vector=(1.0, 0.0, 0.0, 0.0), captured_at=AT)

    store = EmbeddingStore(repo, dimension=4)

    assert store.reload() == 1
    assert [e.user_id for e in store.snapshot()] == [2]
