"""
Store persistence: the pickle file survives a reload, and transactions are
all-or-nothing.
"""
import pytest

from autounite.models.store import Store
from autounite.utils.constants import Role
from conftest import put_user


def test_reload_from_disk(store):
    u = put_user(store, Role.RENTER)
    again = Store(store.path)
    assert again.get_user(u.id).email == u.email


def test_transaction_rolls_back(store):
    u = put_user(store, Role.RENTER)
    with pytest.raises(RuntimeError):
        with store.transaction():
            put_user(store, Role.OWNER)
            store.get_user(u.id).report_count = 9
            raise RuntimeError("abort")

    assert len(store.users) == 1
    assert store.get_user(u.id).report_count == 0
    assert len(Store(store.path).users) == 1


def test_transaction_writes_once_on_commit(store, monkeypatch):
    calls = []
    real_dump = store._dump
    monkeypatch.setattr(store, "_dump", lambda: (calls.append(1), real_dump()))

    with store.transaction():
        put_user(store, Role.RENTER)
        with store.transaction():
            put_user(store, Role.OWNER)

    assert calls == [1]
    assert len(Store(store.path).users) == 2


def test_unreadable_file_starts_empty(tmp_path):
    path = tmp_path / "data.pkl"
    path.write_bytes(b"not a pickle")
    assert Store(path).users == {}


def test_clear(store):
    put_user(store, Role.RENTER)
    store.clear()
    assert store.users == {}
    assert Store(store.path).users == {}
