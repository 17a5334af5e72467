# Tests for auth/credentials.py
# Created: 2026-10-19

import stat
import time

import pytest

from playdeck.auth.credentials import (
    DEFAULT_IDENTITY,
    CredentialRecord,
    FileCredentialStore,
    MemoryCredentialStore,
)

# ---------------------------------------------------------------------------
# FileCredentialStore
# ---------------------------------------------------------------------------


@pytest.fixture
def store(tmp_path):
    return FileCredentialStore(tmp_path / "oauth")


class TestFileCredentialStore:
    def test_save_and_load(self, store):
        record = CredentialRecord(
            access_token="access123",
            refresh_token="refresh456",
            expires_at=time.time() + 3600,
            scopes=["user-top-read"],
        )
        store.save(record)

        loaded = store.load()
        assert loaded is not None
        assert loaded.access_token == "access123"
        assert loaded.refresh_token == "refresh456"
        assert loaded.identity == DEFAULT_IDENTITY
        assert loaded.scopes == ["user-top-read"]

    def test_load_nonexistent(self, store):
        assert store.load() is None
        assert store.load("nobody") is None

    def test_save_overwrites(self, store, tmp_path):
        store.save(CredentialRecord(access_token="old", refresh_token="r"))
        store.save(CredentialRecord(access_token="new", refresh_token="r"))
        assert store.load().access_token == "new"
        # No temp files left behind by the atomic replace
        assert [p.name for p in (tmp_path / "oauth").iterdir()] == [f"{DEFAULT_IDENTITY}.json"]

    def test_identities_are_separate(self, store):
        store.save(CredentialRecord(identity="a", access_token="ta"))
        store.save(CredentialRecord(identity="b", access_token="tb"))
        assert store.load("a").access_token == "ta"
        assert store.load("b").access_token == "tb"

    def test_clear(self, store):
        store.save(CredentialRecord(access_token="x", refresh_token="y"))
        assert store.clear() is True
        assert store.load() is None

    def test_clear_nonexistent(self, store):
        assert store.clear() is False

    def test_corrupt_json_loads_as_absent(self, store, tmp_path):
        (tmp_path / "oauth").mkdir()
        (tmp_path / "oauth" / f"{DEFAULT_IDENTITY}.json").write_text("{not json")
        assert store.load() is None

    def test_wrong_shape_loads_as_absent(self, store, tmp_path):
        (tmp_path / "oauth").mkdir()
        path = tmp_path / "oauth" / f"{DEFAULT_IDENTITY}.json"
        path.write_text("[1, 2, 3]")
        assert store.load() is None
        path.write_text('{"unexpected": true}')
        assert store.load() is None

    def test_file_permissions(self, store, tmp_path):
        store.save(CredentialRecord(access_token="secret", refresh_token="secret"))
        mode = (tmp_path / "oauth" / f"{DEFAULT_IDENTITY}.json").stat().st_mode
        # Owner read+write only
        assert mode & stat.S_IRUSR
        assert mode & stat.S_IWUSR
        assert not (mode & stat.S_IRGRP)
        assert not (mode & stat.S_IROTH)


# ---------------------------------------------------------------------------
# MemoryCredentialStore
# ---------------------------------------------------------------------------


class TestMemoryCredentialStore:
    def test_round_trip_and_clear(self):
        store = MemoryCredentialStore()
        assert store.load() is None
        store.save(CredentialRecord(access_token="a", refresh_token="r"))
        assert store.load().refresh_token == "r"
        assert store.clear() is True
        assert store.clear() is False
        assert store.load() is None

    def test_loaded_record_is_a_copy(self):
        store = MemoryCredentialStore()
        store.save(CredentialRecord(access_token="a", refresh_token="r", scopes=["x"]))
        loaded = store.load()
        loaded.access_token = "mutated"
        loaded.scopes.append("y")
        fresh = store.load()
        assert fresh.access_token == "a"
        assert fresh.scopes == ["x"]


class TestCredentialRecord:
    def test_defaults(self):
        record = CredentialRecord(access_token="a")
        assert record.refresh_token is None
        assert record.token_type == "Bearer"
        assert record.identity == DEFAULT_IDENTITY
        assert record.scopes == []

    def test_is_fresh_respects_margin(self):
        record = CredentialRecord(access_token="a", expires_at=1000.0)
        assert record.is_fresh(5, now=900.0) is True
        assert record.is_fresh(5, now=995.0) is False
        assert record.is_fresh(5, now=1001.0) is False

    def test_empty_access_token_is_never_fresh(self):
        record = CredentialRecord(access_token="", expires_at=time.time() + 3600)
        assert record.is_fresh(5) is False
