# backend/empdb/src_tests/test_api.py
import struct
import sys

import pytest
from fastapi.testclient import TestClient

from empdb import config
from empdb.app import app
from empdb.core.header import HEADER_MAGIC, HEADER_SIZE
from empdb.storage.database_file import DatabaseFile

client = TestClient(app)


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "api.db")


def test_health():
    assert client.get("/health").json() == {"status": "ok"}


def test_create_add_list(db_path):
    r = client.post("/api/databases", json={"path": db_path})
    assert r.status_code == 201
    assert r.json() == {"magic": HEADER_MAGIC, "version": 1, "count": 0, "filesize": HEADER_SIZE}

    r = client.post("/api/employees", json={"path": db_path, "text": "Ann,1 Oak Rd,40"})
    assert r.status_code == 201
    body = r.json()
    assert body["employee"] == {"name": "Ann", "address": "1 Oak Rd", "hours": 40}
    assert body["header"]["count"] == 1
    assert body["metrics"]["writes"] == 1

    r = client.get("/api/employees", params={"path": db_path})
    assert r.json() == [{"name": "Ann", "address": "1 Oak Rd", "hours": 40}]

    r = client.get("/api/databases/header", params={"path": db_path})
    assert r.json()["filesize"] == HEADER_SIZE + 100


def test_error_mapping(db_path):
    assert client.get("/api/employees", params={"path": db_path}).status_code == 404

    client.post("/api/databases", json={"path": db_path})
    r = client.post("/api/databases", json={"path": db_path})
    assert r.status_code == 409
    assert r.json()["error"] == "AlreadyExistsError"

    r = client.post("/api/employees", json={"path": db_path, "text": "onlytwo,fields"})
    assert r.status_code == 400
    assert r.json()["error"] == "MalformedInputError"


def test_corrupt_header_is_unprocessable(tmp_path):
    p = tmp_path / "bad.db"
    p.write_bytes(b"\x00" * HEADER_SIZE)
    r = client.get("/api/databases/header", params={"path": str(p)})
    assert r.status_code == 422
    assert r.json()["error"] == "BadMagicError"


def test_metrics_endpoint():
    assert set(client.get("/api/metrics").json()) >= {"reads", "writes", "read_bytes", "write_bytes"}


def test_reads_are_not_blocked_by_other_readers(db_path):
    client.post("/api/databases", json={"path": db_path})
    with DatabaseFile.open_existing(db_path, read_only=True):
        assert client.get("/api/employees", params={"path": db_path}).status_code == 200
        assert client.get("/api/databases/header", params={"path": db_path}).status_code == 200


@pytest.mark.skipif(sys.platform.startswith("win"), reason="flock semantics")
def test_read_while_writer_holds_file_is_locked(db_path, monkeypatch):
    monkeypatch.setattr(config, "LOCK_TIMEOUT", 0.0)
    client.post("/api/databases", json={"path": db_path})
    with DatabaseFile.open_existing(db_path):
        r = client.get("/api/employees", params={"path": db_path})
    assert r.status_code == 423
    assert r.json()["error"] == "DatabaseLockedError"


def test_unterminated_record_is_unprocessable(tmp_path):
    p = tmp_path / "bad.db"
    p.write_bytes(struct.pack(">IHHI", HEADER_MAGIC, 1, 1, HEADER_SIZE + 100)
                  + struct.pack(">32s64sI", b"A" * 32, b"x", 1))
    r = client.get("/api/employees", params={"path": str(p)})
    assert r.status_code == 422
    assert r.json()["error"] == "CorruptRecordError"
