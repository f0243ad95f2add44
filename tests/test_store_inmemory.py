import threading

import pytest

from remix.errors import ForkConflictError, ForkError
from remix.store.inmemory import InMemoryDocumentStore
from remix.store.models import Document

from tests.helpers.trees import leaf, mk_delete, mk_modify


def _doc(doc_id="d1", owner="alice"):
    return Document(id=doc_id, owner_id=owner, title="T", segments=[leaf("x", "one")])


def test_insert_get_returns_copies():
    s = InMemoryDocumentStore()
    s.insert(_doc())
    got = s.get("d1")
    got.segments[0].text = "mutated"
    assert s.get("d1").segments[0].text == "one"
    assert "d1" in s and len(s) == 1
    assert s.get("missing") is None


def test_duplicate_insert_rejected():
    s = InMemoryDocumentStore()
    s.insert(_doc())
    with pytest.raises(ForkError):
        s.insert(_doc())


def test_update_deltas_bumps_etag_and_checks_owner():
    s = InMemoryDocumentStore()
    assert s.insert(_doc()).version_etag == "1"
    assert s.update_deltas("d1", "alice", [mk_delete("x")]) == "2"
    assert s.update_deltas("d1", "alice", [], expected_etag="2") == "3"
    with pytest.raises(ForkConflictError):
        s.update_deltas("d1", "alice", [], expected_etag="2")
    with pytest.raises(ForkError):
        s.update_deltas("d1", "bob", [])
    with pytest.raises(ForkError):
        s.update_deltas("nope", "alice", [])


def test_increment_fork_count():
    s = InMemoryDocumentStore()
    s.insert(_doc())
    assert s.increment_fork_count("d1") == 1
    assert s.increment_fork_count("d1") == 2
    with pytest.raises(ForkError):
        s.increment_fork_count("nope")


def test_concurrent_writes_with_etag_lose_no_update():
    s = InMemoryDocumentStore()
    s.insert(_doc())
    wins = []
    conflicts = []

    def writer(i):
        etag = s.get("d1").version_etag
        try:
            s.update_deltas("d1", "alice", [mk_modify("x", text=str(i))], expected_etag=etag)
            wins.append(i)
        except ForkConflictError:
            conflicts.append(i)

    threads = [threading.Thread(target=writer, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(wins) + len(conflicts) == 8
    assert s.get("d1").version_etag == str(1 + len(wins))
