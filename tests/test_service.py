import sqlite3
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

import pytest

from todo_api.db import Database
from todo_api.errors import NotFoundError, PersistenceError
from todo_api.service import TodoService


def seed(service, count):
    return [service.create(f"Task {i}", f"Desc {i}")["id"] for i in range(count)]


class TestCreate:
    def test_create_returns_stored_todo(self, service):
        todo = service.create("buy milk", "")
        assert todo["id"] != 0
        assert todo["subject"] == "buy milk"
        assert todo["description"] == ""
        assert todo["created_at"] == todo["updated_at"]
        assert todo["created_at"].tzinfo is not None

    def test_ids_are_increasing(self, service):
        first = service.create("a", "")
        second = service.create("b", "")
        assert second["id"] > first["id"]

    def test_empty_subject_is_rejected_by_the_store(self, service):
        with pytest.raises(PersistenceError) as exc_info:
            service.create("", "x")
        assert isinstance(exc_info.value.__cause__, sqlite3.IntegrityError)
        assert service.read(0, 0) == []


class TestRead:
    def test_empty_table_returns_empty_list(self, service):
        assert service.read(0, 0) == []
        assert service.read(10, 5) == []

    def test_read_all_is_id_descending(self, service):
        ids = seed(service, 5)
        todos = service.read(0, 0)
        assert [t["id"] for t in todos] == sorted(ids, reverse=True)

    def test_prev_id_is_exclusive_upper_bound(self, service):
        ids = seed(service, 6)
        cursor = ids[3]
        todos = service.read(cursor, 0)
        assert todos
        assert all(t["id"] < cursor for t in todos)
        assert [t["id"] for t in todos] == sorted(ids[:3], reverse=True)

    def test_size_limits_page(self, service):
        seed(service, 5)
        assert len(service.read(0, 2)) == 2
        assert len(service.read(0, 10)) == 5

    def test_pages_walk_the_whole_table(self, service):
        ids = seed(service, 7)
        seen = []
        prev_id = 0
        while True:
            page = service.read(prev_id, 3)
            if not page:
                break
            assert len(page) <= 3
            seen.extend(t["id"] for t in page)
            prev_id = page[-1]["id"]
        assert seen == sorted(ids, reverse=True)

    def test_create_then_read_round_trip(self, service):
        seed(service, 3)
        created = service.create("round trip", "desc")
        todos = service.read(created["id"] + 1, 1)
        assert todos == [created]


class TestUpdate:
    def test_update_changes_fields_and_advances_updated_at(self, service):
        created = service.create("before", "old")
        updated = service.update(created["id"], "after", "new")
        assert updated["id"] == created["id"]
        assert updated["subject"] == "after"
        assert updated["description"] == "new"
        assert updated["created_at"] == created["created_at"]
        assert updated["updated_at"] > created["updated_at"]

    def test_back_to_back_updates_keep_advancing(self, service):
        created = service.create("tick", "")
        stamps = [created["updated_at"]]
        for i in range(5):
            stamps.append(service.update(created["id"], f"tick {i}", "")["updated_at"])
        assert stamps == sorted(set(stamps))

    def test_update_missing_id_raises_not_found(self, service):
        with pytest.raises(NotFoundError) as exc_info:
            service.update(999, "x", "")
        assert exc_info.value.ids == (999,)

    def test_not_found_is_not_a_persistence_error(self, service):
        with pytest.raises(NotFoundError) as exc_info:
            service.update(1, "x", "")
        assert not isinstance(exc_info.value, PersistenceError)


class TestDelete:
    def test_delete_removes_rows(self, service):
        ids = seed(service, 4)
        service.delete({ids[0], ids[2]})
        remaining = [t["id"] for t in service.read(0, 0)]
        assert remaining == [ids[3], ids[1]]

    def test_delete_succeeds_when_some_ids_exist(self, service):
        ids = seed(service, 2)
        service.delete([ids[0], 999])
        assert [t["id"] for t in service.read(0, 0)] == [ids[1]]

    def test_delete_missing_ids_raises_not_found(self, service):
        seed(service, 1)
        with pytest.raises(NotFoundError) as exc_info:
            service.delete([998, 999, 999])
        assert exc_info.value.ids == (998, 999)
        assert len(service.read(0, 0)) == 1

    def test_delete_empty_set_does_not_touch_store(self):
        db = MagicMock(spec=Database)
        TodoService(db).delete(set())
        db.connect.assert_not_called()

    def test_deleted_ids_are_not_reused(self, service):
        ids = seed(service, 2)
        service.delete([ids[1]])
        new = service.create("next", "")
        assert new["id"] > ids[1]


class TestStorageFailures:
    def test_sqlite_errors_become_persistence_errors(self, tmp_path):
        broken = TodoService(Database(str(tmp_path / "broken.db")))
        conn = sqlite3.connect(str(tmp_path / "broken.db"))
        conn.execute("DROP TABLE todos")
        conn.close()
        with pytest.raises(PersistenceError):
            broken.read(0, 0)
        with pytest.raises(PersistenceError):
            broken.update(1, "x", "")
        with pytest.raises(PersistenceError):
            broken.delete([1])

    def test_out_of_range_integers_become_persistence_errors(self, service):
        too_big = 2**64
        with pytest.raises(PersistenceError) as exc_info:
            service.read(too_big, 0)
        assert isinstance(exc_info.value.__cause__, OverflowError)
        with pytest.raises(PersistenceError):
            service.update(too_big, "x", "")
        with pytest.raises(PersistenceError):
            service.delete([too_big])


class TestConcurrency:
    def test_parallel_creates_are_independent(self, service):
        count = 32
        with ThreadPoolExecutor(max_workers=8) as pool:
            created = list(pool.map(lambda i: service.create(f"Task {i}", ""), range(count)))

        ids = [t["id"] for t in created]
        assert len(set(ids)) == count
        todos = service.read(0, 0)
        assert len(todos) == count
        assert [t["id"] for t in todos] == sorted(ids, reverse=True)

    def test_parallel_reads_and_updates(self, service):
        ids = seed(service, 8)

        def touch(todo_id):
            service.update(todo_id, f"updated {todo_id}", "")
            return service.read(0, 0)

        with ThreadPoolExecutor(max_workers=8) as pool:
            pages = list(pool.map(touch, ids))

        assert all(len(page) == 8 for page in pages)
        assert {t["subject"] for t in service.read(0, 0)} == {f"updated {i}" for i in ids}
