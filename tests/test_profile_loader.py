"""test suite for ProfileLoader."""
import pytest
import asyncio
import sys
from pathlib import Path
from unittest.mock import AsyncMock

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from profilesync.profiles.loader import ProfileLoader, to_records
from profilesync.profiles.models import ProfileListState, ProfileRecord
from profilesync.domain.errors import LoadFailure, StoreError
from profilesync.observability import RecordingErrorSink


def doc(doc_id: str, owner: str = "u1", name: str = "Ana", surname: str = "Lee") -> dict:
    return {"id": doc_id, "name": name, "surname": surname, "userId": owner}


class TestProfileLoader:
    @pytest.fixture
    def store(self):
        store = AsyncMock()
        store.query = AsyncMock(return_value=[doc("p1"), doc("p2", name="Bo")])
        return store

    @pytest.fixture
    def sink(self):
        return RecordingErrorSink()

    @pytest.fixture
    def state(self):
        return ProfileListState()

    @pytest.fixture
    def loader(self, store, state, sink):
        return ProfileLoader(store, state, sink)

    def test_absent_identity_is_noop(self, loader, store, state):
        state.replace([ProfileRecord(id="old", owner_id="u1")])

        assert asyncio.run(loader.load(None)) is False
        assert asyncio.run(loader.load("")) is False

        store.query.assert_not_called()
        assert [r.id for r in state.records] == ["old"]

    def test_load_queries_by_owner(self, loader, store):
        asyncio.run(loader.load("u1"))
        store.query.assert_called_once_with("profiles", "userId", "u1")

    def test_load_replaces_list(self, loader, state):
        state.replace([ProfileRecord(id="old", owner_id="u1")])

        assert asyncio.run(loader.load("u1")) is True

        assert [r.id for r in state.records] == ["p1", "p2"]
        assert state.records[1].name == "Bo"
        assert all(r.owner_id == "u1" for r in state.records)

    def test_empty_result_clears_list(self, loader, store, state):
        state.replace([ProfileRecord(id="old", owner_id="u1")])
        store.query = AsyncMock(return_value=[])

        asyncio.run(loader.load("u1"))

        assert state.records == ()

    def test_failure_keeps_list_and_reports(self, loader, store, state, sink):
        state.replace([ProfileRecord(id="old", owner_id="u1")])
        store.query = AsyncMock(side_effect=StoreError("unavailable", status_code=503))

        assert asyncio.run(loader.load("u1")) is False

        assert [r.id for r in state.records] == ["old"]
        assert len(sink.reports) == 1
        assert isinstance(sink.reports[0], LoadFailure)
        assert isinstance(sink.reports[0].cause, StoreError)

    def test_failure_does_not_raise_for_unexpected_errors(self, loader, store, sink):
        store.query = AsyncMock(side_effect=RuntimeError("boom"))
        assert asyncio.run(loader.load("u1")) is False
        assert sink.kinds == ["load_failure"]

    def test_stale_response_discarded(self, store, state, sink):
        loader = ProfileLoader(store, state, sink)

        async def scenario():
            slow_gate = asyncio.Event()

            async def query(collection, field, value):
                if value == "u1":
                    await slow_gate.wait()
                    return [doc("p1", owner="u1")]
                return [doc("p9", owner="u2")]

            store.query = AsyncMock(side_effect=query)

            first = asyncio.create_task(loader.load("u1"))
            await asyncio.sleep(0)
            second = await loader.load("u2")
            slow_gate.set()
            return second, await first

        second, first = asyncio.run(scenario())

        assert second is True
        assert first is False
        assert [r.id for r in state.records] == ["p9"]
        assert loader.generation == 2

    def test_closed_state_not_written(self, loader, state):
        state.close()
        assert asyncio.run(loader.load("u1")) is False
        assert state.records == ()


class TestToRecords:
    def test_foreign_owner_dropped(self):
        records = to_records([doc("p1"), doc("p2", owner="someone-else")], "u1")
        assert [r.id for r in records] == ["p1"]

    def test_duplicates_collapsed(self):
        records = to_records([doc("p1"), doc("p1", name="Dup"), doc("p2")], "u1")
        assert [r.id for r in records] == ["p1", "p2"]
        assert records[0].name == "Ana"

    def test_missing_id_dropped(self):
        records = to_records([{"name": "Ana", "userId": "u1"}], "u1")
        assert records == []

    def test_store_order_kept(self):
        records = to_records([doc("p3"), doc("p1"), doc("p2")], "u1")
        assert [r.id for r in records] == ["p3", "p1", "p2"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
