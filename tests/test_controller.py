"""test suite for ProfilesController."""
import pytest
import asyncio
import sys
from pathlib import Path
from unittest.mock import AsyncMock, Mock

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from profilesync.profiles import AuthStateNotifier, DeletionOutcome, ProfilesController
from profilesync.domain.errors import ProfileNotFoundError
from profilesync.observability import RecordingErrorSink

PROFILES = {
    "u1": [
        {"id": "p1", "name": "Ana", "surname": "Lee", "userId": "u1"},
        {"id": "p2", "name": "Bo", "surname": "Kim", "userId": "u1"},
    ],
    "u2": [
        {"id": "p7", "name": "Cy", "surname": "Doe", "userId": "u2"},
    ],
}


def make_store():
    async def query(collection, field, value):
        return list(PROFILES.get(value, []))

    store = AsyncMock()
    store.query = AsyncMock(side_effect=query)
    store.delete_by_id = AsyncMock()
    return store


def make_cache(value=None):
    cache = AsyncMock()
    cache.get = AsyncMock(return_value=value)
    return cache


class TestProfilesController:
    @pytest.fixture
    def notifier(self):
        return AuthStateNotifier()

    @pytest.fixture
    def store(self):
        return make_store()

    @pytest.fixture
    def navigator(self):
        return Mock()

    @pytest.fixture
    def surface(self):
        surface = AsyncMock()
        surface.confirm = AsyncMock(return_value=True)
        surface.notify = AsyncMock()
        return surface

    @pytest.fixture
    def sink(self):
        return RecordingErrorSink()

    def controller(self, notifier, cache, store, navigator, surface, sink):
        return ProfilesController(notifier, cache, store, navigator, surface, sink)

    def test_cached_then_stream_identity(self, notifier, store, navigator, surface, sink):
        """cache holds u1, stream later emits u2."""
        async def scenario():
            controller = self.controller(notifier, make_cache("u1"), store, navigator, surface, sink)
            await controller.start()
            await controller.settle()
            notifier.publish("u2")
            await controller.settle()
            return controller

        controller = asyncio.run(scenario())

        assert controller.identity == "u2"
        assert [c.args[2] for c in store.query.call_args_list] == ["u1", "u2"]
        assert [p.id for p in controller.profiles] == ["p7"]
        assert all(p.owner_id == "u2" for p in controller.profiles)

    def test_delete_confirmed_profile(self, notifier, store, navigator, surface, sink):
        """load returns p1 and p2, user deletes p1 and confirms."""
        async def scenario():
            controller = self.controller(notifier, make_cache("u1"), store, navigator, surface, sink)
            async with controller:
                await controller.settle()
                outcome = await controller.delete_profile("p1")
                return controller, outcome

        controller, outcome = asyncio.run(scenario())

        assert outcome is DeletionOutcome.DELETED
        assert [p.id for p in controller.profiles] == ["p2"]
        store.delete_by_id.assert_called_once_with("profiles", "p1")

    def test_created_signal_before_identity(self, notifier, store, navigator, surface, sink):
        """re-entry with newProfileCreated arrives before any identity resolved."""
        async def scenario():
            controller = self.controller(notifier, make_cache(None), store, navigator, surface, sink)
            await controller.start()
            reloaded = await controller.on_focus({"newProfileCreated": True})
            assert controller.profiles == ()
            await controller.settle()
            notifier.publish("u1")
            await controller.settle()
            return controller, reloaded

        controller, reloaded = asyncio.run(scenario())

        assert reloaded is False
        assert store.query.call_count == 1
        assert [p.id for p in controller.profiles] == ["p1", "p2"]

    def test_created_signal_after_identity_reloads(self, notifier, store, navigator, surface, sink):
        async def scenario():
            controller = self.controller(notifier, make_cache("u1"), store, navigator, surface, sink)
            await controller.start()
            await controller.settle()
            PROFILES["u1"].append({"id": "p3", "name": "Di", "surname": "Ray", "userId": "u1"})
            try:
                reloaded = await controller.on_focus({"newProfileCreated": True})
            finally:
                PROFILES["u1"].pop()
            return controller, reloaded

        controller, reloaded = asyncio.run(scenario())

        assert reloaded is True
        assert store.query.call_count == 2
        assert [p.id for p in controller.profiles] == ["p1", "p2", "p3"]

    def test_plain_reentry_does_not_reload(self, notifier, store, navigator, surface, sink):
        async def scenario():
            controller = self.controller(notifier, make_cache("u1"), store, navigator, surface, sink)
            await controller.start()
            await controller.settle()
            await controller.on_focus({})
            await controller.on_focus(None)
            await controller.on_focus({"newProfileCreated": False})

        asyncio.run(scenario())

        assert store.query.call_count == 1

    def test_load_failure_is_silent(self, notifier, navigator, surface, sink):
        store = make_store()
        store.query = AsyncMock(side_effect=ConnectionError("offline"))

        async def scenario():
            controller = self.controller(notifier, make_cache("u1"), store, navigator, surface, sink)
            await controller.start()
            await controller.settle()
            return controller

        controller = asyncio.run(scenario())

        assert controller.profiles == ()
        assert sink.kinds == ["load_failure"]
        surface.notify.assert_not_called()

    def test_select_profile_navigates_home(self, notifier, store, navigator, surface, sink):
        async def scenario():
            controller = self.controller(notifier, make_cache("u1"), store, navigator, surface, sink)
            await controller.start()
            await controller.settle()
            controller.select_profile("p2")
            with pytest.raises(ProfileNotFoundError):
                controller.select_profile("missing")

        asyncio.run(scenario())

        navigator.navigate.assert_called_once_with("Home", {"profileName": "Bo"})

    def test_create_profile_navigates_to_creation(self, notifier, store, navigator, surface, sink):
        controller = self.controller(notifier, make_cache(), store, navigator, surface, sink)
        controller.create_profile()
        navigator.navigate.assert_called_once_with("CreateProfile")

    def test_stop_unsubscribes_and_ignores_late_loads(self, notifier, navigator, surface, sink):
        store = make_store()

        async def scenario():
            gate = asyncio.Event()

            async def slow_query(collection, field, value):
                await gate.wait()
                return list(PROFILES[value])

            store.query = AsyncMock(side_effect=slow_query)
            controller = self.controller(notifier, make_cache("u1"), store, navigator, surface, sink)
            await controller.start()
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            await controller.stop()
            gate.set()
            await controller.settle()
            return controller

        controller = asyncio.run(scenario())

        assert notifier.subscriber_count == 0
        assert controller.profiles == ()
        assert sink.reports == []

    def test_load_in_flight_does_not_resurrect_deleted_profile(self, notifier, navigator, surface, sink):
        store = make_store()

        async def scenario():
            controller = self.controller(notifier, make_cache("u1"), store, navigator, surface, sink)
            await controller.start()
            await controller.settle()

            gate = asyncio.Event()
            snapshot = list(PROFILES["u1"])

            async def slow_query(collection, field, value):
                await gate.wait()
                return snapshot

            store.query = AsyncMock(side_effect=slow_query)
            reload = asyncio.create_task(controller.reload())
            await asyncio.sleep(0)
            await controller.delete_profile("p1")
            gate.set()
            await reload
            return controller

        controller = asyncio.run(scenario())

        assert [p.id for p in controller.profiles] == ["p2"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
