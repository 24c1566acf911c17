import asyncio
import logging
from typing import Any, Mapping, Optional, Set, Tuple

from .auth import AuthService
from .cache import IdentityCache
from .loader import ProfileLoader
from .models import DeletionOutcome, ProfileListState, ProfileRecord
from .mutator import ProfileMutator
from .refresh import RefreshTrigger
from .resolver import IdentityResolver
from ..domain.errors import ProfileNotFoundError
from ..observability import ErrorSink, LoggingErrorSink
from ..store.client import DocumentStore
from ..ui.navigation import Navigator, HOME_SCREEN, CREATE_PROFILE_SCREEN
from ..ui.prompts import ConfirmationSurface

logger = logging.getLogger(__name__)


class ProfilesController:
    """
    keeps the signed-in user's profile list in sync.

    identity changes (auth stream or cached id) trigger loads, deletions patch
    the list locally, and re-entry after a profile was created forces a reload.
    """

    def __init__(
        self,
        auth: AuthService,
        cache: IdentityCache,
        store: DocumentStore,
        navigator: Navigator,
        surface: ConfirmationSurface,
        error_sink: Optional[ErrorSink] = None,
    ):
        self.navigator = navigator
        self.error_sink = error_sink or LoggingErrorSink()
        self.state = ProfileListState()

        self.loader = ProfileLoader(store, self.state, self.error_sink)
        self.resolver = IdentityResolver(auth, cache, self._on_identity, self.error_sink)
        self.mutator = ProfileMutator(store, self.state, surface, self.error_sink)
        self.refresh = RefreshTrigger(self.resolver, self.loader.load)

        self._tasks: Set["asyncio.Task[Any]"] = set()
        self._started = False

    @property
    def profiles(self) -> Tuple[ProfileRecord, ...]:
        return self.state.records

    @property
    def identity(self) -> Optional[str]:
        return self.resolver.identity

    async def start(self) -> None:
        """subscribe to auth changes and read the cached identity."""
        if self._started:
            return
        self._started = True
        self._track(self.resolver.start())

    async def stop(self) -> None:
        """
        release the auth subscription and detach the list.

        in-flight store calls keep running; their results are ignored.
        """
        self.resolver.stop()
        self.state.close()

    async def settle(self) -> None:
        """wait for every background cache read and load, including ones they spawn."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def __aenter__(self) -> "ProfilesController":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    async def on_focus(self, params: Optional[Mapping[str, Any]] = None) -> bool:
        """screen re-entry. reloads if params carry newProfileCreated."""
        return await self.refresh.on_reentry(params)

    async def reload(self) -> bool:
        """load again for the current identity."""
        return await self.loader.load(self.resolver.identity)

    async def delete_profile(self, profile_id: str) -> DeletionOutcome:
        return await self.mutator.delete(profile_id)

    def select_profile(self, profile_id: str) -> None:
        """
        open a profile's home screen.

        raises:
            ProfileNotFoundError: if profile_id is not in the current list
        """
        profile = self.state.get(profile_id)
        if profile is None:
            raise ProfileNotFoundError(profile_id)
        self.navigator.navigate(HOME_SCREEN, {"profileName": profile.name})

    def create_profile(self) -> None:
        """hand off to the profile creation screen."""
        self.navigator.navigate(CREATE_PROFILE_SCREEN)

    def _on_identity(self, identity: str) -> None:
        self._track(asyncio.create_task(self.loader.load(identity)))

    def _track(self, task: "asyncio.Task[Any]") -> None:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
