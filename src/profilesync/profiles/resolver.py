import asyncio
import logging
from typing import Callable, Optional

from .auth import AuthService, Unsubscribe
from .cache import IdentityCache, USER_ID_KEY
from ..domain.errors import CacheReadFailure, IdentityUnavailable
from ..observability import ErrorSink

logger = logging.getLogger(__name__)


class IdentityResolver:
    """
    reconciles the live auth stream and the cached user id into one identity.

    the stream is authoritative and always adopted. the cached id is a
    provisional value, adopted only if no stream identity has arrived by the
    time the cache read completes. every adoption calls on_identity.

    a cache read that completes after a stream identity is not an adoption and
    never overrides it, whichever finished last. among adoptions, the last one
    wins.
    """

    def __init__(
        self,
        auth: AuthService,
        cache: IdentityCache,
        on_identity: Callable[[str], None],
        error_sink: ErrorSink,
    ):
        self.auth = auth
        self.cache = cache
        self.on_identity = on_identity
        self.error_sink = error_sink

        self._identity: Optional[str] = None
        self._from_stream = False
        self._ready = asyncio.Event()
        self._unsubscribe: Optional[Unsubscribe] = None
        self._started = False
        self._stopped = False

    @property
    def identity(self) -> Optional[str]:
        return self._identity

    @property
    def ready(self) -> bool:
        """True once any identity has been adopted."""
        return self._ready.is_set()

    def require(self) -> str:
        """
        return the current identity.

        raises:
            IdentityUnavailable: if no identity has been adopted yet
        """
        if self._identity is None:
            raise IdentityUnavailable("No signed-in user")
        return self._identity

    def start(self) -> "asyncio.Task[None]":
        """
        subscribe to the auth stream and schedule the cache read.

        must be called from a running event loop.

        returns:
            the cache read task
        """
        if self._started:
            raise RuntimeError("identity resolver already started")
        self._started = True

        self._unsubscribe = self.auth.subscribe(self._on_auth_change)
        return asyncio.create_task(self._read_cache())

    def stop(self) -> None:
        """release the auth subscription. later emissions and cache results are ignored."""
        self._stopped = True
        if self._unsubscribe is not None:
            unsubscribe, self._unsubscribe = self._unsubscribe, None
            unsubscribe()

    async def wait_ready(self, timeout: Optional[float] = None) -> Optional[str]:
        """
        wait until an identity is known.

        returns:
            the identity, or None if the timeout expired first
        """
        try:
            await asyncio.wait_for(self._ready.wait(), timeout)
        except asyncio.TimeoutError:
            return None
        return self._identity

    def _on_auth_change(self, identity: Optional[str]) -> None:
        if self._stopped:
            return
        if not identity:
            # sign-out is handled elsewhere, keep the current identity
            logger.debug("auth stream reported no user")
            return

        self._from_stream = True
        self._adopt(identity, "auth stream")

    async def _read_cache(self) -> None:
        try:
            cached = await self.cache.get(USER_ID_KEY)
        except Exception as e:
            self.error_sink.report(
                CacheReadFailure("Error retrieving user ID from local cache", cause=e)
            )
            return

        if self._stopped or not cached:
            return
        if self._from_stream:
            logger.debug("ignoring cached user id, auth stream already resolved one")
            return

        self._adopt(cached, "local cache")

    def _adopt(self, identity: str, source: str) -> None:
        logger.debug(f"adopting user id from {source}")
        self._identity = identity
        self._ready.set()
        self.on_identity(identity)
