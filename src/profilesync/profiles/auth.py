import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

AuthCallback = Callable[[Optional[str]], None]
Unsubscribe = Callable[[], None]


class AuthService(ABC):
    """source of the signed-in user identity."""

    @abstractmethod
    def subscribe(self, callback: AuthCallback) -> Unsubscribe:
        """
        register for identity changes.

        the callback receives the user id, or None when nobody is signed in.
        returns a function that releases the subscription.
        """
        pass


class AuthStateNotifier(AuthService):
    """
    in-process auth state broadcaster.

    new subscribers immediately receive the current identity once it is known,
    then every later change.
    """

    def __init__(self, identity: Optional[str] = None):
        self._identity = identity
        self._known = identity is not None
        self._subscribers: List[AuthCallback] = []

    @property
    def identity(self) -> Optional[str]:
        return self._identity

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: AuthCallback) -> Unsubscribe:
        self._subscribers.append(callback)
        if self._known:
            callback(self._identity)

        released = False

        def unsubscribe() -> None:
            nonlocal released
            if released:
                return
            released = True
            self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, identity: Optional[str]) -> None:
        """announce a sign-in (user id) or sign-out (None) to all subscribers."""
        self._identity = identity
        self._known = True
        logger.debug(f"auth state changed, notifying {len(self._subscribers)} subscriber(s)")
        # copy so callbacks may unsubscribe while we iterate
        for callback in list(self._subscribers):
            callback(identity)
