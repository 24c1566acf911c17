import logging
from typing import Any, Awaitable, Callable, Mapping, Optional

from .resolver import IdentityResolver

logger = logging.getLogger(__name__)

# route param set by the creation screen when it hands control back
NEW_PROFILE_CREATED = "newProfileCreated"


class RefreshTrigger:
    """forces a reload when the screen is re-entered after a profile was created."""

    def __init__(self, resolver: IdentityResolver, load: Callable[[Optional[str]], Awaitable[bool]]):
        self.resolver = resolver
        self.load = load

    async def on_reentry(self, params: Optional[Mapping[str, Any]] = None) -> bool:
        """
        handle one re-entry into the profile list.

        the load only runs once an identity is known. before that the
        identity resolver's own load populates the list.

        returns:
            True if a load ran and replaced the list
        """
        if not params or not params.get(NEW_PROFILE_CREATED):
            return False

        if not self.resolver.ready:
            logger.debug("profile created before identity resolved, waiting for resolver")
            return False

        return await self.load(self.resolver.identity)
