import logging
from typing import Any, Dict, List, Optional

from .models import ProfileListState, ProfileRecord, PROFILES_COLLECTION, OWNER_FIELD
from ..domain.errors import LoadFailure
from ..observability import ErrorSink
from ..store.client import DocumentStore

logger = logging.getLogger(__name__)


class ProfileLoader:
    """fetches the profiles owned by a user and replaces the in-memory list."""

    def __init__(self, store: DocumentStore, state: ProfileListState, error_sink: ErrorSink):
        self.store = store
        self.state = state
        self.error_sink = error_sink
        self._generation = 0

    @property
    def generation(self) -> int:
        """number of loads issued so far."""
        return self._generation

    async def load(self, identity: Optional[str]) -> bool:
        """
        run one load for identity.

        a missing identity is a no-op. failures are reported to the error sink
        and leave the current list untouched. a response that arrives after a
        newer load was issued is discarded.

        returns:
            True if the list was replaced
        """
        if not identity:
            logger.debug("no user id resolved yet, nothing to load")
            return False

        self._generation += 1
        generation = self._generation

        try:
            documents = await self.store.query(PROFILES_COLLECTION, OWNER_FIELD, identity)
            records = to_records(documents, identity)
        except Exception as e:
            self.error_sink.report(LoadFailure("Error fetching profiles", cause=e))
            return False

        if generation != self._generation:
            logger.debug(
                f"discarding stale profile response (generation {generation}, "
                f"latest {self._generation})"
            )
            return False

        replaced = self.state.replace(records)
        if replaced:
            logger.debug(f"loaded {len(records)} profile(s)")
        return replaced


def to_records(documents: List[Dict[str, Any]], identity: str) -> List[ProfileRecord]:
    """
    map store documents to records owned by identity.

    documents owned by someone else are dropped. duplicate ids keep their
    first occurrence.
    """
    records = []
    seen = set()

    for document in documents:
        record = ProfileRecord.from_document(str(document.get("id", "")), document)
        if record.owner_id != identity:
            logger.warning(f"dropping profile {record.id!r} not owned by the current user")
            continue
        if not record.id or record.id in seen:
            continue
        seen.add(record.id)
        records.append(record)

    return records
