"""data models for profile synchronization."""
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple
from pydantic import BaseModel, ConfigDict, Field

# collection and field names used by the document store
PROFILES_COLLECTION = "profiles"
OWNER_FIELD = "userId"


class ProfileRecord(BaseModel):
    """read-only snapshot of one profile document."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str = ""
    surname: str = ""
    owner_id: str = Field(alias=OWNER_FIELD)

    @property
    def display_name(self) -> str:
        return f"{self.name} {self.surname}".strip()

    @classmethod
    def from_document(cls, doc_id: str, data: Dict[str, Any]) -> "ProfileRecord":
        """
        map store-native fields into a record.

        args:
            doc_id: store-assigned document id
            data: decoded document fields ({name, surname, userId})
        """
        return cls(
            id=doc_id,
            name=data.get("name") or "",
            surname=data.get("surname") or "",
            userId=data.get(OWNER_FIELD) or "",
        )


class DeletionState(Enum):
    IDLE = "idle"
    CONFIRMATION_PENDING = "confirmation_pending"
    CANCELLED = "cancelled"
    CONFIRMED = "confirmed"
    DELETING = "deleting"
    DELETED = "deleted"
    FAILED = "failed"


class DeletionOutcome(Enum):
    """terminal result of a delete request."""
    CANCELLED = "cancelled"
    DELETED = "deleted"
    FAILED = "failed"


class ProfileListState:
    """
    in-memory profile list owned by one controller.

    mutated only by full replacement after a load or removal of one id after a
    remote delete. once closed, every write is ignored.
    """

    def __init__(self):
        self._records: List[ProfileRecord] = []
        self._deleted_ids: Set[str] = set()
        self._closed = False

    @property
    def records(self) -> Tuple[ProfileRecord, ...]:
        return tuple(self._records)

    @property
    def closed(self) -> bool:
        return self._closed

    def get(self, profile_id: str) -> Optional[ProfileRecord]:
        return next((r for r in self._records if r.id == profile_id), None)

    def replace(self, records: List[ProfileRecord]) -> bool:
        """swap in a fresh result set. returns False if the write was ignored."""
        if self._closed:
            return False
        # a load that started before a delete finished must not bring the record back
        self._records = [r for r in records if r.id not in self._deleted_ids]
        # ids the store no longer returns need no more hiding
        self._deleted_ids &= {r.id for r in records}
        return True

    def remove(self, profile_id: str) -> bool:
        if self._closed:
            return False
        self._deleted_ids.add(profile_id)
        self._records = [r for r in self._records if r.id != profile_id]
        return True

    def close(self) -> None:
        self._closed = True

    def __len__(self) -> int:
        return len(self._records)
