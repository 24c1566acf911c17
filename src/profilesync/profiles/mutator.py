import logging
from typing import Optional

from .models import DeletionOutcome, DeletionState, ProfileListState, PROFILES_COLLECTION
from ..domain.errors import DeleteFailure, DeletionInProgressError
from ..observability import ErrorSink
from ..store.client import DocumentStore
from ..ui.prompts import ConfirmationSurface

logger = logging.getLogger(__name__)

CONFIRM_TITLE = "Confirm"
CONFIRM_MESSAGE = "Are you sure you want to delete this profile?"
SUCCESS_TITLE = "Success"
SUCCESS_MESSAGE = "Profile deleted successfully"
FAILURE_TITLE = "Error"
FAILURE_MESSAGE = "There was a problem deleting the profile"


class ProfileMutator:
    """
    confirmation-gated profile deletion.

    Idle -> ConfirmationPending -> Cancelled -> Idle
                                -> Confirmed -> Deleting -> Deleted -> Idle
                                                         -> Failed  -> Idle
    """

    def __init__(
        self,
        store: DocumentStore,
        state: ProfileListState,
        surface: ConfirmationSurface,
        error_sink: ErrorSink,
    ):
        self.store = store
        self.state = state
        self.surface = surface
        self.error_sink = error_sink
        self._phase = DeletionState.IDLE
        self._pending_id: Optional[str] = None

    @property
    def phase(self) -> DeletionState:
        return self._phase

    @property
    def pending_id(self) -> Optional[str]:
        return self._pending_id

    async def delete(self, profile_id: str) -> DeletionOutcome:
        """
        ask for confirmation, then delete profile_id remotely and locally.

        args:
            profile_id: id of the profile to delete

        returns:
            how the request ended

        raises:
            DeletionInProgressError: if another delete has not finished yet
        """
        if self._phase is not DeletionState.IDLE:
            raise DeletionInProgressError(profile_id, self._pending_id or "")

        self._pending_id = profile_id
        try:
            self._transition(DeletionState.CONFIRMATION_PENDING)
            confirmed = await self.surface.confirm(CONFIRM_TITLE, CONFIRM_MESSAGE)

            if not confirmed:
                self._transition(DeletionState.CANCELLED)
                return DeletionOutcome.CANCELLED

            self._transition(DeletionState.CONFIRMED)
            return await self._delete_confirmed(profile_id)
        finally:
            self._pending_id = None
            self._transition(DeletionState.IDLE)

    async def _delete_confirmed(self, profile_id: str) -> DeletionOutcome:
        self._transition(DeletionState.DELETING)
        try:
            await self.store.delete_by_id(PROFILES_COLLECTION, profile_id)
        except Exception as e:
            self._transition(DeletionState.FAILED)
            self.error_sink.report(DeleteFailure(f"Error deleting profile {profile_id}", cause=e))
            await self.surface.notify(FAILURE_TITLE, FAILURE_MESSAGE)
            return DeletionOutcome.FAILED

        self._transition(DeletionState.DELETED)
        self.state.remove(profile_id)
        await self.surface.notify(SUCCESS_TITLE, SUCCESS_MESSAGE)
        return DeletionOutcome.DELETED

    def _transition(self, phase: DeletionState) -> None:
        logger.debug(f"delete {self._pending_id}: {self._phase.value} -> {phase.value}")
        self._phase = phase
