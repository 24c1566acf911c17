"""profile synchronization for the signed-in user."""
from .manager import ProfilesController
from .models import ProfileRecord, ProfileListState, DeletionState, DeletionOutcome
from .auth import AuthService, AuthStateNotifier
from .cache import IdentityCache, JsonIdentityCache
from .loader import ProfileLoader
from .mutator import ProfileMutator
from .refresh import RefreshTrigger, NEW_PROFILE_CREATED
from .resolver import IdentityResolver

__all__ = [
    "ProfilesController",
    "ProfileRecord",
    "ProfileListState",
    "DeletionState",
    "DeletionOutcome",
    "AuthService",
    "AuthStateNotifier",
    "IdentityCache",
    "JsonIdentityCache",
    "ProfileLoader",
    "ProfileMutator",
    "RefreshTrigger",
    "NEW_PROFILE_CREATED",
    "IdentityResolver",
]
