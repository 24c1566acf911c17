from typing import Optional


class ProfileSyncError(Exception):
    """base class for exceptions in profilesync."""
    pass


class ConfigError(ProfileSyncError):
    """raised when required configuration is missing or malformed."""
    pass


class StoreError(ProfileSyncError):
    """raised by document store clients on transport, HTTP or decoding failures."""
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class IdentityUnavailable(ProfileSyncError):
    """no identity has been resolved yet. treated as "nothing to load", never surfaced."""
    pass


class ProfileNotFoundError(ProfileSyncError):
    """raised when an operation names a profile id missing from the current list."""
    def __init__(self, profile_id: str):
        self.profile_id = profile_id
        super().__init__(f"Profile '{profile_id}' not found")


class DeletionInProgressError(ProfileSyncError):
    """raised when a delete is requested while another one is still pending."""
    def __init__(self, profile_id: str, pending_id: str):
        self.profile_id = profile_id
        self.pending_id = pending_id
        super().__init__(
            f"Cannot delete '{profile_id}' while deletion of '{pending_id}' is in progress"
        )


class ReportedError(ProfileSyncError):
    """an error kind handed to the error sink. wraps the underlying cause."""
    kind = "error"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.message = message
        self.cause = cause
        super().__init__(message if cause is None else f"{message}: {cause}")


class LoadFailure(ReportedError):
    """store query failed. logged, silent to the user, stale list kept."""
    kind = "load_failure"


class DeleteFailure(ReportedError):
    """store delete failed. logged and shown to the user, list unchanged."""
    kind = "delete_failure"


class CacheReadFailure(ReportedError):
    """local identity cache unreadable. treated as an absent identity."""
    kind = "cache_read_failure"
