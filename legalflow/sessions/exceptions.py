class SessionStoreError(Exception):
    """Base exception for session store errors."""


class SessionExistsError(SessionStoreError):
    """Raised when creating a session whose id is already stored."""


class UnknownSessionFieldError(SessionStoreError):
    """Raised when a merge names a field the Session record does not have."""
