"""Custom exception hierarchy for the pindrive metadata layer."""


class PinDriveError(Exception):
    """Base exception for all pindrive errors."""


class InvalidInputError(PinDriveError):
    """Raised when required fields are missing or malformed.

    Always raised before any store access or remote call.
    """


class NotFoundOrDeniedError(PinDriveError):
    """Raised when a record is absent or the caller has no rights on it.

    The two cases share one error so callers cannot probe for the
    existence of records they are not allowed to see.
    """


class NotFoundError(PinDriveError):
    """Raised when a lookup misses and existence is not sensitive (share revocation)."""


class AlreadySharedError(PinDriveError):
    """Raised when a file is already shared with the requested identity."""


class UpstreamUnavailableError(PinDriveError):
    """Raised when the content pin gateway fails (transport error or non-2xx reply)."""
