# exceptions.py

class PermanentError(Exception):
    """An error that will not be fixed by a retry (e.g., a missing folder or a bad path)."""
    pass

class TransientError(Exception):
    """A temporary error (e.g., a network failure) that might resolve on a retry."""
    pass


class NotFoundError(PermanentError):
    """The folder or asset is already absent. The core treats this as success."""
    pass

class InvalidArgumentError(PermanentError, ValueError):
    """A missing or malformed path argument, rejected before any remote call."""
    pass


class RateLimitedError(TransientError):
    """The remote asset service refused the call because of its request-rate limits."""
    pass

class RemoteUnavailableError(TransientError):
    """The remote asset service failed or could not be reached."""
    pass
