class InvalidInput(ValueError):
    """Raised when a finish time, race date or date key cannot be parsed."""
    pass


class NotConfigured(RuntimeError):
    """Raised when a backend (database, Strava, LLM) has no credentials."""
    pass


class TransientIOFailure(RuntimeError):
    """Raised when a store or network call fails. Not retried automatically."""
    pass


class StravaAuthError(TransientIOFailure):
    """Raised when Strava rejects the token even after a refresh."""
    pass
