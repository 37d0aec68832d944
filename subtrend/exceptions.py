# subtrend/exceptions.py

"""Errors raised at the service boundary."""


class TrendError(Exception):
    """Base class for subtrend errors."""


class InvalidSlugError(TrendError, ValueError):
    """Service slug is not lowercase letters, digits and hyphens."""

    def __init__(self, slug: str) -> None:
        super().__init__(f"Invalid service slug: {slug!r}")
        self.slug = slug


class HistoryFileError(TrendError):
    """An existing history file cannot be read, so it will not be rewritten."""

    def __init__(self, slug: str, path: object) -> None:
        super().__init__(
            f"History file for '{slug}' is unreadable, not updating: {path}"
        )
        self.slug = slug
        self.path = path


class TrendDataNotFoundError(TrendError, LookupError):
    """No usable price data exists for the service."""

    def __init__(self, slug: str) -> None:
        super().__init__(f"No trend data found for '{slug}'")
        self.slug = slug
