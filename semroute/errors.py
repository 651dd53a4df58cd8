"""
Router Error Taxonomy

Every failure the router surfaces derives from RouterError so callers can
branch on a single base class. Each error carries the text or key that
caused it; the underlying backend exception is chained as __cause__.

Dimension mismatches between a query and a stored embedding are not errors:
the candidate is skipped during matching.
"""


class RouterError(Exception):
    """
    Base exception for all routing failures.

    Errors raised out of Router.match carry the elapsed match time in
    ``latency_ms``; it is None everywhere else.
    """

    latency_ms: float | None = None


class RouterConfigurationError(RouterError, ValueError):
    """Routes, utterances or scoring options are invalid."""


class EncodingError(RouterError):
    """The encoder could not produce a vector for a text."""

    def __init__(self, text: str, message: str | None = None) -> None:
        self.text = text
        super().__init__(message or f"error encoding utterance: {text!r}")


class StoreError(RouterError):
    """A vector store operation failed."""

    def __init__(self, key: str, message: str | None = None) -> None:
        self.key = key
        super().__init__(message or f"error storing utterance: {key!r}")


class KeyNotFoundError(StoreError):
    """No vector is stored under the requested key."""

    def __init__(self, key: str) -> None:
        super().__init__(key, f"key does not exist: {key!r}")


class RetrievalError(RouterError):
    """A stored embedding could not be read while matching."""

    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(f"error getting embedding: {text!r}")


class NoRouteFoundError(RouterError):
    """No candidate scored above the initial best score of 0.0."""

    def __init__(self, query: str) -> None:
        self.query = query
        super().__init__(f"no route found for utterance: {query!r}")


class MatchTimeoutError(RouterError):
    """Matching did not finish within the allotted time."""

    def __init__(self, query: str, timeout: float) -> None:
        self.query = query
        self.timeout = timeout
        super().__init__(f"matching {query!r} timed out after {timeout}s")
