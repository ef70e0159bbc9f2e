"""Exception hierarchy for imagesearch."""

from __future__ import annotations


class ImageSearchError(Exception):
    """Base class for all imagesearch errors."""


class FetchError(ImageSearchError):
    """The candidate image list could not be retrieved or read."""


class ClassifierError(ImageSearchError):
    """A single classifier call failed."""

    def __init__(self, message: str, image: str | None = None) -> None:
        super().__init__(message)
        self.image = image


class RequestConstructionError(ClassifierError):
    """The outbound classifier request could not be built."""


class TransportError(ClassifierError):
    """The classifier request failed on the wire or returned an error status."""


class ResponseShapeError(ClassifierError):
    """The classifier response is not JSON or lacks ``outputs[0].data``."""


class BuildCancelledError(ImageSearchError):
    """The build pass was cancelled or ran past its deadline."""


class PersistenceError(ImageSearchError):
    """The index could not be saved or loaded."""


class IndexNotFoundError(PersistenceError):
    """No persisted index exists at the configured path."""


class IndexParseError(PersistenceError):
    """The persisted index is not a well-formed index document."""
