"""Error types raised by the handbook subsystem."""


class HandbookError(Exception):
    """Base class for handbook failures."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(HandbookError):
    """A name or field value was rejected (e.g. blank after trimming)."""


class NotFoundError(HandbookError):
    """A category, item or section identifier is unknown or stale."""


class EditingStateError(HandbookError):
    """An editing operation was called while no matching draft is open."""
