from __future__ import annotations


class DeckforgeError(Exception):
    """Base class for errors surfaced at the HTTP / CLI boundary."""


class InvalidInputError(DeckforgeError):
    """The caller sent something that is not a slide list / markup document."""

    def __init__(self, message: str, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ConversionError(DeckforgeError):
    """Unexpected failure while rendering or extracting; no partial output."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    @property
    def details(self) -> str:
        return str(self.cause) if self.cause is not None else self.message
