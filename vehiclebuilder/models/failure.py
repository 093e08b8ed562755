"""
Failure classification for genuine faults.

Placement rule violations are NOT failures: they are returned as
`ValidationResult` values (see `vehiclebuilder.models.validation`).
This module covers the cases where an operation cannot proceed at all,
such as a catalog card or saved vehicle that does not exist, or an import
file that cannot be read.
"""

from enum import Enum


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"

    # Resource failures
    NOT_FOUND = "not_found"

    # Internal errors
    INVARIANT_VIOLATION = "invariant_violation"


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        super().__init__(message)


class CatalogCardNotFoundError(KnownError):
    """Raised when a catalog operation targets an id that is not stored."""

    def __init__(self, card_id: str):
        self.card_id = card_id
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=f"Card '{card_id}' not found",
            suggestion="Reload the catalog; the card may have been deleted.",
        )


class DuplicateCatalogCardError(KnownError):
    """Raised when a card is added under an id the catalog already holds."""

    def __init__(self, card_id: str):
        self.card_id = card_id
        super().__init__(
            kind=FailureKind.INVALID_INPUT,
            message=f"Card id '{card_id}' already exists in the catalog",
            suggestion="Update the existing card or add the new one without an id.",
        )


class VehicleNotFoundError(KnownError):
    """Raised when a saved vehicle key has no stored vehicle."""

    def __init__(self, storage_key: str):
        self.storage_key = storage_key
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=f"Saved vehicle '{storage_key}' not found",
        )


class CatalogImportError(KnownError):
    """Raised when a catalog export cannot be read or parsed."""

    def __init__(self, path: str, detail: str | None = None):
        self.path = path
        super().__init__(
            kind=FailureKind.INVALID_INPUT,
            message=f"Unable to import catalog from {path}",
            detail=detail,
            suggestion="Check that the file is a JSON array of cards.",
        )


class DeckInvariantError(KnownError):
    """
    Raised when a deck's point accounting disagrees with its cards.

    Only produced by explicit integrity checks (e.g. loading a saved
    vehicle); normal store operations cannot reach this state.
    """

    def __init__(self, deck_id: str, detail: str):
        self.deck_id = deck_id
        super().__init__(
            kind=FailureKind.INVARIANT_VIOLATION,
            message=f"Deck '{deck_id}' point accounting is inconsistent",
            detail=detail,
        )
