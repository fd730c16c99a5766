"""Custom exceptions for the Dominion kingdom setup web application."""

from __future__ import annotations

from typing import Iterable, List


class KingdomGenError(Exception):
    """Base exception class for kingdom generator errors.

    Attributes:
        code (str): Error code for identifying the error type
        message (str): Descriptive error message
        details (dict): Additional error context and details
    """

    def __init__(self, message: str, code: str = "KINGDOM_ERR", details: dict | None = None):
        """Initialize the base kingdom generator error.

        Args:
            message: Human-readable error description
            code: Error code for identification and handling
            details: Additional context about the error
        """
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """Format the error message with code and details."""
        error_msg = f"[{self.code}] {self.message}"
        if self.details:
            error_msg += f"\nDetails: {self.details}"
        return error_msg

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "details": dict(self.details)}


# Generator-originated errors
class GenerationError(KingdomGenError):
    """Base class for failures reported by the external setup Generator.

    These are shown to the user verbatim; there is no local recovery.
    """

    def __init__(self, message: str, code: str = "GEN_ERR", details: dict | None = None):
        super().__init__(message, code=code, details=details)


class ConflictError(GenerationError):
    """Raised when the same card was asked to be both included and banned."""

    def __init__(self, cards: Iterable[str], details: dict | None = None):
        """Initialize conflict error.

        Args:
            cards: Card ids present in both the include and ban lists
            details: Additional context about the conflict
        """
        self.cards: List[str] = list(cards)
        message = (
            "I can't ban and include cards! The following exist in the ban and include lists: "
            f"{', '.join(self.cards)}"
        )
        merged = {"cards": list(self.cards)}
        merged.update(details or {})
        super().__init__(message, code="CONFLICT", details=merged)


class UnsatisfiableError(GenerationError):
    """Raised when the requested constraints cannot be met by the Generator."""

    def __init__(self, kind: str, message: str | None = None, details: dict | None = None):
        """Initialize unsatisfiable constraints error.

        Args:
            kind: Generator error kind (e.g. ``CouldNotSatisfyKingdomCards``)
            message: Human-readable explanation; defaults to a generic text
            details: Additional context about the failure
        """
        self.kind = kind
        merged = {"kind": kind}
        merged.update(details or {})
        super().__init__(
            message or f"The requested setup could not be generated ({kind}).",
            code="UNSATISFIABLE",
            details=merged,
        )


class GeneratorUnavailableError(GenerationError):
    """Raised when the Generator backend cannot be reached or misbehaves."""

    def __init__(self, reason: str, details: dict | None = None):
        message = f"The kingdom generator is unavailable: {reason}"
        super().__init__(message, code="GEN_UNAVAILABLE", details=details)


class GeneratorNotReadyError(KingdomGenError):
    """Raised when the catalogue is requested before startup initialization finished."""

    def __init__(self, details: dict | None = None):
        super().__init__(
            "The kingdom generator has not finished initializing.",
            code="GEN_NOT_READY",
            details=details,
        )


# Internal defects
class InternalDefectError(KingdomGenError):
    """Programming defect (not a user validation failure)."""

    def __init__(self, message: str, code: str = "INTERNAL_DEFECT", details: dict | None = None):
        super().__init__(message, code=code, details=details)


class CardIndexLookupError(InternalDefectError):
    """Raised when a generated card is missing from the card/expansion index.

    A consistent catalogue makes this impossible, so it points at a bug in
    index construction rather than at anything the user selected.
    """

    def __init__(self, card_id: str, details: dict | None = None):
        self.card_id = card_id
        merged = {"card": card_id}
        merged.update(details or {})
        super().__init__(
            f"Card '{card_id}' is not present in the card/expansion index",
            code="INDEX_MISS",
            details=merged,
        )


# Selection tree errors
class SelectionTreeError(KingdomGenError):
    """Base class for selection tree construction and toggle errors."""

    def __init__(self, message: str, code: str = "TREE_ERR", details: dict | None = None):
        super().__init__(message, code=code, details=details)


class UnknownNodeError(SelectionTreeError):
    """Raised when toggling a node id that does not exist in the tree."""

    def __init__(self, purpose: str, node_id: str):
        super().__init__(
            f"No node '{node_id}' in the {purpose} tree",
            code="UNKNOWN_NODE",
            details={"purpose": purpose, "node": node_id},
        )


class NodeNotToggleableError(SelectionTreeError):
    """Raised when toggling a node that is disabled for its tree (pool tree cards)."""

    def __init__(self, purpose: str, node_id: str):
        super().__init__(
            f"Node '{node_id}' cannot be toggled in the {purpose} tree",
            code="NODE_DISABLED",
            details={"purpose": purpose, "node": node_id},
        )


class InvalidCountChoiceError(KingdomGenError):
    """Raised when a radio-style count choice is not one of the offered options."""

    def __init__(self, field_name: str, value: object, options: Iterable[int]):
        super().__init__(
            f"Invalid {field_name} choice: '{value}'",
            code="INVALID_COUNT",
            details={"field": field_name, "value": str(value), "options": list(options)},
        )


def user_message(error: BaseException) -> str:
    """Return the text shown to users for ``error``.

    Generator errors are surfaced verbatim; internal defects get a generic
    message so that index details stay in the logs.
    """
    if isinstance(error, InternalDefectError):
        return "Something went wrong while laying out the kingdom. Please try again."
    if isinstance(error, KingdomGenError):
        return error.message
    return str(error)
