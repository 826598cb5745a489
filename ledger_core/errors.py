"""Error kinds raised by simulation operations."""

from enum import Enum


class ErrorKind(Enum):
    INSUFFICIENT_FUNDS = "InsufficientFunds"
    ALREADY_OWNED = "AlreadyOwned"
    PREREQUISITE_NOT_MET = "PrerequisiteNotMet"
    CONFLICT = "Conflict"
    NOT_FOUND = "NotFound"
    INVALID_INPUT = "InvalidInput"


class SimulationError(Exception):
    """Base class for recoverable command failures."""

    kind = ErrorKind.INVALID_INPUT


class InsufficientFundsError(SimulationError):
    """Raised when required cash exceeds available cash."""

    kind = ErrorKind.INSUFFICIENT_FUNDS


class AlreadyOwnedError(SimulationError):
    """Raised when a unique item is acquired twice."""

    kind = ErrorKind.ALREADY_OWNED


class PrerequisiteNotMetError(SimulationError):
    """Raised when a required item or net worth threshold is missing."""

    kind = ErrorKind.PREREQUISITE_NOT_MET


class ConflictError(SimulationError):
    """Raised when a mutually exclusive item is already owned."""

    kind = ErrorKind.CONFLICT


class NotFoundError(SimulationError):
    """Raised when an asset, property or item identity is unknown."""

    kind = ErrorKind.NOT_FOUND


class InvalidInputError(SimulationError, ValueError):
    """Raised when command input is malformed."""

    kind = ErrorKind.INVALID_INPUT
