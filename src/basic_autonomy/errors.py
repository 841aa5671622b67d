"""Error types for waypoint generation."""

from enum import Enum


class WaypointGenerationError(Exception):
    """Base class for failures of a single planning cycle."""


class InvalidArgumentError(WaypointGenerationError, ValueError):
    """Raised when a stage receives inputs that violate its contract."""


class EmptyInputError(WaypointGenerationError, ValueError):
    """Raised when a search is requested over an empty sequence."""


class PlanningStatus(Enum):
    """Outcome of a planning cycle."""

    SUCCESS = "success"
    INVALID_ARGUMENT = "invalid_argument"
    EMPTY_INPUT = "empty_input"
