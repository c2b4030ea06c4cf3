"""Exception taxonomy shared by the valuation, search and calibration layers."""

from __future__ import annotations

from typing import Any


class EngineError(Exception):
    """Base class for every error raised by the engine."""


class ValidationError(EngineError, ValueError):
    """Malformed asset, settings or configuration input."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class NotFoundError(EngineError, LookupError):
    """Raised by repositories when a league, team or profile is missing."""


class ConflictError(EngineError):
    """A calibration run is already in the running state."""


class ComputationError(EngineError):
    """Unexpected internal failure during search or fitting."""

    def __init__(self, message: str, run: Any | None = None):
        super().__init__(message)
        self.message = message
        self.run = run


class InsufficientDataError(EngineError):
    """Calibration was asked to fit fewer samples than the configured minimum."""

    def __init__(self, message: str, *, samples: int, minimum: int, run: Any | None = None):
        super().__init__(message)
        self.message = message
        self.run = run
        self.samples = samples
        self.minimum = minimum
