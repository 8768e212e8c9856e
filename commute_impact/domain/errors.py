"""Typed domain errors for the Commute Impact Calculator.

Every layer raises one of these instead of returning sentinel values,
so callers can map failures to the right user-facing response.

All errors inherit from CommuteImpactError and can optionally
wrap a root cause exception for debugging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class CommuteImpactError(Exception):
    """Base error for the commute impact domain.

    Attributes:
        message: Human-readable error description
        cause: Optional underlying exception that caused this error
    """

    message: str
    cause: Optional[Exception] = field(default=None, repr=False)

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass
class ValidationError(CommuteImpactError):
    """Malformed or out-of-range calculation input.

    Raised before any arithmetic runs. Never retried.

    Attributes:
        field_name: Name of the offending input field, if known
    """

    field_name: str = ""


@dataclass
class InvalidPatternError(ValidationError):
    """Travel pattern identifier outside the fixed pattern table.

    Attributes:
        pattern: The identifier that could not be resolved
    """

    pattern: str = ""


@dataclass
class NotFoundError(CommuteImpactError):
    """A referenced record does not exist.

    Attributes:
        resource: Kind of record (e.g. 'vehicle_class', 'calculation')
        identifier: The identifier that was looked up
    """

    resource: str = ""
    identifier: str = ""


@dataclass
class UpstreamUnavailableError(CommuteImpactError):
    """The external mapping service failed or timed out.

    Attributes:
        service: Upstream endpoint name ('geocode', 'directions', ...)
        is_timeout: Whether the failure was a timeout
    """

    service: str = ""
    is_timeout: bool = False


@dataclass
class PersistenceError(CommuteImpactError):
    """The calculation store failed to read or write.

    Attributes:
        operation: Storage operation that failed
    """

    operation: str = ""


@dataclass
class ConfigurationError(CommuteImpactError):
    """Invalid or missing configuration.

    Attributes:
        setting_name: Name of the problematic setting
        expected_type: Expected type or format
    """

    setting_name: str = ""
    expected_type: Optional[str] = None


@dataclass
class ReferenceDataError(CommuteImpactError):
    """Vehicle reference data could not be loaded.

    Attributes:
        file_path: Path to the reference data file if relevant
    """

    file_path: Optional[str] = None
