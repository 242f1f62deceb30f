"""Warning - Recoverable route quality conditions.

A warning accompanies a usable route. The route is still rendered, but the
UI may flag it (e.g. distance/duration are real, the drawn path is not).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RouteWarning(ABC):
    """Abstract base class for route warnings.

    Subclasses store specific parameters and compute message as property.
    Use isinstance() to check warning type.
    """

    @property
    @abstractmethod
    def message(self) -> str:
        """Human-readable warning message with emoji prefix."""

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class GeometryDegraded(RouteWarning):
    """Provider gave distance/duration but no path; the path is a straight line.

    Attributes:
        reason: What was missing from the response
    """

    reason: str

    @property
    def message(self) -> str:
        return f"📏 Approximate path: {self.reason}. Showing a straight line between A and B."
