"""Message - User-facing messages for the Safe Routes Planner UI.

Architecture:
- SIDEBAR: ONE blue info message showing the current mode and what a click does
- CONTROL PANEL: red route errors, yellow straight-line estimate notes
- TOASTS: transient feedback for clicks and actions

Design Principles:
- Maximum ONE inline message per panel location at any time
- Provider error text is shown verbatim
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class MessageLevel(Enum):
    """Display level for UI messages."""

    INFO = "info"  # Blue - context/status
    WARNING = "warning"  # Yellow - degraded results, missing config
    ERROR = "error"  # Red - failed actions


@dataclass(frozen=True)
class Message(ABC):
    """Abstract base class for messages displayed inline (sidebar/panel).

    Rendered as st.info/st.warning/st.error blocks that persist until replaced.
    """

    @property
    @abstractmethod
    def message(self) -> str:
        """Formatted message for display in Streamlit."""
        raise NotImplementedError

    @property
    @abstractmethod
    def level(self) -> MessageLevel:
        """Display level."""
        raise NotImplementedError

    def display(self) -> None:
        """Render this message using the appropriate Streamlit function."""
        import streamlit as st

        render_fn = {
            MessageLevel.INFO: st.info,
            MessageLevel.WARNING: st.warning,
            MessageLevel.ERROR: st.error,
        }[self.level]
        render_fn(self.message)


@dataclass(frozen=True)
class ToastMessage(ABC):
    """Abstract base class for transient popup notifications.

    Good for: click feedback, validation failures, quick confirmations
    Bad for: persistent context or errors the user must act on
    """

    @property
    @abstractmethod
    def message(self) -> str:
        """Formatted message for the toast notification."""
        raise NotImplementedError

    @property
    @abstractmethod
    def icon(self) -> str:
        """Icon to show in toast."""
        raise NotImplementedError

    def display(self) -> None:
        """Show this message as a toast notification and log it."""
        import streamlit as st

        logger = logging.getLogger(__name__)
        logger.info(f"[TOAST] {self.icon} {self.message}")
        st.toast(f"{self.icon} {self.message}")


# =============================================================================
# TOAST MESSAGES
# =============================================================================


@dataclass(frozen=True)
class InvalidClickMessage(ToastMessage):
    """User clicked the map when clicks are not accepted."""

    action: str
    reason: str

    @property
    def icon(self) -> str:
        return "⚠️"

    @property
    def message(self) -> str:
        return f"Cannot {self.action}: {self.reason}"


@dataclass(frozen=True)
class PointPlacedMessage(ToastMessage):
    """Point A or B was placed."""

    label: str

    @property
    def icon(self) -> str:
        return "📍"

    @property
    def message(self) -> str:
        return f"Point {self.label} set"


@dataclass(frozen=True)
class ZonePlacedMessage(ToastMessage):
    """An avoid zone was added at the clicked location."""

    zone_id: str
    radius_m: float

    @property
    def icon(self) -> str:
        return "⛔"

    @property
    def message(self) -> str:
        return f"Avoid zone {self.zone_id} added ({self.radius_m:.0f} m)"


@dataclass(frozen=True)
class ValidationFailedMessage(ToastMessage):
    """Route request rejected before reaching the provider."""

    reason: str

    @property
    def icon(self) -> str:
        return "👆"

    @property
    def message(self) -> str:
        return self.reason


@dataclass(frozen=True)
class RouteBuiltMessage(ToastMessage):
    """Route arrived from the provider."""

    distance_text: str
    duration_text: str

    @property
    def icon(self) -> str:
        return "🚶"

    @property
    def message(self) -> str:
        return f"Route ready: {self.distance_text}, {self.duration_text}"


# =============================================================================
# INLINE MESSAGES
# =============================================================================


@dataclass(frozen=True)
class ModeContextMessage(Message):
    """Sidebar: what a map click does in the current state."""

    state_name: str
    has_start: bool = False
    has_end: bool = False

    @property
    def level(self) -> MessageLevel:
        return MessageLevel.INFO

    @property
    def message(self) -> str:
        if self.state_name == "AddingZone":
            return "⛔ **Adding Avoid Zone**\n\n🗺️ Click the **map** to place the zone center"
        if self.state_name == "BuildingRoute":
            return "🚶 **Building Route**\n\nWaiting for the routing provider..."
        if self.state_name == "Idle":
            if not self.has_start:
                return "📍 **Select Point A**\n\n🗺️ Click the **map** to set the start"
            if not self.has_end:
                return "📍 **Select Point B**\n\n🗺️ Click the **map** to set the destination"
            return (
                "✅ **Points Selected**\n\n"
                "- **Build route** → walking route around the zones\n"
                "- Click the **map** → start a new pair of points"
            )
        raise ValueError(f"Unknown state '{self.state_name}'.")


@dataclass(frozen=True)
class RouteErrorMessage(Message):
    """Control panel: last route build failed."""

    error: str

    @property
    def level(self) -> MessageLevel:
        return MessageLevel.ERROR

    @property
    def message(self) -> str:
        return self.error


@dataclass(frozen=True)
class StraightLineEstimateMessage(Message):
    """Control panel: route is a straight-line estimate, not a walking path."""

    detail: str

    @property
    def level(self) -> MessageLevel:
        return MessageLevel.WARNING

    @property
    def message(self) -> str:
        return f"{self.detail}\n\nDistance and time still come from the provider (straight line estimate)."


@dataclass(frozen=True)
class MissingApiKeyMessage(Message):
    """Sidebar: no ORS key configured."""

    @property
    def level(self) -> MessageLevel:
        return MessageLevel.WARNING

    @property
    def message(self) -> str:
        return "🔑 **ORS_API_KEY is not set**\n\nAdd it to `.env` or the environment to build routes."
