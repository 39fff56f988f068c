"""
Custom exceptions for the Earth-speed simulator.

This module provides domain-specific exceptions for clearer error messages.
None of these are fatal during a session: the engines catch the lookup
errors at their mutator boundary and recover (fallback or no-op). Only
``ConfigurationError`` is allowed to escape, and only at startup.

Clean Architecture Note:
- This file belongs to the Shared layer (cross-cutting concerns)
- Can be imported by any layer (domain, engine, rendering, ui)
"""


class EarthSpeedError(Exception):
    """Base exception for all simulator errors."""

    pass


class ConfigurationError(EarthSpeedError):
    """Raised when startup configuration is structurally invalid."""

    def __init__(self, message: str, field: str | None = None, value: object = None):
        """
        Initialize ConfigurationError.

        Parameters
        ----------
        message : str
            Error message
        field : str | None
            Name of the offending configuration field
        value : object
            The rejected value
        """
        self.field = field
        self.value = value

        full_message = message
        if field:
            full_message = f"{full_message} (field: {field}, value: {value!r})"

        super().__init__(full_message)


class UnknownPatternError(EarthSpeedError):
    """Raised when an animation pattern name is not recognised."""

    def __init__(self, name: str, available: list[str] | None = None):
        """
        Initialize UnknownPatternError.

        Parameters
        ----------
        name : str
            The unrecognised pattern name
        available : list[str] | None
            Valid pattern identifiers, for the message
        """
        self.name = name
        self.available = available or []

        full_message = f"Unknown animation mode: {name!r}"
        if self.available:
            full_message = f"{full_message} (available: {', '.join(self.available)})"

        super().__init__(full_message)


class UnknownPresetError(EarthSpeedError):
    """Raised when a named preset (camera or lighting) does not exist."""

    def __init__(self, key: str, kind: str = "preset", available: list[str] | None = None):
        """
        Initialize UnknownPresetError.

        Parameters
        ----------
        key : str
            The requested preset key
        kind : str
            Preset family, e.g. 'camera' or 'lighting'
        available : list[str] | None
            Valid keys, for the message
        """
        self.key = key
        self.kind = kind
        self.available = available or []

        full_message = f"Unknown {kind} preset: {key!r}"
        if self.available:
            full_message = f"{full_message} (available: {', '.join(self.available)})"

        super().__init__(full_message)


__all__ = [
    "EarthSpeedError",
    "ConfigurationError",
    "UnknownPatternError",
    "UnknownPresetError",
]
