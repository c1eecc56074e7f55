"""
Redactor exceptions.

Exception Hierarchy:
    RedactorError (base)
    ├── ConfigurationError
    ├── InputError
    └── ResolutionError
"""

__all__ = [
    "RedactorError",
    "ConfigurationError",
    "InputError",
    "ResolutionError",
]


class RedactorError(Exception):
    """Base exception for all redactor errors."""


class ConfigurationError(RedactorError):
    """Invalid configuration, raised before any matching begins."""


class InputError(RedactorError):
    """Input text is not a well-formed Unicode string."""


class ResolutionError(RedactorError):
    """Resolved spans violate ordering, overlap or skip invariants."""
