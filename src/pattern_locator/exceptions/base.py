"""
Base exceptions for Pattern Locator.
"""


class PatternLocatorError(Exception):
    """
    Base exception for all Pattern Locator errors.

    All custom exceptions inherit from this class, making it easy
    to catch any error from the library.

    Attributes:
        message: Human-readable error message
        details: Optional additional error details
    """

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ConfigurationError(PatternLocatorError):
    """
    Error in configuration.

    Raised for static misconfiguration that retrying cannot fix:
    - Unknown or unregistered pattern set
    - Missing field-type, section or location template
    - Placeholder token with no binding
    - Invalid settings or pattern files
    """
    pass


class ParseError(PatternLocatorError):
    """
    Malformed field descriptor.

    Raised when a field string does not follow the
    ``{{location}} {section} field[instance]`` grammar.
    """

    def __init__(self, message: str, raw: str, position: int | None = None):
        super().__init__(message, {"raw": raw, "position": position})
        self.raw = raw
        self.position = position
