"""
Custom exception hierarchy for GridRef.

Syntactic and range problems raise ValidationError or ParseError (both
are also ValueError so callers can catch either). Internal contradictions
detected mid-computation raise ConsistencyError. NaN inputs and the
INVALID zone never raise; they propagate as sentinel results instead.
"""

from typing import Any, Dict, List, Optional


class GridRefException(Exception):
    """
    Base exception for all GridRef-specific errors.

    Attributes:
        error_code: String identifier for the error type
        message: Human-readable error message
        details: Technical details for logging/debugging
        suggestions: Optional list of resolution suggestions
    """

    def __init__(
        self,
        message: str,
        error_code: str,
        details: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        """
        Initialize GridRefException.

        Args:
            message: Human-readable error message
            error_code: String identifier for the error type
            details: Technical details for logging
            suggestions: List of suggestions for resolution
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.suggestions = suggestions or []

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to a dictionary.

        Returns:
            Dictionary representation of the error
        """
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "suggestions": self.suggestions,
        }

    def __str__(self) -> str:
        """String representation of the exception."""
        return f"{self.error_code}: {self.message}"

    def __repr__(self) -> str:
        """Detailed string representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"error_code='{self.error_code}', "
            f"message='{self.message}')"
        )


class ValidationError(GridRefException, ValueError):
    """
    Raised when a numeric input is out of range.

    Covers latitudes beyond the poles, zones outside [0, 60], precisions
    outside [-1, 11] and projected coordinates outside their zone limits.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Any = None,
        details: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        """
        Initialize ValidationError.

        Args:
            message: Human-readable error message
            field: Name of the argument that failed validation
            value: Offending value
            details: Technical details about the validation failure
            suggestions: List of suggestions for fixing the input
        """
        error_details = details or {}
        if field:
            error_details["field"] = field
        if value is not None:
            error_details["value"] = value

        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details=error_details,
            suggestions=suggestions or ["Check the input range and try again"],
        )


class ParseError(GridRefException, ValueError):
    """
    Raised when a text representation cannot be parsed.

    Used for malformed MGRS references, DMS angles, zone designators,
    EPSG codes and free-form coordinate strings.
    """

    def __init__(
        self,
        message: str,
        text: Optional[str] = None,
        text_format: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        """
        Initialize ParseError.

        Args:
            message: Human-readable error message
            text: The text being parsed
            text_format: Kind of text (e.g., 'MGRS', 'DMS', 'zone')
            details: Technical details about the parsing failure
            suggestions: List of suggestions for fixing the text
        """
        error_details = details or {}
        if text is not None:
            error_details["text"] = text
        if text_format:
            error_details["format"] = text_format

        default_suggestions = []
        if text_format == "MGRS":
            default_suggestions = [
                "Use the form [zone][band][column][row][digits], e.g. 33VVE7220287839",
                "Use an even number of digits after the letters",
            ]
        elif text_format == "DMS":
            default_suggestions = [
                "Use components in the order degrees, minutes, seconds",
                "Only the last component may have a fractional part",
            ]

        super().__init__(
            message=message,
            error_code="PARSE_ERROR",
            details=error_details,
            suggestions=suggestions or default_suggestions,
        )


class ConsistencyError(GridRefException):
    """
    Raised when inputs contradict each other.

    For example a latitude that does not match the UTM row implied by the
    northing, or a transfer that would cross UPS hemispheres.
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        super().__init__(
            message=message,
            error_code="CONSISTENCY_ERROR",
            details=details,
            suggestions=suggestions,
        )


class ConfigurationError(GridRefException):
    """
    Raised when a projection or ellipsoid is configured with bad parameters.
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        """
        Initialize ConfigurationError.

        Args:
            message: Human-readable error message
            config_key: Parameter that is misconfigured
            details: Technical details about the configuration issue
            suggestions: List of suggestions for fixing configuration
        """
        error_details = details or {}
        if config_key:
            error_details["config_key"] = config_key

        super().__init__(
            message=message,
            error_code="CONFIGURATION_ERROR",
            details=error_details,
            suggestions=suggestions or ["Check the projection parameters"],
        )


class TransformationError(GridRefException):
    """
    Raised when a PROJ-backed transformation cannot be built or applied.
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        super().__init__(
            message=message,
            error_code="TRANSFORMATION_ERROR",
            details=details,
            suggestions=suggestions or ["Check that the EPSG code is known to PROJ"],
        )
