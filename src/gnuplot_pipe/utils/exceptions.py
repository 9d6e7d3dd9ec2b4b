"""
Custom exceptions for the gnuplot pipe package.

Every recoverable failure is a GnuplotError; subclasses carry a machine-readable
code naming the failure family.
"""


class GnuplotError(Exception):
    """Base exception for all gnuplot session errors."""

    def __init__(self, message: str, code: str = "UNKNOWN_ERROR") -> None:
        """
        Initialize exception with message and error code.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (SNAKE_CASE)
        """
        self.message = message
        self.code = code
        super().__init__(message)


class PlotterEnvironmentError(GnuplotError):
    """Raised when PATH or DISPLAY is missing or gnuplot cannot be found."""

    def __init__(self, message: str = "Can't find gnuplot") -> None:
        super().__init__(message, code="ENVIRONMENT_ERROR")


class PlotterSpawnError(GnuplotError):
    """Raised when the gnuplot child process cannot be started."""

    def __init__(self, message: str = "Couldn't open connection to gnuplot") -> None:
        super().__init__(message, code="SPAWN_ERROR")


class TmpFileError(GnuplotError):
    """Raised when a temporary data file cannot be created or removed."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="RESOURCE_ERROR")


class DataError(GnuplotError):
    """Raised when plot input is empty, mismatched or unreadable."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="INPUT_ERROR")
