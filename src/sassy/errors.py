"""
Error type for the sassy compiler.

Every failure in tokenizing, tree building, line classification, tree
assembly, constant evaluation and import resolution is fatal and is
reported as a SassSyntaxError. There is no recoverable-error path.

When an error escapes an Engine, that Engine records a backtrace entry.
The innermost frame records the failing line; every importing frame
records the line of its @import. The resulting backtrace therefore reads
from the innermost file to the outermost one.
"""

from typing import List, Optional


class SassSyntaxError(Exception):
    """
    Raised when a template cannot be compiled.

    Properties:
        message: Human-readable description of the problem
        line: 1-based source line number (None if unknown)
        filename: Innermost file the error came from (None for a bare template)
        backtrace: "file:line" entries, innermost first
    """

    def __init__(self, message: str, line: Optional[int] = None, filename: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.line = line
        self.filename = filename
        self.backtrace: List[str] = []

    def add_backtrace_entry(self, filename: Optional[str], line: Optional[int] = None) -> None:
        """
        Record one frame of the import chain.

        The first call also fixes the error's filename, unless one was
        given when the error was raised.
        """
        if not self.backtrace and self.filename is None:
            self.filename = filename
        if line is None:
            line = self.line
        self.backtrace.append(f"{filename or '(sass)'}:{line}")

    @property
    def location(self) -> str:
        """Short "file:line" form of where the error was raised."""
        return f"{self.filename or '(sass)'}:{self.line}"

    def __str__(self) -> str:
        return self.message


__all__ = ["SassSyntaxError"]
