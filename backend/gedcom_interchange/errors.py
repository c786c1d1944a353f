"""Exceptions raised by the GEDCOM interchange core."""


class GedcomError(Exception):
    """Base exception for GEDCOM interchange errors"""
    pass


class GedcomParseError(GedcomError):
    """Raised when a line cannot be turned into a record.

    Structural errors abort parsing immediately. Semantic problems
    (dangling references, missing header fields) are reported by
    validation instead.
    """

    def __init__(self, message: str, line_number: int | None = None, line: str | None = None):
        self.message = message
        self.line_number = line_number
        self.line = line
        if line_number is not None:
            message = f"Line {line_number}: {message}"
        if line is not None:
            message = f"{message} <{line}>"
        super().__init__(message)
