"""Exception types raised by the assistant pipeline."""

from typing import Optional


class DoorMateError(Exception):
    """Base class for pipeline errors."""


class ParseError(DoorMateError):
    """A manual could not be opened or is structurally invalid."""

    def __init__(self, path, reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Failed to parse PDF {self.path}: {reason}")


class RangeError(DoorMateError, ValueError):
    """Requested page bounds are inverted or fall outside the document."""

    def __init__(self, start_page: int, end_page: int, num_pages: Optional[int] = None) -> None:
        self.start_page = start_page
        self.end_page = end_page
        self.num_pages = num_pages
        message = f"Invalid page range {start_page}-{end_page}"
        if num_pages is not None:
            message += f" for a document with {num_pages} pages"
        super().__init__(message)
