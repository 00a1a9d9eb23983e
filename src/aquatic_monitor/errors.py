"""
Exceptions
==========

Exception hierarchy for the aquatic monitor.

Recoverable collaborator failures (missing images, unreadable dataset
rows) are raised here and handled at the seams that call them. Only
``EventSinkError`` is fatal, and only during startup.
"""


class AquaticMonitorError(Exception):
    """Base class for all aquatic monitor errors."""
    pass


class EventSinkError(AquaticMonitorError):
    """Raised when the event log cannot be opened or written."""
    pass


class ImageNotFoundError(AquaticMonitorError):
    """Raised when an image reference cannot be resolved to image content."""

    def __init__(self, image_ref: str, detail: str = "") -> None:
        self.image_ref = image_ref
        message = f"Image not found: {image_ref!r}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class DatasetError(AquaticMonitorError):
    """Raised when a dataset row cannot be parsed into a record."""
    pass
