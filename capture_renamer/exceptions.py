"""
Custom exception hierarchy for the capture renamer.

An unrecognized filename is not an error: it classifies as Unknown and the
file is still renamed with the UNKNOWN suffix.
"""


class RenamerError(Exception):
    """Base exception for all capture renamer errors."""
    pass


class TimestampUnavailable(RenamerError):
    """Raised when the selected timestamp source cannot produce a capture time."""
    pass


class MetadataProbeError(RenamerError):
    """Raised when the external metadata probe fails or returns garbage."""
    pass


class CollisionConflict(RenamerError):
    """Raised when a rename target already exists."""
    pass


class DirectoryCreationError(RenamerError):
    """Raised when the duplicates directory cannot be created."""
    pass


class FileOperationError(RenamerError):
    """Raised when a delete/move/timestamp write fails."""
    pass
