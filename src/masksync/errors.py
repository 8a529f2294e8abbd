"""
Error types raised by the alignment engine.
"""


class MaskSyncError( Exception ):
    """Base error for MaskSync. The message is meant for the caller."""


class InvalidInputError( MaskSyncError ):
    """Raised for empty sample buffers or nonsensical call arguments."""


class ContainerFormatError( MaskSyncError ):
    """Raised when a PCM container is malformed or unsupported."""


class SubtitleFormatError( MaskSyncError ):
    """Raised for malformed timing lines, bad timecodes, or empty subtitle tracks."""


class AlignmentError( MaskSyncError ):
    """Raised when the correlation engine receives empty masks."""
