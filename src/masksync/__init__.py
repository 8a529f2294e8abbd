"""
MaskSync - Subtitle re-synchronization utility.

Aligns out-of-sync subtitles to an audio track by correlating voice activity
with the subtitle timeline, correcting constant offset and linear drift.
"""

__version__ = "0.1.0";
__author__ = "MaskSync Project";
__license__ = "MIT";

from .errors import MaskSyncError, InvalidInputError, ContainerFormatError, SubtitleFormatError, AlignmentError
from .config import AlignmentConfig
from .sync import AlignmentResult, align_from_pcm, align_from_container

__all__ = [
    "AlignmentConfig",
    "AlignmentResult",
    "align_from_pcm",
    "align_from_container",
    "MaskSyncError",
    "InvalidInputError",
    "ContainerFormatError",
    "SubtitleFormatError",
    "AlignmentError",
];
