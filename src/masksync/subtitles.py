"""
SubRip subtitle codec: parsing cue timing and rewriting shifted documents.
"""
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence
import pysrt

from .errors import SubtitleFormatError
from .logging import get_logger


ARROW = "-->";
_TIMECODE_SPLIT = re.compile( r"[:,]" );
_TIMECODE_FIELD = re.compile( r"[+-]?[0-9]+" );


@dataclass( frozen=True )
class Cue:
    """A single timed subtitle entry. Times are milliseconds."""

    start_ms: int;
    end_ms: int;
    text: str;

    def __repr__( self ):
        return f"Cue(start={self.start_ms}ms, end={self.end_ms}ms, text='{self.text[:30]}')";


def parse_timecode( timecode: str ) -> Optional[int]:
    """
    Convert an HH:MM:SS,mmm timecode to milliseconds.

    Returns None unless the value has exactly four integer fields.
    """
    parts = _TIMECODE_SPLIT.split( timecode.strip() );
    if len( parts ) != 4:
        return None;

    if not all( _TIMECODE_FIELD.fullmatch( part ) for part in parts ):
        return None;

    hours, minutes, seconds, millis = ( int( part ) for part in parts );

    return ( ( hours * 3600 + minutes * 60 + seconds ) * 1000 ) + millis;


def format_timecode( ms: int ) -> str:
    """Render milliseconds as a zero-padded HH:MM:SS,mmm timecode."""
    return str( pysrt.SubRipTime.from_ordinal( max( 0, int( ms ) ) ) );


def _parse_time_line( time_line: str ) -> tuple:
    parts = [ part.strip() for part in time_line.split( ARROW ) ];
    if len( parts ) != 2:
        raise SubtitleFormatError( f"invalid time line: {time_line}" );

    start = parse_timecode( parts[0] );
    if start is None:
        raise SubtitleFormatError( f"bad start time in line: {time_line}" );

    end = parse_timecode( parts[1] );
    if end is None:
        raise SubtitleFormatError( f"bad end time in line: {time_line}" );

    return start, end;


def parse_srt( text: str ) -> List[Cue]:
    """
    Parse SubRip text into cues.

    Each block is an optional index line, a timing line and one or more
    text lines ending at a blank line or end of input. Cue text keeps its
    internal line breaks and is not trimmed here.

    Args:
        text: Subtitle document

    Returns:
        Cues in order of appearance

    Raises:
        SubtitleFormatError: On a malformed timing line or when no cues are found
    """
    if text.startswith( "\ufeff" ):
        text = text[1:];

    lines = text.splitlines();
    cues = [];
    pos = 0;

    while pos < len( lines ):
        if not lines[pos].strip():
            pos += 1;
            continue;

        # Index line is optional
        if ARROW not in lines[pos]:
            pos += 1;
            if pos >= len( lines ):
                break;

        time_line = lines[pos].strip();
        pos += 1;
        start_ms, end_ms = _parse_time_line( time_line );

        text_lines = [];
        while pos < len( lines ):
            line = lines[pos];
            pos += 1;
            if not line.strip():
                break;
            text_lines.append( line );

        cues.append( Cue( start_ms=start_ms, end_ms=end_ms, text="\n".join( text_lines ) ) );

    if not cues:
        raise SubtitleFormatError( "no subtitles parsed" );

    get_logger().debug( f"Parsed {len( cues )} subtitle cues" );
    return cues;


def shift_cues( cues: Iterable[Cue], offset_ms: int, drift: float ) -> List[Cue]:
    """
    Apply a linear time transform to cues.

    new_start = start * drift + offset, clamped at zero; the end is clamped
    so it never precedes the new start. Fractional milliseconds are truncated.
    """
    shifted = [];
    for cue in cues:
        start = max( 0.0, cue.start_ms * drift + offset_ms );
        end = max( start, cue.end_ms * drift + offset_ms );
        shifted.append( Cue( start_ms=int( start ), end_ms=int( end ), text=cue.text ) );
    return shifted;


def rewrite_srt( cues: Sequence[Cue], offset_ms: int = 0, drift: float = 1.0 ) -> str:
    """
    Serialize cues as SubRip text after shifting them.

    Blocks are renumbered from 1 and cue text is trimmed.
    """
    blocks = [];
    for index, cue in enumerate( shift_cues( cues, offset_ms, drift ), start=1 ):
        blocks.append(
            f"{index}\n"
            f"{format_timecode( cue.start_ms )} {ARROW} {format_timecode( cue.end_ms )}\n"
            f"{cue.text.strip()}\n\n"
        );
    return "".join( blocks ).rstrip();
