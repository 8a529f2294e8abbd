"""
Shared fixtures for MaskSync tests.
"""
import struct
import sys
from pathlib import Path

import numpy as np
import pytest

# Add src directory to path for testing
sys.path.insert( 0, str( Path( __file__ ).parent.parent / "src" ) );


def build_wav( samples=None, sample_rate=16000, channels=1, bits=16, audio_format=1, extra_chunks=(), fmt_first=True, include_fmt=True, include_data=True ):
    """Assemble a RIFF/WAVE buffer in memory."""
    data = np.asarray( samples if samples is not None else [], dtype="<i2" ).tobytes();
    block_align = channels * bits // 8;
    fmt = struct.pack( "<HHIIHH", audio_format, channels, sample_rate, sample_rate * block_align, block_align, bits );

    chunks = [];
    fmt_chunk = b"fmt " + struct.pack( "<I", len( fmt ) ) + fmt;
    data_chunk = b"data" + struct.pack( "<I", len( data ) ) + data;
    if include_fmt and fmt_first:
        chunks.append( fmt_chunk );
    for chunk_id, payload in extra_chunks:
        pad = b"\x00" if len( payload ) % 2 else b"";
        chunks.append( chunk_id + struct.pack( "<I", len( payload ) ) + payload + pad );
    if include_data:
        chunks.append( data_chunk );
    if include_fmt and not fmt_first:
        chunks.append( fmt_chunk );

    body = b"WAVE" + b"".join( chunks );
    return b"RIFF" + struct.pack( "<I", len( body ) ) + body;


SPEECH_SEGMENTS_MS = [
    ( 1000, 2500 ),
    ( 4000, 5000 ),
    ( 7200, 9000 ),
    ( 12000, 13100 ),
    ( 16500, 18000 ),
    ( 21000, 22400 ),
];


def synth_speech( segments=SPEECH_SEGMENTS_MS, duration_ms=30000, sample_rate=16000, amplitude=8000 ):
    """Square-wave bursts over digital silence."""
    samples = np.zeros( duration_ms * sample_rate // 1000, dtype=np.int16 );
    for start_ms, end_ms in segments:
        start = start_ms * sample_rate // 1000;
        end = end_ms * sample_rate // 1000;
        burst = np.where( np.arange( end - start ) % 2 == 0, amplitude, -amplitude );
        samples[start:end] = burst.astype( np.int16 );
    return samples;


def srt_for_segments( segments, shift_ms=0 ):
    """SubRip text with one cue per segment, shifted by shift_ms."""
    from masksync.subtitles import format_timecode;

    blocks = [];
    for index, ( start_ms, end_ms ) in enumerate( segments, start=1 ):
        blocks.append(
            f"{index}\n{format_timecode( start_ms + shift_ms )} --> {format_timecode( end_ms + shift_ms )}\nLine {index}\n"
        );
    return "\n".join( blocks );


@pytest.fixture
def speech_samples():
    return synth_speech();


@pytest.fixture
def late_subtitles():
    """Subtitles that lag the speech by two seconds."""
    return srt_for_segments( SPEECH_SEGMENTS_MS, shift_ms=2000 );


@pytest.fixture
def wav_builder():
    return build_wav;


@pytest.fixture
def speech_segments():
    return list( SPEECH_SEGMENTS_MS );


@pytest.fixture
def srt_builder():
    return srt_for_segments;


@pytest.fixture
def speech_builder():
    return synth_speech;
