"""
PCM source decoding for RIFF/WAVE containers holding 16-bit mono linear PCM.
"""
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np

from .errors import ContainerFormatError
from .logging import get_logger


MIN_HEADER_SIZE = 44;       # Canonical RIFF + fmt + data header
WAVE_FORMAT_PCM = 1;


@dataclass( frozen=True )
class DecodedAudio:
    """Samples and rate recovered from a PCM container."""

    samples: np.ndarray;    # int16, little-endian source order
    sample_rate_hz: int;

    @property
    def duration_seconds( self ) -> float:
        return len( self.samples ) / self.sample_rate_hz;

    def __repr__( self ):
        return f"DecodedAudio(samples={len( self.samples )}, rate={self.sample_rate_hz}Hz)";


@dataclass
class _FormatChunk:
    audio_format: int;
    channels: int;
    sample_rate: int;
    bits_per_sample: int;


def decode_wav( buffer: bytes ) -> DecodedAudio:
    """
    Decode a RIFF/WAVE byte buffer into int16 samples.

    Chunks are scanned in file order; the fmt and data chunks may appear in
    either order. Only uncompressed 16-bit mono PCM is accepted.

    Args:
        buffer: Complete container bytes

    Returns:
        DecodedAudio with the samples and the declared sample rate

    Raises:
        ContainerFormatError: On any malformed or unsupported container
    """
    buffer = bytes( buffer );

    if len( buffer ) < MIN_HEADER_SIZE:
        raise ContainerFormatError( "buffer too small" );

    if buffer[0:4] != b"RIFF" or buffer[8:12] != b"WAVE":
        raise ContainerFormatError( "missing RIFF/WAVE header" );

    fmt_chunk: Optional[_FormatChunk] = None;
    data_offset = None;
    data_size = None;

    idx = 12;
    while idx + 8 <= len( buffer ):
        chunk_id = buffer[idx:idx + 4];
        chunk_size = struct.unpack_from( "<I", buffer, idx + 4 )[0];
        chunk_start = idx + 8;

        if chunk_start + chunk_size > len( buffer ):
            name = chunk_id.decode( "latin-1" ).strip() or "unnamed";
            raise ContainerFormatError( f"{name} chunk truncated" );

        if chunk_id == b"fmt ":
            fmt_chunk = _read_format_chunk( buffer, chunk_start, chunk_size );
        elif chunk_id == b"data":
            data_offset = chunk_start;
            data_size = chunk_size;

        # RIFF chunks are word aligned
        idx = chunk_start + chunk_size + ( chunk_size & 1 );

    if data_offset is None:
        raise ContainerFormatError( "missing data chunk" );
    if fmt_chunk is None:
        raise ContainerFormatError( "missing fmt chunk" );

    if fmt_chunk.audio_format != WAVE_FORMAT_PCM:
        raise ContainerFormatError( "only PCM is supported" );
    if fmt_chunk.bits_per_sample != 16:
        raise ContainerFormatError( "only 16-bit PCM supported" );
    if fmt_chunk.channels != 1:
        raise ContainerFormatError( "only mono audio supported" );
    if fmt_chunk.sample_rate == 0:
        raise ContainerFormatError( "invalid sample rate" );

    sample_count = data_size // 2;
    if sample_count:
        samples = np.frombuffer( buffer, dtype="<i2", count=sample_count, offset=data_offset ).astype( np.int16 );
    else:
        samples = np.zeros( 0, dtype=np.int16 );

    get_logger().debug( f"Decoded {sample_count} samples at {fmt_chunk.sample_rate}Hz" );
    return DecodedAudio( samples=samples, sample_rate_hz=fmt_chunk.sample_rate );


def _read_format_chunk( buffer: bytes, start: int, size: int ) -> _FormatChunk:
    if size < 16:
        raise ContainerFormatError( "fmt chunk too small" );

    audio_format, channels, sample_rate, _byte_rate, _block_align, bits_per_sample = struct.unpack_from(
        "<HHIIHH", buffer, start
    );
    return _FormatChunk(
        audio_format=audio_format,
        channels=channels,
        sample_rate=sample_rate,
        bits_per_sample=bits_per_sample
    );


def read_wav_file( wav_file: Path ) -> DecodedAudio:
    """Read a WAV file from disk and decode it."""
    wav_file = Path( wav_file );
    get_logger().info( f"Reading audio file: {wav_file}" );
    return decode_wav( wav_file.read_bytes() );
