"""
Cross-correlation of activity masks to find the subtitle offset.
"""
import math
from dataclasses import dataclass

import numpy as np

from .errors import AlignmentError
from .logging import get_logger


# Above this many multiply-adds the FFT path is used
DIRECT_CORRELATION_LIMIT = 1 << 20;

# FFT results are snapped to a power-of-two grid this far below the peak
_SNAP_RELATIVE = 1e-9;


@dataclass
class CorrelationResult:
    """Best lag found for one pair of masks."""

    offset_ms: int;     # Shift to apply to the subtitles (negative = earlier)
    score: float;       # Confidence-style score in [0, 1]
    lag_frames: int;    # Winning lag on the frame grid
    peak: float;        # Normalized correlation at the winning lag

    def __repr__( self ):
        return f"CorrelationResult(offset={self.offset_ms}ms, score={self.score:.3f})";


def next_power_of_two( n: int ) -> int:
    return 1 if n <= 1 else 1 << ( n - 1 ).bit_length();


def _snap( values: np.ndarray ) -> np.ndarray:
    """
    Round away FFT noise relative to the largest magnitude.

    The grid step is a power of two, so integer-valued correlations (binary
    masks) land back on exact integers and ties match the direct method.
    """
    scale = float( np.max( np.abs( values ) ) ) if len( values ) else 0.0;
    if scale == 0.0:
        return values;

    step = 2.0 ** math.ceil( math.log2( scale * _SNAP_RELATIVE ) );
    return np.round( values / step ) * step;


def full_cross_correlation( audio: np.ndarray, subs: np.ndarray, method: str = "auto" ) -> np.ndarray:
    """
    Full linear cross-correlation c[lag] = sum_n audio[n + lag] * subs[n].

    The result has len(audio) + len(subs) - 1 entries with zero lag at
    index len(subs) - 1. The FFT and direct methods agree up to rounding.
    """
    len_a = len( audio );
    len_b = len( subs );

    if method == "auto":
        method = "direct" if len_a * len_b <= DIRECT_CORRELATION_LIMIT else "fft";

    if method == "direct":
        return np.correlate( audio, subs, mode="full" );
    if method != "fft":
        raise ValueError( f"Unknown correlation method: {method}" );

    conv_len = len_a + len_b - 1;
    fft_len = next_power_of_two( conv_len );

    spectrum_a = np.fft.rfft( audio, n=fft_len );
    spectrum_b = np.fft.rfft( subs, n=fft_len );

    # irfft applies the 1/fft_len scaling
    circular = np.fft.irfft( spectrum_a * np.conj( spectrum_b ), n=fft_len );

    # Circular index k holds lag k; negative lags wrap to the end
    lags = np.arange( -( len_b - 1 ), len_a );
    return _snap( circular[lags % fft_len] );


def correlate_masks(
    audio_mask: np.ndarray,
    subtitle_mask: np.ndarray,
    frame_ms: int,
    max_offset_ms: int,
    method: str = "auto"
) -> CorrelationResult:
    """
    Find the lag that best lines the subtitle mask up with the audio mask.

    Correlation values are normalized by the shorter mask length and only
    lags within max_offset_ms are considered. Ties go to the earliest lag.
    The score mixes the peak relative to subtitle activity with the gap to
    the runner-up.

    Args:
        audio_mask: Audio activity mask
        subtitle_mask: Subtitle activity mask on the same grid
        frame_ms: Grid width in milliseconds
        max_offset_ms: Search radius in milliseconds
        method: "auto", "fft" or "direct"

    Returns:
        CorrelationResult with the offset to apply to the subtitles

    Raises:
        AlignmentError: If either mask is empty
    """
    audio = np.asarray( audio_mask, dtype=np.float64 );
    subs = np.asarray( subtitle_mask, dtype=np.float64 );

    if len( audio ) == 0 or len( subs ) == 0:
        raise AlignmentError( "empty masks" );

    corr = full_cross_correlation( audio, subs, method=method );
    corr = corr / max( 1, min( len( audio ), len( subs ) ) );

    max_offset_frames = math.ceil( max_offset_ms / frame_ms );
    base = len( subs ) - 1;

    best_score = float( "-inf" );
    second_best = float( "-inf" );
    best_idx = base;

    low = max( 0, base - max_offset_frames );
    high = min( len( corr ), base + max_offset_frames + 1 );
    for i in range( low, high ):
        value = float( corr[i] );
        if value > best_score:
            second_best = best_score;
            best_score = value;
            best_idx = i;
        elif value > second_best:
            second_best = value;

    lag_frames = best_idx - base;
    offset_ms = int( lag_frames * frame_ms );

    if not math.isfinite( best_score ):
        score = 0.0;
    else:
        gap = best_score - max( second_best, -1.0 );
        normalized = abs( best_score / max( float( subs.sum() ), 1.0 ) );
        score = min( 1.0, 0.6 * normalized + 0.4 * abs( gap ) );

    get_logger().debug( f"Correlation peak at lag {lag_frames} ({offset_ms}ms), score={score:.4f}" );

    return CorrelationResult(
        offset_ms=offset_ms,
        score=score,
        lag_frames=lag_frames,
        peak=best_score
    );
