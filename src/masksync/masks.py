"""
Activity masks on a shared frame grid: energy-gated audio and subtitle timelines.
"""
import math
from typing import Sequence

import numpy as np

from .subtitles import Cue


MIN_FRAME_RATE_HZ = 8000;


def frame_energies( samples, sample_rate_hz: int, frame_ms: int ) -> np.ndarray:
    """
    Mean squared sample value per frame.

    The rate is floored to 8kHz for the frame arithmetic only. The final
    frame may be partial and is averaged over its actual length.
    """
    pcm = np.asarray( samples, dtype=np.float64 ).ravel();
    rate = max( int( sample_rate_hz ), MIN_FRAME_RATE_HZ );
    frame_width = max( 1, ( rate * int( frame_ms ) ) // 1000 );

    total_frames = -( -len( pcm ) // frame_width );
    if total_frames == 0:
        return np.zeros( 0, dtype=np.float64 );

    padded = np.zeros( total_frames * frame_width, dtype=np.float64 );
    padded[:len( pcm )] = pcm * pcm;

    counts = np.full( total_frames, frame_width, dtype=np.float64 );
    counts[-1] = len( pcm ) - ( total_frames - 1 ) * frame_width;

    return padded.reshape( total_frames, frame_width ).sum( axis=1 ) / counts;


def energy_threshold( energies: np.ndarray, vad_aggressiveness: int ) -> float:
    """Adaptive gate level derived from the energy distribution."""
    if len( energies ) == 0:
        return 0.0;

    mean_energy = float( energies.mean() );
    max_energy = float( energies.max() );
    min_energy = float( energies.min() );

    aggr = min( max( int( vad_aggressiveness ), 0 ), 3 );
    base = min_energy + abs( mean_energy - min_energy ) * ( 0.3 + 0.1 * aggr );

    if max_energy > 0:
        return max( base, max_energy * ( 0.04 + 0.02 * aggr ) );
    return 0.0;


def build_audio_mask( samples, sample_rate_hz: int, frame_ms: int, vad_aggressiveness: int = 2 ) -> np.ndarray:
    """
    Energy-gate voice activity mask.

    Args:
        samples: int16 PCM samples
        sample_rate_hz: Rate of the samples
        frame_ms: Frame width in milliseconds
        vad_aggressiveness: Gate level 0..3 (clamped)

    Returns:
        float64 mask, 1.0 where frame energy reaches the threshold
    """
    energies = frame_energies( samples, sample_rate_hz, frame_ms );
    threshold = energy_threshold( energies, vad_aggressiveness );

    # A zero threshold only happens for pure digital silence
    if threshold <= 0:
        return np.zeros( len( energies ), dtype=np.float64 );
    return ( energies >= threshold ).astype( np.float64 );


def build_subtitle_mask( cues: Sequence[Cue], frame_ms: int ) -> np.ndarray:
    """
    Mask covering every frame touched by a cue.

    The mask spans the latest cue end (at least one frame). Overlapping
    cues simply leave the frame at 1.0.
    """
    frame_ms = int( frame_ms );
    max_end = max( [ 0 ] + [ cue.end_ms for cue in cues ] );
    total_frames = max( 1, -( -max_end // frame_ms ) );

    mask = np.zeros( total_frames, dtype=np.float64 );
    for cue in cues:
        start_frame = max( 0, cue.start_ms // frame_ms );
        end_frame = max( -( -cue.end_ms // frame_ms ), cue.start_ms // frame_ms );
        end_frame = min( end_frame, total_frames );
        if end_frame > start_frame:
            mask[start_frame:end_frame] = 1.0;
    return mask;


def resample_mask( mask: np.ndarray, ratio: float ) -> np.ndarray:
    """
    Stretch a mask by a speed ratio using linear interpolation.

    Output sample i reads source position i / ratio, blending its floor and
    ceil neighbours. Reads past the end of the source count as 0.0.
    """
    mask = np.asarray( mask, dtype=np.float64 );
    if ratio <= 0 or len( mask ) == 0:
        return mask.copy();

    new_len = max( 1, math.ceil( len( mask ) * ratio ) );
    positions = np.arange( new_len, dtype=np.float64 ) / ratio;
    lower = np.floor( positions ).astype( np.int64 );
    frac = positions - lower;

    padded = np.concatenate( [ mask, np.zeros( 2, dtype=np.float64 ) ] );
    lower = np.minimum( lower, len( mask ) );
    upper = np.minimum( lower + 1, len( mask ) );

    return padded[lower] * ( 1.0 - frac ) + padded[upper] * frac;
