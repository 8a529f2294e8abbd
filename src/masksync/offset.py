"""
Offset and drift search over candidate subtitle speed ratios.
"""
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

import numpy as np

from .align import correlate_masks
from .errors import AlignmentError, InvalidInputError
from .logging import get_logger
from .masks import resample_mask


COARSE_RATIOS: Tuple[float, ...] = ( 0.97, 0.985, 1.0, 1.015, 1.03 );
REFINE_STEP = 0.005;
MIN_RATIO = 0.95;
MAX_RATIO = 1.05;


@dataclass
class AlignmentCandidate:
    """Offset/drift pair with its correlation score."""

    offset_ms: int;
    drift: float;
    score: float;

    def __repr__( self ):
        return f"AlignmentCandidate(offset={self.offset_ms}ms, drift={self.drift:.4f}, score={self.score:.3f})";


class DriftSearch:
    """
    Search for the subtitle offset and, optionally, a linear speed ratio.

    Coarse pass over a fixed ratio grid, then a local probe of +/- one
    refinement step around the winner. Scores are compared with strict
    greater-than, so the first candidate evaluated wins ties.
    """

    def __init__(
        self,
        frame_ms: int,
        max_offset_ms: int,
        use_drift_search: bool = False,
        coarse_ratios: Iterable[float] = COARSE_RATIOS
    ):
        self.logger = get_logger();
        self.frame_ms = frame_ms;
        self.max_offset_ms = max_offset_ms;
        self.use_drift_search = use_drift_search;
        self.coarse_ratios = tuple( coarse_ratios );

        if not self.coarse_ratios:
            raise InvalidInputError( "at least one drift ratio is required" );

    def evaluate( self, audio_mask: np.ndarray, subtitle_mask: np.ndarray, ratio: float ) -> AlignmentCandidate:
        """Correlate the audio with the subtitle mask stretched by ratio."""
        if abs( ratio - 1.0 ) < 1e-4:
            stretched = subtitle_mask;
        else:
            stretched = resample_mask( subtitle_mask, ratio );

        result = correlate_masks( audio_mask, stretched, self.frame_ms, self.max_offset_ms );
        self.logger.debug( f"Ratio {ratio:.4f}: offset={result.offset_ms}ms, score={result.score:.4f}" );
        return AlignmentCandidate( offset_ms=result.offset_ms, drift=ratio, score=result.score );

    def refinement_ratios( self, ratio: float ) -> Tuple[float, float, float]:
        low = max( ratio - REFINE_STEP, MIN_RATIO );
        high = min( ratio + REFINE_STEP, MAX_RATIO );
        return ( low, ratio, high );

    def search( self, audio_mask: np.ndarray, subtitle_mask: np.ndarray ) -> AlignmentCandidate:
        """
        Run the search and return the winning candidate.

        The returned score is clamped to [0, 1] and serves as the confidence.

        Raises:
            AlignmentError: If either mask is empty
        """
        if len( audio_mask ) == 0 or len( subtitle_mask ) == 0:
            raise AlignmentError( "empty masks" );

        ratios = self.coarse_ratios if self.use_drift_search else ( 1.0, );

        best: Optional[AlignmentCandidate] = None;
        for ratio in ratios:
            candidate = self.evaluate( audio_mask, subtitle_mask, ratio );
            if best is None or candidate.score > best.score:
                best = candidate;

        if self.use_drift_search:
            for ratio in self.refinement_ratios( best.drift ):
                candidate = self.evaluate( audio_mask, subtitle_mask, ratio );
                if candidate.score > best.score:
                    best = candidate;

        confidence = min( max( best.score, 0.0 ), 1.0 );
        self.logger.info( f"Best alignment: offset={best.offset_ms}ms, drift={best.drift:.4f}, confidence={confidence:.3f}" );
        return AlignmentCandidate( offset_ms=best.offset_ms, drift=best.drift, score=confidence );


def search_alignment(
    audio_mask: np.ndarray,
    subtitle_mask: np.ndarray,
    frame_ms: int,
    max_offset_ms: int,
    use_drift_search: bool = False
) -> AlignmentCandidate:
    """Convenience wrapper around DriftSearch.search."""
    return DriftSearch( frame_ms, max_offset_ms, use_drift_search ).search( audio_mask, subtitle_mask );
