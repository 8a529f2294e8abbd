"""
Alignment entry points and the file-level synchronization controller.
"""
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Sequence

from .audio import decode_wav, read_wav_file
from .config import AlignmentConfig
from .errors import InvalidInputError
from .logging import get_logger
from .masks import build_audio_mask, build_subtitle_mask
from .offset import DriftSearch
from .subtitles import parse_srt, rewrite_srt


@dataclass( frozen=True )
class AlignmentResult:
    """Outcome of one alignment call."""

    offset_ms: int;         # Shift applied to the subtitles
    drift: float;           # Speed ratio applied to the subtitles
    confidence: float;      # 0.0-1.0
    segments_used: int;     # Number of parsed cues
    rewritten_text: str;    # Shifted SubRip document

    def __repr__( self ):
        return f"AlignmentResult(offset={self.offset_ms}ms, drift={self.drift:.4f}, " \
               f"confidence={self.confidence:.3f}, segments={self.segments_used})";


def align_from_pcm( samples: Sequence[int], config: Any, subtitle_text: str ) -> AlignmentResult:
    """
    Align subtitles to raw 16-bit PCM samples.

    Args:
        samples: Mono int16 samples at config.sample_rate_hz
        config: AlignmentConfig, mapping of options, or None for defaults
        subtitle_text: SubRip document

    Returns:
        AlignmentResult with the rewritten subtitles

    Raises:
        InvalidInputError: If samples is empty
        SubtitleFormatError: If the subtitles cannot be parsed
        AlignmentError: If a mask ends up empty
    """
    cfg = AlignmentConfig.coerce( config );
    logger = get_logger();

    if samples is None or len( samples ) == 0:
        raise InvalidInputError( "PCM buffer is empty" );
    if not isinstance( subtitle_text, str ):
        raise InvalidInputError( f"subtitle text must be a string, got {type( subtitle_text ).__name__}" );

    audio_mask = build_audio_mask( samples, cfg.sample_rate_hz, cfg.frame_ms, cfg.vad_aggressiveness );
    cues = parse_srt( subtitle_text );
    subtitle_mask = build_subtitle_mask( cues, cfg.frame_ms );

    logger.debug( f"Audio mask: {len( audio_mask )} frames ({int( audio_mask.sum() )} active), " \
                  f"subtitle mask: {len( subtitle_mask )} frames ({int( subtitle_mask.sum() )} active)" );

    search = DriftSearch(
        frame_ms=cfg.frame_ms,
        max_offset_ms=cfg.effective_max_offset_ms,
        use_drift_search=cfg.use_drift_search
    );
    best = search.search( audio_mask, subtitle_mask );

    return AlignmentResult(
        offset_ms=best.offset_ms,
        drift=best.drift,
        confidence=best.score,
        segments_used=len( cues ),
        rewritten_text=rewrite_srt( cues, best.offset_ms, best.drift )
    );


def align_from_container( container_bytes: bytes, config: Any, subtitle_text: str ) -> AlignmentResult:
    """
    Align subtitles to a RIFF/WAVE container.

    The decoded sample rate replaces config.sample_rate_hz.

    Raises:
        ContainerFormatError: If the container is malformed or unsupported
    """
    decoded = decode_wav( container_bytes );
    cfg = AlignmentConfig.coerce( config ).with_overrides( sample_rate_hz=decoded.sample_rate_hz );
    return align_from_pcm( decoded.samples, cfg, subtitle_text );


class SubtitleSynchronizer:
    """
    File-level controller used by the command line host.

    Orchestrates:
    1. WAV decoding
    2. Subtitle reading
    3. Mask alignment
    4. Writing the corrected subtitles (with backup when in place)
    """

    def __init__(
        self,
        audio_file: Path,
        subtitle_file: Path,
        config: Optional[AlignmentConfig] = None,
        output_file: Optional[Path] = None,
        in_place: bool = False,
        dry_run: bool = False,
        backup_dir: Optional[Path] = None,
        debug: bool = False
    ):
        self.audio_file = Path( audio_file );
        self.subtitle_file = Path( subtitle_file );
        self.config = config or AlignmentConfig();
        self.in_place = in_place;
        self.dry_run = dry_run;
        self.backup_dir = backup_dir;
        self.debug = debug;

        if in_place:
            self.output_file = self.subtitle_file;
        elif output_file:
            self.output_file = Path( output_file );
        else:
            self.output_file = self.subtitle_file.with_name( f"{self.subtitle_file.stem}.synced{self.subtitle_file.suffix}" );

        self.logger = get_logger( debug=debug );
        self.result: Optional[AlignmentResult] = None;

    def align( self ) -> AlignmentResult:
        """Decode the audio, read the subtitles and run the alignment."""
        decoded = read_wav_file( self.audio_file );
        self.logger.info( f"Audio: {decoded.duration_seconds:.1f}s at {decoded.sample_rate_hz}Hz" );

        self.logger.info( f"Reading subtitle file: {self.subtitle_file}" );
        subtitle_text = self.subtitle_file.read_text( encoding="utf-8-sig", errors="replace" );

        cfg = self.config.with_overrides( sample_rate_hz=decoded.sample_rate_hz );
        started = time.perf_counter();
        self.result = align_from_pcm( decoded.samples, cfg, subtitle_text );
        elapsed = time.perf_counter() - started;

        self.logger.info( f"Aligned {self.result.segments_used} subtitles in {elapsed:.2f}s" );
        return self.result;

    def write_output( self ) -> Path:
        """Write the rewritten subtitles, backing up the original when overwriting it."""
        if self.result is None:
            raise RuntimeError( "No alignment result. Run align first." );

        if self.dry_run:
            self.logger.info( f"Dry run: Would save synchronized subtitles to {self.output_file}" );
            return self.output_file;

        if self.output_file.exists() and self.output_file.resolve() == self.subtitle_file.resolve():
            from .backup import create_backup;
            create_backup( self.subtitle_file, self.backup_dir );

        self.output_file.write_text( self.result.rewritten_text + "\n", encoding="utf-8" );
        self.logger.info( f"Saved synchronized subtitles: {self.output_file}" );
        return self.output_file;

    def run( self ) -> AlignmentResult:
        """Align and write; engine errors propagate to the caller."""
        self.logger.info( "Starting MaskSync subtitle synchronization" );
        self.logger.info( f"Audio: {self.audio_file}" );
        self.logger.info( f"Subtitles: {self.subtitle_file}" );
        self.logger.info( f"Drift search: {self.config.use_drift_search}" );

        result = self.align();
        self.write_output();
        self._log_final_results( result );
        return result;

    def _log_final_results( self, result: AlignmentResult ):
        self.logger.info( "=== SYNCHRONIZATION COMPLETE ===" );
        self.logger.info( f"✓ Offset: {result.offset_ms / 1000:+.2f}s" );
        self.logger.info( f"✓ Drift: {result.drift:.4f}" );
        self.logger.info( f"✓ Confidence: {result.confidence:.1%}" );
        if result.confidence < 0.1:
            self.logger.warning( "Low confidence alignment; check that the audio and subtitles belong together" );
