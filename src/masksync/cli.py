"""
CLI entry point for MaskSync with argument parsing and environment variable loading.
"""
import argparse
import os
import sys
from pathlib import Path
from dotenv import load_dotenv

from . import __version__
from .config import AlignmentConfig
from .errors import MaskSyncError
from .logging import setup_logging


class MaskSyncCLI:
    """
    Command line interface for MaskSync subtitle synchronization.

    Alignment options left unset on the command line fall back to
    MASKSYNC_* environment variables (a .env file is honoured), then to
    the built-in defaults.
    """

    def __init__( self ):
        self.parser = self._create_parser();
        self.args = None;
        self.logger = None;
        self.config = None;

    def _create_parser( self ):
        """Create argument parser with all MaskSync options."""
        parser = argparse.ArgumentParser(
            prog="masksync",
            description="Re-synchronize SRT subtitles to a WAV track using voice activity correlation",
            epilog="Environment variables: MASKSYNC_FRAME_MS, MASKSYNC_MAX_OFFSET_MS, MASKSYNC_DRIFT_SEARCH, "
                   "MASKSYNC_SAMPLE_RATE, MASKSYNC_VAD_AGGRESSIVENESS"
        );

        parser.add_argument(
            "--audio", "--wav", "-a",
            required=True,
            type=Path,
            dest="audio",
            help="Path to 16-bit mono PCM WAV file"
        );

        parser.add_argument(
            "--sub", "--subs", "--srt", "--subtitle", "-s",
            required=True,
            type=Path,
            dest="subtitle",
            help="Path to subtitle file (.srt format only)"
        );

        parser.add_argument(
            "--output", "-o",
            type=Path,
            default=None,
            help="Output path (default: <subtitle>.synced.srt)"
        );

        parser.add_argument(
            "--in-place",
            action="store_true",
            help="Overwrite the subtitle file after backing it up"
        );

        parser.add_argument(
            "--backup-dir",
            type=Path,
            default=None,
            help="Directory for backups made by --in-place (default: backup/)"
        );

        # Alignment parameters
        parser.add_argument(
            "--frame-ms",
            type=int,
            default=None,
            help="Mask frame width in milliseconds (default: 10)"
        );

        parser.add_argument(
            "--max-offset-ms",
            type=int,
            default=None,
            help="Maximum offset to search in milliseconds (default: 60000, minimum 1000)"
        );

        parser.add_argument(
            "--drift",
            action="store_true",
            default=None,
            help="Also search for a linear speed mismatch"
        );

        parser.add_argument(
            "--vad-aggressiveness",
            type=int,
            default=None,
            help="Voice activity gate level 0-3 (default: 2)"
        );

        # Mode flags
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Perform analysis without writing any file"
        );

        parser.add_argument(
            "--debug",
            action="store_true",
            help="Enable debug mode with verbose output"
        );

        parser.add_argument(
            "--log-file",
            type=Path,
            default=None,
            help="Also write logs to this file (rotated at 5MB)"
        );

        parser.add_argument(
            "--version",
            action="version",
            version=f"%(prog)s {__version__}"
        );

        return parser;

    def _load_environment( self ):
        """Load alignment defaults from .env and the process environment."""
        env_file = Path( ".env" );
        if env_file.exists():
            load_dotenv( env_file );

        self.config = AlignmentConfig.from_env( os.environ );

    def _validate_arguments( self ):
        """Validate parsed arguments."""
        errors = [];

        if not self.args.audio.exists():
            errors.append( f"Audio file not found: {self.args.audio}" );

        if not self.args.subtitle.exists():
            errors.append( f"Subtitle file not found: {self.args.subtitle}" );

        if self.args.subtitle.suffix.lower() != ".srt":
            errors.append( f"Only .srt subtitle files are supported, got: {self.args.subtitle.suffix}" );

        if self.args.in_place and self.args.output:
            errors.append( "--in-place and --output cannot be combined" );

        if self.args.frame_ms is not None and self.args.frame_ms < 1:
            errors.append( "Frame width must be at least 1 millisecond" );

        if self.args.max_offset_ms is not None and self.args.max_offset_ms < 0:
            errors.append( "Maximum offset cannot be negative" );

        if self.args.vad_aggressiveness is not None and not ( 0 <= self.args.vad_aggressiveness <= 3 ):
            errors.append( "VAD aggressiveness must be between 0 and 3" );

        return errors;

    def build_config( self ) -> AlignmentConfig:
        """Merge command line options over the environment config."""
        return self.config.with_overrides(
            frame_ms=self.args.frame_ms,
            max_offset_ms=self.args.max_offset_ms,
            use_drift_search=self.args.drift,
            vad_aggressiveness=self.args.vad_aggressiveness
        );

    def parse_args( self, argv=None ):
        """Parse command line arguments and validate configuration."""
        self.args = self.parser.parse_args( argv );

        self.logger = setup_logging( debug=self.args.debug, log_file=self.args.log_file );

        self._load_environment();

        errors = self._validate_arguments();
        if errors:
            self.logger.error( "Configuration errors:" );
            for error in errors:
                self.logger.error( f"  - {error}" );
            sys.exit( 1 );

        self.config = self.build_config();

        self.logger.info( f"MaskSync v{__version__} starting..." );
        self.logger.debug( f"Config: {self.config}" );

        return self.args;


def main( argv=None ):
    """Main entry point for the MaskSync CLI."""
    cli = MaskSyncCLI();
    args = cli.parse_args( argv );

    from .sync import SubtitleSynchronizer;

    synchronizer = SubtitleSynchronizer(
        audio_file=args.audio,
        subtitle_file=args.subtitle,
        config=cli.config,
        output_file=args.output,
        in_place=args.in_place,
        dry_run=args.dry_run,
        backup_dir=args.backup_dir,
        debug=args.debug
    );

    try:
        synchronizer.run();
        cli.logger.info( "Subtitle synchronization completed successfully!" );
    except KeyboardInterrupt:
        cli.logger.warning( "Interrupted by user" );
        sys.exit( 130 );
    except MaskSyncError as e:
        cli.logger.error( f"Subtitle synchronization failed: {e}" );
        sys.exit( 1 );
    except OSError as e:
        cli.logger.error( f"File error: {e}" );
        if args.debug:
            raise;
        sys.exit( 1 );


if __name__ == "__main__":
    main();
