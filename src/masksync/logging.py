"""
Logging system for MaskSync with Rich console output and optional rotating log file.
"""
import logging
import shutil
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional
from rich.console import Console
from rich.logging import RichHandler


MAX_LOG_BYTES = 5 * 1024 * 1024;  # 5MB


class MaskSyncLogger:
    """
    Logger wrapper for MaskSync.

    The engine logs through this wrapper but stays silent until a host
    calls configure() (the CLI does this through setup_logging):
    - Rich console output with colors
    - Optional file logging with 5MB rotation
    - INFO default, DEBUG with --debug flag
    """

    def __init__( self, name: str = "masksync", debug: bool = False ):
        self.name = name;
        self.debug_enabled = debug;
        self.console = None;
        self.log_file = None;

        self.logger = logging.getLogger( self.name );
        if not self.logger.handlers:
            self.logger.addHandler( logging.NullHandler() );

    def configure( self, debug: bool = False, log_file: Optional[Path] = None ):
        """Attach Rich console and optional file handlers."""
        self.debug_enabled = debug;
        self.console = Console( stderr=True );

        logger = self.logger;
        logger.setLevel( logging.DEBUG if debug else logging.INFO );

        # Clear existing handlers
        for handler in list( logger.handlers ):
            logger.removeHandler( handler );
            handler.close();

        console_handler = RichHandler(
            console=self.console,
            rich_tracebacks=True,
            show_time=True,
            show_path=debug
        );
        console_handler.setLevel( logging.DEBUG if debug else logging.INFO );
        console_handler.setFormatter( logging.Formatter( "%(message)s" ) );
        logger.addHandler( console_handler );

        if log_file is not None:
            self.log_file = Path( log_file );
            self.log_file.parent.mkdir( parents=True, exist_ok=True );
            self._check_and_rotate_on_startup();

            file_handler = RotatingFileHandler(
                self.log_file,
                maxBytes=MAX_LOG_BYTES,
                backupCount=5
            );
            file_handler.setLevel( logging.DEBUG );
            file_handler.setFormatter( logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            ) );
            logger.addHandler( file_handler );

        return self;

    def _check_and_rotate_on_startup( self ):
        """Move an existing log file aside if it is already over 5MB."""
        if self.log_file.exists() and self.log_file.stat().st_size > MAX_LOG_BYTES:
            timestamp = datetime.now().isoformat().replace( ":", "-" );
            backup_name = self.log_file.with_name( f"{self.log_file.stem}.{timestamp}{self.log_file.suffix}" );
            shutil.move( str( self.log_file ), str( backup_name ) );

    def debug( self, message, **kwargs ):
        """Log debug message."""
        self.logger.debug( message, **kwargs );

    def info( self, message, **kwargs ):
        """Log info message."""
        self.logger.info( message, **kwargs );

    def warning( self, message, **kwargs ):
        """Log warning message."""
        self.logger.warning( message, **kwargs );

    def error( self, message, **kwargs ):
        """Log error message."""
        self.logger.error( message, **kwargs );

    def critical( self, message, **kwargs ):
        """Log critical message."""
        self.logger.critical( message, **kwargs );


# Global logger instance
_logger = None;


def get_logger( debug: bool = False ) -> MaskSyncLogger:
    """Get the global MaskSync logger instance."""
    global _logger;
    if _logger is None:
        _logger = MaskSyncLogger( debug=debug );
    return _logger;


def setup_logging( debug: bool = False, log_file: Optional[Path] = None ) -> MaskSyncLogger:
    """Setup console (and optional file) logging for the application."""
    return get_logger( debug=debug ).configure( debug=debug, log_file=log_file );
