"""
Backup utility for subtitle files rewritten in place.
"""
import shutil
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from .logging import get_logger


class BackupManager:
    """
    Keeps ISO-8601 timestamped copies of subtitle files before they are overwritten.

    Retention:
    - Files <150KB: Keep up to 50 copies
    - Files ≥150KB: Keep up to 25 copies
    """

    def __init__( self, backup_dir: Optional[Path] = None ):
        self.logger = get_logger();
        self.backup_dir = Path( backup_dir ) if backup_dir else Path( "backup" );

        self.size_threshold = 150 * 1024;
        self.max_small_files = 50;
        self.max_large_files = 25;

    def get_backup_filename( self, original_file: Path ) -> str:
        """Backup filename with a second-resolution timestamp."""
        timestamp = datetime.now().isoformat().replace( ":", "-" ).split( "." )[0];
        return f"{original_file.stem}.{timestamp}{original_file.suffix}";

    def get_existing_backups( self, original_file: Path ) -> List[Tuple[Path, datetime]]:
        """Existing backups of original_file, oldest first."""
        if not self.backup_dir.exists():
            return [];

        pattern = f"{original_file.stem}.????-??-??T??-??-??{original_file.suffix}";
        backups = [];
        for backup_path in self.backup_dir.glob( pattern ):
            stamp = backup_path.stem[len( original_file.stem ) + 1:];
            date_part, _, time_part = stamp.partition( "T" );
            try:
                timestamp = datetime.fromisoformat( f"{date_part}T{time_part.replace( '-', ':' )}" );
            except ValueError as e:
                self.logger.debug( f"Skipping malformed backup file {backup_path}: {e}" );
                continue;
            backups.append( ( backup_path, timestamp ) );

        backups.sort( key=lambda item: item[1] );
        return backups;

    def apply_retention_policy( self, original_file: Path ):
        """Remove the oldest backups beyond the size-dependent limit."""
        backups = self.get_existing_backups( original_file );
        if not backups:
            return;

        current_size = original_file.stat().st_size if original_file.exists() else 0;
        max_backups = self.max_small_files if current_size < self.size_threshold else self.max_large_files;

        if len( backups ) <= max_backups:
            return;

        removed = 0;
        for backup_path, _ in backups[:-max_backups]:
            try:
                backup_path.unlink();
                removed += 1;
            except OSError as e:
                self.logger.warning( f"Could not remove backup {backup_path}: {e}" );

        if removed:
            self.logger.info( f"Removed {removed} old backup(s) to enforce retention policy" );

    def create_backup( self, file_path: Path ) -> Path:
        """
        Copy file_path into the backup directory and apply retention.

        Raises:
            FileNotFoundError: If file_path does not exist
        """
        file_path = Path( file_path );
        if not file_path.exists():
            raise FileNotFoundError( f"Cannot back up missing file: {file_path}" );

        self.backup_dir.mkdir( parents=True, exist_ok=True );
        backup_path = self.backup_dir / self.get_backup_filename( file_path );
        shutil.copy2( file_path, backup_path );
        self.logger.info( f"Created backup: {backup_path}" );

        self.apply_retention_policy( file_path );
        return backup_path;


def create_backup( file_path: Path, backup_dir: Optional[Path] = None ) -> Path:
    """Create a backup using a BackupManager for backup_dir."""
    return BackupManager( backup_dir ).create_backup( file_path );
