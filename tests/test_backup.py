"""
Test cases for subtitle backups.
"""
import pytest

from masksync.backup import BackupManager, create_backup


class TestBackupManager:
    """Test cases for BackupManager."""

    def test_create_backup_copies_file( self, tmp_path ):
        original = tmp_path / "episode.srt";
        original.write_text( "1\n00:00:01,000 --> 00:00:02,000\nHi\n", encoding="utf-8" );

        backup_path = create_backup( original, tmp_path / "backup" );

        assert backup_path.parent == tmp_path / "backup";
        assert backup_path.name.startswith( "episode." );
        assert backup_path.suffix == ".srt";
        assert backup_path.read_text( encoding="utf-8" ) == original.read_text( encoding="utf-8" );

    def test_missing_file_fails( self, tmp_path ):
        with pytest.raises( FileNotFoundError ):
            BackupManager( tmp_path ).create_backup( tmp_path / "missing.srt" );

    def test_existing_backups_sorted_oldest_first( self, tmp_path ):
        original = tmp_path / "movie.srt";
        for stamp in ( "2024-05-02T10-00-00", "2023-01-01T00-00-00", "bad-stamp" ):
            ( tmp_path / f"movie.{stamp}.srt" ).write_text( "x" );

        backups = BackupManager( tmp_path ).get_existing_backups( original );

        assert [ path.name for path, _ in backups ] == [
            "movie.2023-01-01T00-00-00.srt",
            "movie.2024-05-02T10-00-00.srt",
        ];

    def test_retention_removes_oldest( self, tmp_path ):
        original = tmp_path / "movie.srt";
        original.write_text( "x" );
        backup_dir = tmp_path / "backup";
        backup_dir.mkdir();
        for day in range( 1, 6 ):
            ( backup_dir / f"movie.2024-01-0{day}T00-00-00.srt" ).write_text( "x" );

        manager = BackupManager( backup_dir );
        manager.max_small_files = 2;
        manager.apply_retention_policy( original );

        remaining = sorted( path.name for path in backup_dir.iterdir() );
        assert remaining == [ "movie.2024-01-04T00-00-00.srt", "movie.2024-01-05T00-00-00.srt" ];
