"""
Test cases for audio and subtitle activity masks.
"""
import numpy as np
import pytest

from masksync.masks import build_audio_mask, build_subtitle_mask, energy_threshold, frame_energies, resample_mask
from masksync.subtitles import Cue


def constant_frames( amplitudes, width=8 ):
    """int16 samples where each frame holds one constant amplitude."""
    return np.repeat( np.asarray( amplitudes, dtype=np.int16 ), width );


class TestAudioMask:
    """Test cases for the energy-gate audio mask."""

    def test_silence_gives_empty_mask( self ):
        mask = build_audio_mask( np.zeros( 16000, dtype=np.int16 ), 16000, 10, 2 );

        assert len( mask ) == 100;
        assert not mask.any();

    def test_frame_count_includes_partial_frame( self ):
        energies = frame_energies( [ 0 ] * 16 + [ 100 ] * 4, 8000, 1 );

        assert len( energies ) == 3;
        assert energies[2] == pytest.approx( 10000.0 );

    def test_low_sample_rate_is_floored( self ):
        """Test frame width uses at least 8kHz."""
        energies = frame_energies( [ 1 ] * 16, 4000, 1 );
        assert len( energies ) == 2;

    def test_threshold_formula( self ):
        energies = np.array( [ 0.0, 1e4, 1e6, 100.0 ] );
        mean = energies.mean();

        assert energy_threshold( energies, 2 ) == pytest.approx( mean * 0.5 );
        assert energy_threshold( energies, 0 ) == pytest.approx( mean * 0.3 );
        assert energy_threshold( np.zeros( 4 ), 2 ) == 0.0;

    def test_max_based_floor_wins_for_flat_energy( self ):
        energies = np.array( [ 100.0, 100.0, 100.0, 100.0 ] );
        # base = min = 100, max * 0.08 = 8
        assert energy_threshold( energies, 2 ) == pytest.approx( 100.0 );

    def test_aggressiveness_changes_gate( self ):
        samples = constant_frames( [ 0, 350, 1000 ] );

        assert build_audio_mask( samples, 8000, 1, 0 ).tolist() == [ 0.0, 1.0, 1.0 ];
        assert build_audio_mask( samples, 8000, 1, 3 ).tolist() == [ 0.0, 0.0, 1.0 ];

    def test_aggressiveness_is_clamped( self ):
        samples = constant_frames( [ 0, 350, 1000 ] );

        assert build_audio_mask( samples, 8000, 1, -5 ).tolist() == build_audio_mask( samples, 8000, 1, 0 ).tolist();
        assert build_audio_mask( samples, 8000, 1, 9 ).tolist() == build_audio_mask( samples, 8000, 1, 3 ).tolist();

    def test_speech_bursts_detected( self, speech_samples ):
        mask = build_audio_mask( speech_samples, 16000, 10, 2 );

        assert len( mask ) == 3000;
        assert mask[100:250].all();
        assert not mask[0:100].any();
        assert not mask[250:400].any();


class TestSubtitleMask:
    """Test cases for the subtitle timeline mask."""

    def test_length_covers_latest_end( self ):
        mask = build_subtitle_mask( [ Cue( 0, 25, "a" ) ], 10 );
        assert mask.tolist() == [ 1.0, 1.0, 1.0 ];

    def test_partial_frames_marked( self ):
        mask = build_subtitle_mask( [ Cue( 15, 20, "a" ), Cue( 40, 41, "b" ) ], 10 );
        assert mask.tolist() == [ 0.0, 1.0, 0.0, 0.0, 1.0 ];

    def test_overlapping_cues_do_not_accumulate( self ):
        mask = build_subtitle_mask( [ Cue( 0, 50, "a" ), Cue( 20, 40, "b" ) ], 10 );
        assert mask.max() == 1.0;
        assert mask.tolist() == [ 1.0 ] * 5;

    def test_minimum_one_frame( self ):
        mask = build_subtitle_mask( [ Cue( 0, 0, "empty" ) ], 10 );
        assert mask.tolist() == [ 0.0 ];

    def test_unordered_cues( self ):
        mask = build_subtitle_mask( [ Cue( 80, 100, "late" ), Cue( 0, 10, "early" ) ], 10 );
        assert mask.tolist() == [ 1.0, 0, 0, 0, 0, 0, 0, 0, 1.0, 1.0 ];


class TestResampleMask:
    """Test cases for drift resampling."""

    def test_stretch_interpolates( self ):
        out = resample_mask( np.array( [ 1.0, 0.0 ] ), 2.0 );
        assert out.tolist() == pytest.approx( [ 1.0, 0.5, 0.0, 0.0 ] );

    def test_reads_past_end_are_zero( self ):
        out = resample_mask( np.array( [ 1.0, 1.0 ] ), 2.0 );
        assert out.tolist() == pytest.approx( [ 1.0, 1.0, 1.0, 0.5 ] );

    def test_new_length_rounds_up( self ):
        assert len( resample_mask( np.ones( 1000 ), 0.75 ) ) == 750;
        assert len( resample_mask( np.ones( 101 ), 1.5 ) ) == 152;

    def test_unit_ratio_is_identity( self ):
        mask = np.array( [ 0.0, 1.0, 1.0, 0.0 ] );
        assert resample_mask( mask, 1.0 ).tolist() == mask.tolist();

    def test_invalid_ratio_returns_copy( self ):
        mask = np.array( [ 0.0, 1.0 ] );
        out = resample_mask( mask, 0.0 );

        assert out.tolist() == mask.tolist();
        assert out is not mask;

    def test_values_stay_in_unit_range( self ):
        rng = np.random.default_rng( 7 );
        mask = ( rng.random( 500 ) > 0.5 ).astype( np.float64 );
        out = resample_mask( mask, 1.03 );

        assert out.min() >= 0.0;
        assert out.max() <= 1.0;
