"""
Alignment configuration with tolerant loading from host options and environment.
"""
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Optional

from .logging import get_logger


MIN_MAX_OFFSET_MS = 1000;

# Host-side option names mapped onto config fields
_ALIASES = {
    "frameMs": "frame_ms",
    "maxOffsetMs": "max_offset_ms",
    "gss": "use_drift_search",
    "useDriftSearch": "use_drift_search",
    "drift": "use_drift_search",
    "sampleRate": "sample_rate_hz",
    "sampleRateHz": "sample_rate_hz",
    "sample_rate": "sample_rate_hz",
    "vadAggressiveness": "vad_aggressiveness",
    "vad_aggr": "vad_aggressiveness",
};

_ENV_VARS = {
    "MASKSYNC_FRAME_MS": "frame_ms",
    "MASKSYNC_MAX_OFFSET_MS": "max_offset_ms",
    "MASKSYNC_DRIFT_SEARCH": "use_drift_search",
    "MASKSYNC_SAMPLE_RATE": "sample_rate_hz",
    "MASKSYNC_VAD_AGGRESSIVENESS": "vad_aggressiveness",
};

_TRUE_STRINGS = { "1", "true", "yes", "on" };
_FALSE_STRINGS = { "0", "false", "no", "off", "" };


@dataclass( frozen=True )
class AlignmentConfig:
    """Options for a single alignment call. Never mutated during the call."""

    frame_ms: int = 10;                 # Mask grid width
    max_offset_ms: int = 60000;         # Offset search radius
    use_drift_search: bool = False;     # Evaluate speed ratios besides 1.0
    sample_rate_hz: int = 16000;        # Rate of the incoming PCM
    vad_aggressiveness: int = 2;        # Energy gate level 0..3

    @property
    def effective_max_offset_ms( self ) -> int:
        """Search radius with the 1 second floor applied."""
        return max( self.max_offset_ms, MIN_MAX_OFFSET_MS );

    @classmethod
    def from_mapping( cls, options: Optional[Mapping[str, Any]] ) -> "AlignmentConfig":
        """
        Build a config from host options.

        Unknown keys are ignored; values that do not parse (or are outside
        their domain) fall back to the field default instead of failing.
        """
        if not options:
            return cls();

        logger = get_logger();
        defaults = cls();
        values = {};

        for key, raw in options.items():
            name = _ALIASES.get( key, key );
            if name not in _FIELD_PARSERS:
                logger.debug( f"Ignoring unknown option '{key}'" );
                continue;

            parsed = _FIELD_PARSERS[name]( raw );
            if parsed is None:
                logger.debug( f"Option '{key}'={raw!r} is invalid, using default {getattr( defaults, name )!r}" );
                continue;
            values[name] = parsed;

        return replace( defaults, **values );

    @classmethod
    def from_env( cls, environ: Optional[Mapping[str, str]] = None ) -> "AlignmentConfig":
        """Build a config from MASKSYNC_* environment variables."""
        environ = os.environ if environ is None else environ;
        options = { field: environ[var] for var, field in _ENV_VARS.items() if var in environ };
        return cls.from_mapping( options );

    @classmethod
    def coerce( cls, value: Any ) -> "AlignmentConfig":
        """Accept a config, a mapping of options, or None. Every field is re-validated."""
        if isinstance( value, cls ):
            return cls.from_mapping( value.as_dict() );
        if value is None:
            return cls();
        if isinstance( value, Mapping ):
            return cls.from_mapping( value );

        get_logger().debug( f"Unsupported config type {type( value ).__name__}, using defaults" );
        return cls();

    def with_overrides( self, **overrides ) -> "AlignmentConfig":
        """Return a copy with the given non-None fields replaced."""
        values = { key: value for key, value in overrides.items() if value is not None };
        return self.from_mapping( { **self.as_dict(), **values } );

    def as_dict( self ) -> dict:
        return { f.name: getattr( self, f.name ) for f in fields( self ) };


def _parse_int( raw: Any ) -> Optional[int]:
    if isinstance( raw, bool ):
        return None;
    try:
        if isinstance( raw, float ):
            if raw != raw or raw in ( float( "inf" ), float( "-inf" ) ):
                return None;
            return int( raw );
        return int( str( raw ).strip() );
    except ( TypeError, ValueError ):
        return None;


def _parse_positive_int( raw: Any ) -> Optional[int]:
    value = _parse_int( raw );
    return value if value is not None and value > 0 else None;


def _parse_non_negative_int( raw: Any ) -> Optional[int]:
    value = _parse_int( raw );
    return value if value is not None and value >= 0 else None;


def _parse_aggressiveness( raw: Any ) -> Optional[int]:
    value = _parse_int( raw );
    return value if value is not None and 0 <= value <= 3 else None;


def _parse_bool( raw: Any ) -> Optional[bool]:
    if isinstance( raw, bool ):
        return raw;
    if isinstance( raw, int ):
        return raw != 0;
    if isinstance( raw, str ):
        text = raw.strip().lower();
        if text in _TRUE_STRINGS:
            return True;
        if text in _FALSE_STRINGS:
            return False;
    return None;


_FIELD_PARSERS = {
    "frame_ms": _parse_positive_int,
    "max_offset_ms": _parse_non_negative_int,
    "use_drift_search": _parse_bool,
    "sample_rate_hz": _parse_positive_int,
    "vad_aggressiveness": _parse_aggressiveness,
};
