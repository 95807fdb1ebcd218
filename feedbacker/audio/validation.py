"""Duration checks for uploaded recordings.

``validate_duration`` is a pure function over an already-measured
duration; ``probe_duration`` reads it from the container header with
soundfile without decoding the samples. Neither touches the file's
lifecycle: the caller owns removal of the temporary upload.
"""

import logging
import math
from pathlib import Path

import soundfile as sf

from feedbacker.audio.config import AudioConfig
from feedbacker.result import Err, Ok, Result

logger = logging.getLogger(__name__)

ERR_UNREADABLE = "unreadable_duration"
ERR_TOO_SHORT = "too_short"
ERR_TOO_LONG = "too_long"


def probe_duration(path: str | Path) -> float | None:
    """Read the duration in seconds from container metadata.

    Returns None when the format is not recognised or the header is
    damaged.
    """
    try:
        with sf.SoundFile(str(path)) as audio:
            if not audio.samplerate:
                return None
            return audio.frames / float(audio.samplerate)
    except (sf.LibsndfileError, RuntimeError, OSError) as e:
        logger.debug("Cannot probe duration of %s: %s", path, e)
        return None


def validate_duration(
    duration: float | None,
    config: AudioConfig | None = None,
) -> Result[float]:
    """Check a measured duration against the configured bounds.

    Returns:
        Ok(duration_seconds) or Err with a user-facing message.
    """
    config = config or AudioConfig()

    if duration is None or not math.isfinite(duration) or duration <= 0:
        return Err(ERR_UNREADABLE, "Cannot determine audio duration")
    if duration < config.min_seconds:
        return Err(ERR_TOO_SHORT, f"Audio too short (< {config.min_seconds:g} s)")
    if duration > config.max_seconds:
        return Err(ERR_TOO_LONG, f"Audio too long (> {config.max_seconds:g} s)")
    return Ok(round(duration, 3))


def validate_file(path: str | Path, config: AudioConfig | None = None) -> Result[float]:
    """Probe and validate a local recording."""
    return validate_duration(probe_duration(path), config)
