"""Shared data types used across Keycut."""

from dataclasses import dataclass
from enum import Enum
from fractions import Fraction


@dataclass(frozen=True)
class TimeSpec:
    """A parsed time token in exact seconds.

    ``epsilon`` is only set for frame-index tokens (``f<N>``) and absorbs the
    muxer's timestamp rounding around that frame.
    """

    token: str
    seconds: Fraction
    epsilon: Fraction | None = None


@dataclass(frozen=True)
class MediaInfo:
    """Metadata extracted from a media file via ffprobe."""

    codec_name: str
    time_base_den: int
    fps: tuple[int, int] | None
    duration: Fraction
    has_audio: bool = True


class CutCase(str, Enum):
    ON_KEYFRAME = "on_keyframe"
    SINGLE_GOP = "single_gop"
    SPLIT_GOP = "split_gop"


@dataclass(frozen=True)
class CutPlan:
    """Resolved boundaries for one cut. Offsets are relative to ``prev_keyframe``."""

    case: CutCase
    start_raw: Fraction
    start_search: Fraction
    end_time: Fraction
    prev_keyframe: Fraction
    next_keyframe: Fraction
    frame_epsilon: Fraction
    start_offset: Fraction | None = None
    end_offset: Fraction | None = None
    keyframe_offset: Fraction | None = None

    @property
    def duration(self) -> Fraction:
        return self.end_time - self.start_raw
