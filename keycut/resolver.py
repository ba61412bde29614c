"""Boundary resolution — turns parsed times and keyframes into a CutPlan.

Three sources of time disagree slightly: what the user typed, where the
container quantized each frame's timestamp, and where the muxer rounds on
output. Comparisons against keyframes therefore use ``frame_epsilon`` (a
third of a frame) instead of exact equality.
"""

from collections.abc import Iterable
from fractions import Fraction

from keycut.errors import EmptyRange, NoKeyframeFound
from keycut.logging_config import logger
from keycut.models import CutCase, CutPlan, MediaInfo, TimeSpec
from keycut.timeparse import EPSILON_DIVISOR, format_seconds, frame_epsilon

_ZERO = Fraction(0)


def _clamp(value: Fraction, low: Fraction | None, high: Fraction) -> Fraction:
    if low is not None and value < low:
        return low
    return min(value, high)


def find_keyframes(
    keyframes: Iterable[Fraction], target: Fraction
) -> tuple[Fraction, Fraction]:
    """Scan forward once for ``(prev, next)`` around *target*.

    ``next`` is the first keyframe at or after *target*; ``prev`` is the one
    scanned just before it, or 0 when ``next`` is the first keyframe.
    """
    prev = _ZERO
    for kf in keyframes:
        if kf >= target:
            return prev, kf
        prev = kf
    raise NoKeyframeFound(f"no keyframe found at or after {format_seconds(target)}s")


def _plan_on_keyframe(**bounds) -> CutPlan:
    return CutPlan(case=CutCase.ON_KEYFRAME, **bounds)


def _plan_single_gop(**bounds) -> CutPlan:
    prev = bounds["prev_keyframe"]
    return CutPlan(
        case=CutCase.SINGLE_GOP,
        start_offset=bounds["start_raw"] - prev,
        end_offset=bounds["end_time"] - prev,
        **bounds,
    )


def _plan_split_gop(**bounds) -> CutPlan:
    prev = bounds["prev_keyframe"]
    start_offset = bounds["start_raw"] - prev
    # Stop just short of the keyframe: it opens the copied segment instead
    keyframe_offset = bounds["next_keyframe"] - prev - bounds["frame_epsilon"]
    if keyframe_offset <= start_offset:
        keyframe_offset = bounds["next_keyframe"] - prev
    return CutPlan(
        case=CutCase.SPLIT_GOP,
        start_offset=start_offset,
        keyframe_offset=keyframe_offset,
        **bounds,
    )


_PLANNERS = {
    CutCase.ON_KEYFRAME: _plan_on_keyframe,
    CutCase.SINGLE_GOP: _plan_single_gop,
    CutCase.SPLIT_GOP: _plan_split_gop,
}


def classify(
    start_raw: Fraction, end_time: Fraction, next_keyframe: Fraction, epsilon: Fraction
) -> CutCase:
    if abs(next_keyframe - start_raw) < epsilon:
        return CutCase.ON_KEYFRAME
    if end_time <= next_keyframe:
        return CutCase.SINGLE_GOP
    return CutCase.SPLIT_GOP


def resolve(
    start: TimeSpec,
    end: TimeSpec,
    media: MediaInfo,
    keyframes: Iterable[Fraction],
    epsilon_divisor: int = EPSILON_DIVISOR,
) -> CutPlan:
    """Resolve the cut ``[start, end)`` against *media* and its *keyframes*.

    *keyframes* is consumed lazily and only as far as the first keyframe at
    or after the start.
    """
    start_raw = start.seconds
    start_search = start.seconds - (start.epsilon or 0)
    end_time = end.seconds - (end.epsilon or 0)

    if end_time <= start_search:
        raise EmptyRange(f"empty or inverted range: start {start.token!r}, end {end.token!r}")

    duration = media.duration
    start_raw = _clamp(start_raw, _ZERO, duration)
    start_search = _clamp(start_search, _ZERO, duration)
    end_time = _clamp(end_time, None, duration)

    if end_time <= start_search:
        raise EmptyRange(
            f"range {start.token!r}..{end.token!r} is empty within "
            f"{format_seconds(duration)}s of media"
        )

    epsilon = frame_epsilon(media.fps, epsilon_divisor)
    prev_kf, next_kf = find_keyframes(keyframes, start_search)
    case = classify(start_raw, end_time, next_kf, epsilon)

    plan = _PLANNERS[case](
        start_raw=start_raw,
        start_search=start_search,
        end_time=end_time,
        prev_keyframe=prev_kf,
        next_keyframe=next_kf,
        frame_epsilon=epsilon,
    )
    logger.info(
        "Cut %s..%s resolved as %s (keyframes %s / %s)",
        format_seconds(plan.start_raw),
        format_seconds(plan.end_time),
        plan.case.value,
        format_seconds(prev_kf),
        format_seconds(next_kf),
    )
    return plan
