"""Time token parsing into exact rational seconds.

Accepted tokens, in precedence order:

* ``f<N>``      frame index, converted with the media's exact frame rate
* ``p/q``       exact fraction of seconds
* ``ss``, ``mm:ss``, ``hh:mm:ss``  components may carry a decimal part

Everything is computed with :class:`fractions.Fraction`; decimal strings only
appear when a value is handed to ffmpeg (see :func:`format_seconds`).
"""

import re
from decimal import ROUND_HALF_EVEN, Decimal, localcontext
from fractions import Fraction

from keycut.errors import InvalidTimeFormat, MissingFrameRate
from keycut.models import MediaInfo, TimeSpec

# One third of a frame: absorbs ~1ms muxer rounding without reaching the
# neighbouring frame while fps < 666.
EPSILON_DIVISOR = 3

# Fractional digits used when rendering seconds for ffmpeg.
DECIMAL_PLACES = 10

_FRAME_RE = re.compile(r"^f(\d+)$")
_FRACTION_RE = re.compile(r"^(\d+)/(\d+)$")
_NUMBER_RE = re.compile(r"^(?:\d+(?:\.\d*)?|\.\d+)$")
_WEIGHTS = {1: (1,), 2: (60, 1), 3: (3600, 60, 1)}


def frame_epsilon(fps: tuple[int, int] | None, divisor: int = EPSILON_DIVISOR) -> Fraction:
    """Return ``1 / (divisor * fps)`` as an exact fraction."""
    if fps is None or fps[0] <= 0 or fps[1] <= 0:
        raise MissingFrameRate("media has no usable frame rate")
    num, den = fps
    return Fraction(den, divisor * num)


def _colon_parts(token: str) -> list[str]:
    parts = token.split(":")
    if len(parts) > 3:
        raise InvalidTimeFormat(f"invalid time {token!r}: too many parts")
    if not all(_NUMBER_RE.match(p) for p in parts):
        raise InvalidTimeFormat(f"invalid time {token!r}")
    return parts


def check_time_token(token: str) -> None:
    """Validate the syntax of *token* without needing media metadata."""
    token = token.strip()
    if _FRAME_RE.match(token):
        return
    m = _FRACTION_RE.match(token)
    if m:
        if int(m.group(2)) == 0:
            raise InvalidTimeFormat(f"invalid time {token!r}: zero denominator")
        return
    _colon_parts(token)


def parse_time(
    token: str, media: MediaInfo | None, epsilon_divisor: int = EPSILON_DIVISOR
) -> TimeSpec:
    """Parse *token* into a :class:`TimeSpec`.

    *media* is only consulted for frame-index tokens and may be ``None``
    otherwise.
    """
    token = token.strip()
    check_time_token(token)

    m = _FRAME_RE.match(token)
    if m:
        fps = media.fps if media is not None else None
        try:
            epsilon = frame_epsilon(fps, epsilon_divisor)
        except MissingFrameRate:
            raise MissingFrameRate(
                f"cannot convert frame index {token!r}: media has no usable frame rate"
            ) from None
        num, den = fps
        return TimeSpec(token=token, seconds=Fraction(int(m.group(1)) * den, num), epsilon=epsilon)

    m = _FRACTION_RE.match(token)
    if m:
        return TimeSpec(token=token, seconds=Fraction(int(m.group(1)), int(m.group(2))))

    parts = _colon_parts(token)
    seconds = sum(
        (w * Fraction(p) for w, p in zip(_WEIGHTS[len(parts)], parts)), Fraction(0)
    )
    return TimeSpec(token=token, seconds=seconds)


def format_seconds(value: Fraction) -> str:
    """Render *value* as a plain decimal string, e.g. ``0.3333333333``.

    Never emits exponent notation or a bare leading ``.``.
    """
    value = Fraction(value)
    with localcontext() as ctx:
        ctx.prec = 50
        d = Decimal(value.numerator) / Decimal(value.denominator)
        d = d.quantize(Decimal(1).scaleb(-DECIMAL_PLACES), rounding=ROUND_HALF_EVEN)
    text = f"{d:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        text = "0"
    return text
